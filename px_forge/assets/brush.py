"""Brushes: positional token patterns colored at the point of use."""

from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

from px_forge.errors import DocumentError
from px_forge.types import AssetId, AssetKind, SourceLocation


@dataclass(frozen=True)
class Brush:
    name: str
    rows: Tuple[str, ...]
    location: Optional[SourceLocation] = None

    kind = AssetKind.BRUSH

    @property
    def id(self) -> AssetId:
        return AssetId(self.kind, self.name)

    @property
    def width(self) -> int:
        return len(self.rows[0])

    @property
    def height(self) -> int:
        return len(self.rows)

    def token_at(self, x: int, y: int) -> str:
        """Token at ``(x, y)``, wrapping so the pattern tiles forever."""
        return self.rows[y % self.height][x % self.width]

    @property
    def tokens(self) -> Tuple[str, ...]:
        return tuple(sorted({c for row in self.rows for c in row}))


def brush_from_rows(
    name: str, rows: Sequence[str], location: Optional[SourceLocation] = None
) -> Brush:
    cleaned = tuple(row.strip() for row in rows if row.strip())
    if not cleaned:
        raise DocumentError(f"brush '{name}' has an empty pattern")
    if len({len(row) for row in cleaned}) != 1:
        raise DocumentError(f"brush '{name}' pattern is not rectangular")
    return Brush(name=name, rows=cleaned, location=location)


BUILTIN_BRUSHES: Dict[str, Brush] = {
    b.name: b
    for b in (
        brush_from_rows("solid", ["A"]),
        brush_from_rows("checker", ["AB", "BA"]),
        brush_from_rows("diagonal-r", ["AB", "BA"]),
        brush_from_rows("diagonal-l", ["BA", "AB"]),
        brush_from_rows("h-line", ["A", "B"]),
        brush_from_rows("v-line", ["AB"]),
        brush_from_rows("noise", ["ABBA", "BAAB", "AABB", "BBAA"]),
    )
}
