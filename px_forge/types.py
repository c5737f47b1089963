"""Common type aliases and enumerations.

``AssetId`` is the kind-agnostic handle every cross reference is expressed
with; the registry graph, cycle detector and build order never look past it.
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Optional, Tuple


Rgba = Tuple[int, int, int, int]
PixelPosition = Tuple[int, int]  # (x, y) in pixels
GridPosition = Tuple[int, int]  # (column, row)
Glyph = str


class AssetKind(StrEnum):
    """Every kind of named definition the registry stores.

    Declaration order doubles as the tie-break order of the build order.
    """

    PALETTE = "palette"
    STAMP = "stamp"
    BRUSH = "brush"
    SHADER = "shader"
    SHAPE = "shape"
    PREFAB = "prefab"
    MAP = "map"
    TARGET = "target"


KIND_ORDER = {kind: index for index, kind in enumerate(AssetKind)}


@dataclass(frozen=True, order=True)
class AssetId:
    """Tagged identifier of one asset: ``kind`` plus ``name``."""

    kind: AssetKind
    name: str

    def __str__(self) -> str:
        return f"{self.kind}:{self.name}"

    def sort_key(self) -> Tuple[int, str]:
        return (KIND_ORDER[self.kind], self.name)


@dataclass(frozen=True)
class SourceLocation:
    """Where a definition (or one grid cell of it) came from."""

    path: Optional[str] = None
    line: Optional[int] = None
    column: Optional[int] = None

    def at(self, row: int, column: int) -> "SourceLocation":
        """Location of a grid cell, ``row`` lines below this one."""
        line = None if self.line is None else self.line + row
        return SourceLocation(self.path, line, column + 1)

    def __str__(self) -> str:
        parts = [self.path or "<unknown>"]
        if self.line is not None:
            parts.append(str(self.line))
            if self.column is not None:
                parts.append(str(self.column))
        return ":".join(parts)
