"""Stamps: fixed pixel units made of semantic tokens.

A stamp's tokens carry meaning (edge, fill, transparent) rather than colors;
the active palette decides what ``edge`` and ``fill`` look like.
"""

from dataclasses import dataclass
from enum import StrEnum, auto
from typing import Dict, Optional, Sequence, Tuple

from px_forge.errors import DocumentError
from px_forge.types import AssetId, AssetKind, Glyph, SourceLocation


class StampToken(StrEnum):
    EDGE = auto()
    FILL = auto()
    TRANSPARENT = auto()


TOKEN_CHARS: Dict[str, StampToken] = {
    "$": StampToken.EDGE,
    ".": StampToken.FILL,
    " ": StampToken.FILL,
    "x": StampToken.TRANSPARENT,
    "X": StampToken.TRANSPARENT,
}


@dataclass(frozen=True)
class Stamp:
    name: str
    pixels: Tuple[Tuple[StampToken, ...], ...]
    glyph: Optional[Glyph] = None
    location: Optional[SourceLocation] = None

    kind = AssetKind.STAMP

    @property
    def id(self) -> AssetId:
        return AssetId(self.kind, self.name)

    @property
    def width(self) -> int:
        return len(self.pixels[0]) if self.pixels else 0

    @property
    def height(self) -> int:
        return len(self.pixels)


def stamp_from_rows(
    name: str,
    rows: Sequence[str],
    glyph: Optional[Glyph] = None,
    location: Optional[SourceLocation] = None,
) -> Stamp:
    """Build a stamp from token rows such as ``["$$", "$."]``.

    Raises:
        DocumentError: On an unknown token or a non-rectangular grid.
    """
    if not rows:
        raise DocumentError(f"stamp '{name}' has an empty grid")
    width = len(rows[0])
    pixels = []
    for row in rows:
        if len(row) != width:
            raise DocumentError(f"stamp '{name}' rows must all be {width} wide")
        try:
            pixels.append(tuple(TOKEN_CHARS[c] for c in row))
        except KeyError as exc:
            raise DocumentError(f"stamp '{name}' has unknown token {exc.args[0]!r}") from exc
    return Stamp(name=name, pixels=tuple(pixels), glyph=glyph, location=location)


def _builtin(name: str, glyph: Glyph, token: str) -> Stamp:
    return stamp_from_rows(name, [token], glyph=glyph)


# One-pixel units backing the builtin glyph table, keyed by glyph.
BUILTIN_GLYPHS: Dict[Glyph, Stamp] = {
    "+": _builtin("corner", "+", "$"),
    "-": _builtin("edge-h", "-", "$"),
    "|": _builtin("edge-v", "|", "$"),
    "#": _builtin("solid", "#", "$"),
    ".": _builtin("fill", ".", "."),
    "x": _builtin("transparent", "x", "x"),
    " ": _builtin("space", " ", "."),
}

BUILTIN_STAMPS: Dict[str, Stamp] = {s.name: s for s in BUILTIN_GLYPHS.values()}
