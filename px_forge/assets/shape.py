"""Shapes: character grids whose symbols resolve to stamps and brushes."""

from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

from pyrsistent import pmap
from pyrsistent.typing import PMap

from px_forge.expr import ColorExpr
from px_forge.types import AssetId, AssetKind, Glyph, SourceLocation


@dataclass(frozen=True)
class StampRef:
    """Legend entry drawing a stamp."""

    stamp: str


@dataclass(frozen=True)
class BrushRef:
    """Legend entry drawing a brush pattern once, colored by ``bindings``."""

    brush: str
    bindings: PMap[str, ColorExpr] = field(default_factory=pmap)


@dataclass(frozen=True)
class FillRef:
    """Legend entry tiling a brush over the whole cell."""

    brush: str
    bindings: PMap[str, ColorExpr] = field(default_factory=pmap)


LegendEntry = Union[StampRef, BrushRef, FillRef]


def pad_rows(rows: Tuple[str, ...], fill: str = " ") -> Tuple[str, ...]:
    """Right-pad ragged rows so the grid is rectangular."""
    width = max((len(row) for row in rows), default=0)
    return tuple(row.ljust(width, fill) for row in rows)


@dataclass(frozen=True)
class Shape:
    """One ASCII composition.

    Attributes:
        name: Shape name.
        grid: Rectangular rows of glyphs.
        legend: Local glyph overrides, highest resolution priority.
        tags: Free-form labels, ``#`` stripped.
        location: Location of the first grid row.
    """

    name: str
    grid: Tuple[str, ...]
    legend: PMap[Glyph, LegendEntry] = field(default_factory=pmap)
    tags: Tuple[str, ...] = ()
    location: Optional[SourceLocation] = None

    kind = AssetKind.SHAPE

    @property
    def id(self) -> AssetId:
        return AssetId(self.kind, self.name)

