"""Symbol resolution.

A grid character resolves through four tiers, first match wins:

1. the legend of the asset being rendered;
2. a registered stamp declaring the character as its default glyph;
3. the builtin one-pixel table (``+ - | # . x`` and space);
4. a magenta placeholder plus a warning.

A legend entry that names an unknown stamp or brush does not fall through to
the later tiers; it becomes a placeholder, since the author asked for that
specific asset.
"""

from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Tuple, Union

from pyrsistent import pmap
from pyrsistent.typing import PMap

from px_forge.assets import (
    BUILTIN_GLYPHS,
    Brush,
    FillRef,
    LegendEntry,
    Stamp,
    StampRef,
)
from px_forge.diagnostics import Diagnostic, warning
from px_forge.expr import ColorExpr
from px_forge.registry import Registry
from px_forge.types import AssetId, Glyph, SourceLocation


@dataclass(frozen=True)
class StampGlyph:
    stamp: Stamp


@dataclass(frozen=True)
class BrushGlyph:
    """A brush drawn once at its native size."""

    brush: Brush
    bindings: PMap[str, ColorExpr] = field(default_factory=pmap)


@dataclass(frozen=True)
class FillGlyph:
    """A brush tiled across the whole cell footprint."""

    brush: Brush
    bindings: PMap[str, ColorExpr] = field(default_factory=pmap)


@dataclass(frozen=True)
class PlaceholderGlyph:
    symbol: Glyph


ResolvedGlyph = Union[StampGlyph, BrushGlyph, FillGlyph, PlaceholderGlyph]


def native_size(glyph: ResolvedGlyph) -> Tuple[int, int]:
    """Width and height a glyph asks for before row/column fitting."""
    if isinstance(glyph, StampGlyph):
        return glyph.stamp.width, glyph.stamp.height
    if isinstance(glyph, (BrushGlyph, FillGlyph)):
        return glyph.brush.width, glyph.brush.height
    return 1, 1


class GlyphResolver:
    """Resolves characters against one registry."""

    def __init__(self, registry: Registry) -> None:
        self.registry = registry

    def resolve(
        self,
        symbol: Glyph,
        legend: Mapping[Glyph, LegendEntry],
        owner: Optional[AssetId] = None,
        location: Optional[SourceLocation] = None,
    ) -> Tuple[ResolvedGlyph, List[Diagnostic]]:
        entry = legend.get(symbol)
        if entry is not None:
            return self._from_legend(symbol, entry, owner, location)
        stamp = self.registry.stamp_for_glyph(symbol)
        if stamp is not None:
            return StampGlyph(stamp), []
        if symbol in BUILTIN_GLYPHS:
            return StampGlyph(BUILTIN_GLYPHS[symbol]), []
        return PlaceholderGlyph(symbol), [
            warning(
                "unresolved-glyph",
                f"symbol '{symbol}' matches no legend entry, stamp glyph or builtin",
                asset=owner,
                symbol=symbol,
                location=location,
            )
        ]

    def _from_legend(
        self,
        symbol: Glyph,
        entry: LegendEntry,
        owner: Optional[AssetId],
        location: Optional[SourceLocation],
    ) -> Tuple[ResolvedGlyph, List[Diagnostic]]:
        if isinstance(entry, StampRef):
            stamp = self.registry.stamp(entry.stamp)
            if stamp is not None:
                return StampGlyph(stamp), []
            return PlaceholderGlyph(symbol), [
                warning(
                    "missing-stamp",
                    f"symbol '{symbol}' refers to unknown stamp '{entry.stamp}'",
                    asset=owner,
                    symbol=symbol,
                    names=(entry.stamp,),
                    location=location,
                )
            ]
        brush = self.registry.brush(entry.brush)
        if brush is None:
            return PlaceholderGlyph(symbol), [
                warning(
                    "missing-brush",
                    f"symbol '{symbol}' refers to unknown brush '{entry.brush}'",
                    asset=owner,
                    symbol=symbol,
                    names=(entry.brush,),
                    location=location,
                )
            ]
        if isinstance(entry, FillRef):
            return FillGlyph(brush, entry.bindings), []
        return BrushGlyph(brush, entry.bindings), []
