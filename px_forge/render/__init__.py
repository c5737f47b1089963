"""Rendering subpackage.

Turns registry assets into RGBA buffers:

* :mod:`~px_forge.render.glyphs` resolves grid characters to units.
* :mod:`~px_forge.render.shape` expands shapes with variable row/column sizes.
* :mod:`~px_forge.render.composition` places children on a uniform grid.
* :mod:`~px_forge.render.sheet` shelf-packs results into an atlas.
* :mod:`~px_forge.render.effects` and :mod:`~px_forge.render.output` finish
  buffers for writers.
"""

from .composition import render_composition
from .effects import apply_effects
from .glyphs import (
    BrushGlyph,
    FillGlyph,
    GlyphResolver,
    PlaceholderGlyph,
    ResolvedGlyph,
    StampGlyph,
)
from .output import scale_pixels, sheet_metadata, to_image, write_png
from .result import Placement, RenderedResult
from .shape import render_shape
from .sheet import Frame, Sheet, pack

__all__ = [
    "BrushGlyph",
    "FillGlyph",
    "Frame",
    "GlyphResolver",
    "Placement",
    "PlaceholderGlyph",
    "RenderedResult",
    "ResolvedGlyph",
    "Sheet",
    "StampGlyph",
    "apply_effects",
    "pack",
    "render_composition",
    "render_shape",
    "scale_pixels",
    "sheet_metadata",
    "to_image",
    "write_png",
]
