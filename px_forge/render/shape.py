"""Shape rendering with variable row and column geometry.

Each grid row is as tall as its tallest cell and each column as wide as its
widest cell. Cell content is anchored at the top-left of its footprint;
nothing is centered here. Fill cells tile their brush across the entire
footprint using canvas coordinates, so neighbouring fill cells join without
a seam.
"""

import logging
from typing import Dict, List, Tuple

import numpy as np
from pyrsistent.typing import PMap

from px_forge.assets import Brush, Shader, Shape, Stamp, StampToken
from px_forge.color import MAGENTA, TRANSPARENT
from px_forge.diagnostics import Diagnostic, warning
from px_forge.errors import UndefinedColorError
from px_forge.expr import ColorExpr
from px_forge.registry import Registry
from px_forge.render.glyphs import (
    BrushGlyph,
    FillGlyph,
    GlyphResolver,
    PlaceholderGlyph,
    ResolvedGlyph,
    StampGlyph,
    native_size,
)
from px_forge.render.result import RenderedResult, UInt8Array, new_canvas, paste, placeholder
from px_forge.types import Rgba


logger = logging.getLogger(__name__)


class Colorizer:
    """Per-render color lookups bound to one shader.

    Missing colors become magenta with one warning per name; cycles
    propagate as :class:`~px_forge.errors.ColorCycleError`.
    """

    def __init__(self, registry: Registry, shader: Shader, shape: Shape) -> None:
        self.engine = registry.colors
        self.shape = shape
        self.diagnostics: List[Diagnostic] = []
        self._warned: set = set()
        self.palette = shader.palette or "default"
        if not self.engine.has_palette(self.palette):
            self._warn(
                "missing-palette",
                f"shader '{shader.name}' uses unknown palette '{self.palette}'; using 'default'",
                self.palette,
            )
            self.palette = "default"
        self.variant = shader.variant
        if self.variant and not self.engine.has_variant(self.palette, self.variant):
            self._warn(
                "missing-variant",
                f"palette '{self.palette}' has no variant '{self.variant}'; using base colors",
                self.variant,
            )
            self.variant = None
        self._cache: Dict[str, Rgba] = {}

    def _warn(self, code: str, message: str, name: str) -> None:
        if (code, name) in self._warned:
            return
        self._warned.add((code, name))
        self.diagnostics.append(
            warning(code, message, asset=self.shape.id, names=(name,), location=self.shape.location)
        )

    def named(self, name: str) -> Rgba:
        if name not in self._cache:
            try:
                self._cache[name] = self.engine.resolve(name, self.palette, self.variant)
            except UndefinedColorError:
                self._warn(
                    "missing-color", f"color '${name}' is not defined in palette '{self.palette}'", name
                )
                self._cache[name] = MAGENTA
        return self._cache[name]

    def expression(self, expr: ColorExpr) -> Rgba:
        try:
            return self.engine.evaluate(expr, self.palette, self.variant)
        except UndefinedColorError as exc:
            self._warn("missing-color", str(exc), exc.name)
            return MAGENTA

    def stamp(self, stamp: Stamp) -> UInt8Array:
        colors: Dict[StampToken, Rgba] = {StampToken.TRANSPARENT: TRANSPARENT}
        used = {token for row in stamp.pixels for token in row}
        for token in sorted(used - {StampToken.TRANSPARENT}):
            colors[token] = self.named(str(token))
        block = new_canvas(stamp.width, stamp.height)
        for y, row in enumerate(stamp.pixels):
            for x, token in enumerate(row):
                block[y, x] = colors[token]
        return block

    def lookup(self, brush: Brush, bindings: PMap[str, ColorExpr]) -> Tuple[np.ndarray, UInt8Array]:
        """Token index grid of ``brush`` and the RGBA table it indexes.

        Tokens without a binding map to transparent.
        """
        tokens = brush.tokens
        table = np.array(
            [self.expression(bindings[t]) if t in bindings else TRANSPARENT for t in tokens],
            dtype=np.uint8,
        )
        index = np.array([[tokens.index(c) for c in row] for row in brush.rows], dtype=np.intp)
        return index, table


def tile_brush(
    index: np.ndarray, table: UInt8Array, width: int, height: int, x0: int = 0, y0: int = 0
) -> UInt8Array:
    """Repeat a brush over ``width`` x ``height``, phase taken from ``(x0, y0)``."""
    rows = (np.arange(height) + y0) % index.shape[0]
    cols = (np.arange(width) + x0) % index.shape[1]
    return table[index[np.ix_(rows, cols)]]


def _cell_geometry(cells: List[List[ResolvedGlyph]]) -> Tuple[List[int], List[int]]:
    heights = [max((native_size(g)[1] for g in row), default=0) for row in cells]
    widths: List[int] = []
    for column in range(len(cells[0]) if cells else 0):
        widths.append(max(native_size(row[column])[0] for row in cells))
    return widths, heights


def _offsets(sizes: List[int]) -> List[int]:
    return [int(v) for v in np.concatenate(([0], np.cumsum(sizes)))[:-1]] if sizes else []


def render_shape(
    shape: Shape, shader: Shader, registry: Registry
) -> Tuple[RenderedResult, List[Diagnostic]]:
    """Render ``shape`` through ``shader``.

    Returns:
        The rendered result and the warnings raised on the way.

    Raises:
        ColorCycleError: A color needed by the shape is part of a cycle.
    """
    resolver = GlyphResolver(registry)
    colors = Colorizer(registry, shader, shape)
    diagnostics: List[Diagnostic] = []
    location = shape.location

    cells: List[List[ResolvedGlyph]] = []
    for r, row in enumerate(shape.grid):
        resolved_row = []
        for c, symbol in enumerate(row):
            glyph, problems = resolver.resolve(
                symbol, shape.legend, shape.id, location.at(r, c) if location else None
            )
            resolved_row.append(glyph)
            diagnostics.extend(problems)
        cells.append(resolved_row)

    widths, heights = _cell_geometry(cells)
    xs, ys = _offsets(widths), _offsets(heights)
    canvas = new_canvas(sum(widths), sum(heights))
    stamps: Dict[Stamp, UInt8Array] = {}

    for r, row in enumerate(cells):
        for c, glyph in enumerate(row):
            x, y = xs[c], ys[r]
            if isinstance(glyph, StampGlyph):
                if glyph.stamp not in stamps:
                    stamps[glyph.stamp] = colors.stamp(glyph.stamp)
                paste(canvas, stamps[glyph.stamp], x, y)
            elif isinstance(glyph, FillGlyph):
                index, table = colors.lookup(glyph.brush, glyph.bindings)
                paste(canvas, tile_brush(index, table, widths[c], heights[r], x, y), x, y)
            elif isinstance(glyph, BrushGlyph):
                index, table = colors.lookup(glyph.brush, glyph.bindings)
                paste(canvas, tile_brush(index, table, glyph.brush.width, glyph.brush.height), x, y)
            elif isinstance(glyph, PlaceholderGlyph):
                paste(canvas, placeholder(), x, y)

    logger.debug(f"rendered shape '{shape.name}' at {canvas.shape[1]}x{canvas.shape[0]}")
    result = RenderedResult(
        name=shape.name, kind=shape.kind, pixels=canvas, tags=shape.tags
    )
    return result, diagnostics + colors.diagnostics
