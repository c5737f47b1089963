from typing import Dict, Iterable, List, Optional, Sequence

from pyrsistent import pmap

from px_forge.assets import (
    Asset,
    Brush,
    BrushRef,
    FillRef,
    LegendEntry,
    Map,
    Palette,
    Prefab,
    Shape,
    Stamp,
    StampRef,
    brush_from_rows,
    pad_rows,
    stamp_from_rows,
)
from px_forge.assets.palette import parse_palette_body
from px_forge.diagnostics import Diagnostic
from px_forge.expr import parse_expr
from px_forge.registry import Registry, build_registry
from px_forge.render.result import RenderedResult, solid
from px_forge.types import AssetKind, Rgba


EDGE: Rgba = (0x1A, 0x1A, 0x2E, 255)
FILL: Rgba = (0x2D, 0x2D, 0x44, 255)

BRICK_ROWS = ["$$$$", "$..$", "$..$", "$$$$"]


def make_palette(name: str = "default", body: str = "", inherits: Optional[str] = None) -> Palette:
    colors, variants = parse_palette_body(body)
    return Palette(name=name, colors=colors, variants=variants, inherits=inherits)


def scenario_palette() -> Palette:
    """The ``{$edge: #1a1a2e, $fill: #2d2d44}`` palette, registered as ``default``."""
    return make_palette("default", "$edge: #1a1a2e\n$fill: #2d2d44\n")


def make_stamp(name: str, rows: Sequence[str], glyph: Optional[str] = None) -> Stamp:
    return stamp_from_rows(name, list(rows), glyph=glyph)


def make_brush(name: str, rows: Sequence[str]) -> Brush:
    return brush_from_rows(name, list(rows))


def bindings(**colors: str):
    return pmap({token: parse_expr(value) for token, value in colors.items()})


def stamp_ref(name: str) -> StampRef:
    return StampRef(name)


def brush_ref(name: str, **colors: str) -> BrushRef:
    return BrushRef(name, bindings(**colors))


def fill_ref(name: str, **colors: str) -> FillRef:
    return FillRef(name, bindings(**colors))


def make_shape(
    name: str, rows: Sequence[str], legend: Optional[Dict[str, LegendEntry]] = None
) -> Shape:
    return Shape(name=name, grid=pad_rows(tuple(rows)), legend=pmap(legend or {}))


def make_prefab(name: str, rows: Sequence[str], legend: Dict[str, str]) -> Prefab:
    return Prefab(name=name, grid=pad_rows(tuple(rows)), legend=pmap(legend))


def make_map(name: str, rows: Sequence[str], legend: Dict[str, str]) -> Map:
    return Map(name=name, grid=pad_rows(tuple(rows)), legend=pmap(legend))


def make_registry(*assets: Asset) -> Registry:
    return build_registry(assets)


def make_result(name: str, width: int, height: int, color: Rgba = EDGE) -> RenderedResult:
    return RenderedResult(name=name, kind=AssetKind.SHAPE, pixels=solid(width, height, color))


def codes(diagnostics: Iterable[Diagnostic]) -> List[str]:
    return [d.code for d in diagnostics]
