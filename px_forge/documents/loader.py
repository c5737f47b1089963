"""Document to asset conversion.

Each ``_load_<kind>`` reads the header keys and body format of one kind and
returns the frozen asset. Malformed input raises :class:`DocumentError`
carrying the document's location; nothing here consults other assets.
"""

import logging
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Tuple

from pyrsistent import pmap

from px_forge.assets import (
    Asset,
    Brush,
    BrushRef,
    FillRef,
    LegendEntry,
    Map,
    PaletteMode,
    Palette,
    Prefab,
    Shader,
    Shape,
    Stamp,
    StampRef,
    Target,
    brush_from_rows,
    pad_rows,
    parse_effect,
    parse_palette_body,
    parse_sheet,
    stamp_from_rows,
)
from px_forge.documents.document import Document
from px_forge.errors import ColorExpressionError, DocumentError
from px_forge.expr import parse_expr, split_args
from px_forge.registry import Registry, RegistryBuilder
from px_forge.types import AssetKind


logger = logging.getLogger(__name__)


def grid_rows(body: str) -> Tuple[str, ...]:
    """Body lines with surrounding blank lines dropped."""
    lines = body.split("\n")
    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()
    return tuple(line.rstrip("\r") for line in lines)


def parse_tags(value: Any) -> Tuple[str, ...]:
    """Tags from ``"#a #b"`` or ``["a", "#b"]``."""
    if value is None:
        return ()
    items = value.split() if isinstance(value, str) else [str(v) for v in value]
    return tuple(tag.lstrip("#") for tag in items if tag.lstrip("#"))


def _inline_mapping(text: str) -> Dict[str, str]:
    inner = text.strip()[1:-1]
    mapping: Dict[str, str] = {}
    for item in split_args(inner):
        if not item:
            continue
        key, sep, value = item.partition(":")
        if not sep:
            raise DocumentError(f"expected 'key: value' in legend entry, got '{item}'")
        mapping[key.strip()] = value.strip()
    return mapping


def parse_legend_value(value: Any) -> LegendEntry:
    """Interpret one shape legend value.

    ``brick`` names a stamp; ``{brush: b, A: $edge}`` draws a brush once;
    ``{fill: b, A: $edge, B: #fff}`` tiles it. Brush tokens left unbound are
    transparent. ``{stamp: b}`` names a stamp; with bindings it is read as a
    brush drawn once.
    """
    if isinstance(value, str):
        text = value.strip()
        if not (text.startswith("{") and text.endswith("}")):
            if not text:
                raise DocumentError("empty legend value")
            return StampRef(text)
        value = _inline_mapping(text)
    if not isinstance(value, Mapping):
        raise DocumentError(f"unsupported legend value {value!r}")
    options = {str(k).strip(): str(v).strip() for k, v in value.items()}
    try:
        if "fill" in options:
            name = options.pop("fill")
            return FillRef(name, pmap({k: parse_expr(v) for k, v in options.items()}))
        if "brush" in options:
            name = options.pop("brush")
            return BrushRef(name, pmap({k: parse_expr(v) for k, v in options.items()}))
        name = options.pop("stamp", None)
        if name is None:
            raise DocumentError(f"legend entry needs 'stamp', 'brush' or 'fill': {value!r}")
        if not options:
            return StampRef(name)
        return BrushRef(name, pmap({k: parse_expr(v) for k, v in options.items()}))
    except ColorExpressionError as exc:
        raise DocumentError(f"bad color binding in legend entry {value!r}: {exc}") from exc


def _int(doc: Document, key: str) -> Optional[int]:
    value = doc.header.get(key)
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise DocumentError(f"{_where(doc)}: '{key}' must be an integer, got {value!r}") from exc


def _where(doc: Document) -> str:
    return f"{doc.kind} '{doc.name}' ({doc.location})" if doc.location else f"{doc.kind} '{doc.name}'"


def _load_palette(doc: Document) -> Palette:
    try:
        colors, variants = parse_palette_body(doc.body, doc.location)
    except ColorExpressionError as exc:
        raise DocumentError(f"{_where(doc)}: {exc}") from exc
    return Palette(
        name=doc.name,
        colors=colors,
        variants=variants,
        inherits=doc.header.get("inherits"),
        location=doc.location,
    )


def _load_stamp(doc: Document) -> Stamp:
    glyph = doc.header.get("glyph")
    if glyph is not None and len(str(glyph)) != 1:
        raise DocumentError(f"{_where(doc)}: glyph must be one character, got {glyph!r}")
    return stamp_from_rows(
        doc.name,
        grid_rows(doc.body),
        glyph=None if glyph is None else str(glyph),
        location=doc.location,
    )


def _load_brush(doc: Document) -> Brush:
    return brush_from_rows(doc.name, grid_rows(doc.body), location=doc.location)


def _load_shader(doc: Document) -> Shader:
    effects = doc.header.get("effects") or ()
    if not isinstance(effects, (list, tuple)):
        raise DocumentError(f"{_where(doc)}: effects must be a list")
    return Shader(
        name=doc.name,
        palette=doc.header.get("palette"),
        variant=doc.header.get("palette_variant") or doc.header.get("variant"),
        inherits=doc.header.get("inherits"),
        effects=tuple(parse_effect(effect) for effect in effects),
        location=doc.location,
    )


def _load_shape(doc: Document) -> Shape:
    legend = {}
    for symbol, value in doc.legend.items():
        if len(symbol) != 1:
            raise DocumentError(f"{_where(doc)}: legend symbol {symbol!r} is not one character")
        legend[symbol] = parse_legend_value(value)
    return Shape(
        name=doc.name,
        grid=pad_rows(grid_rows(doc.body)),
        legend=pmap(legend),
        tags=parse_tags(doc.header.get("tags")),
        location=doc.location,
    )


def _composition_legend(doc: Document) -> Dict[str, str]:
    legend = {}
    for symbol, value in doc.legend.items():
        if len(symbol) != 1 or not isinstance(value, str) or not value.strip():
            raise DocumentError(
                f"{_where(doc)}: legend entries must map one character to a name, got "
                f"{symbol!r}: {value!r}"
            )
        legend[symbol] = value.strip()
    return legend


def _load_prefab(doc: Document) -> Prefab:
    return Prefab(
        name=doc.name,
        grid=pad_rows(grid_rows(doc.body)),
        legend=pmap(_composition_legend(doc)),
        tags=parse_tags(doc.header.get("tags")),
        location=doc.location,
    )


def _load_map(doc: Document) -> Map:
    return Map(
        name=doc.name,
        grid=pad_rows(grid_rows(doc.body)),
        legend=pmap(_composition_legend(doc)),
        tags=parse_tags(doc.header.get("tags")),
        location=doc.location,
    )


def _load_target(doc: Document) -> Target:
    sheet, sheet_size = (None, None)
    if "sheet" in doc.header:
        sheet, sheet_size = parse_sheet(doc.header["sheet"])
    palette_mode = doc.header.get("palette_mode")
    try:
        mode = PaletteMode(str(palette_mode).lower()) if palette_mode is not None else None
    except ValueError as exc:
        raise DocumentError(f"{_where(doc)}: unknown palette_mode {palette_mode!r}") from exc
    scale = _int(doc, "scale")
    if scale is not None and scale < 1:
        raise DocumentError(f"{_where(doc)}: scale must be >= 1")
    return Target(
        name=doc.name,
        format=str(doc.header.get("format", "png")),
        scale=scale,
        sheet=sheet,
        sheet_size=sheet_size,
        padding=_int(doc, "padding"),
        palette_mode=mode,
        tile_size=_int(doc, "tile_size"),
        shader=doc.header.get("shader"),
        location=doc.location,
    )


LOADERS: Dict[AssetKind, Callable[[Document], Asset]] = {
    AssetKind.PALETTE: _load_palette,
    AssetKind.STAMP: _load_stamp,
    AssetKind.BRUSH: _load_brush,
    AssetKind.SHADER: _load_shader,
    AssetKind.SHAPE: _load_shape,
    AssetKind.PREFAB: _load_prefab,
    AssetKind.MAP: _load_map,
    AssetKind.TARGET: _load_target,
}


def load_document(doc: Document) -> Asset:
    """Convert one document into its asset.

    Raises:
        DocumentError: Unknown kind or malformed content.
    """
    try:
        kind = AssetKind(doc.kind.strip().lower())
    except ValueError as exc:
        raise DocumentError(f"unknown asset kind '{doc.kind}' for '{doc.name}'") from exc
    try:
        return LOADERS[kind](doc)
    except DocumentError as exc:
        if doc.location is not None and str(doc.location) not in str(exc):
            raise DocumentError(f"{doc.location}: {exc}") from exc
        raise


def load_documents(docs: Iterable[Document]) -> RegistryBuilder:
    """Load every document into a fresh builder."""
    builder = RegistryBuilder()
    for doc in docs:
        builder.register(load_document(doc))
    return builder


def load_registry(docs: Iterable[Document]) -> Registry:
    return load_documents(docs).build()
