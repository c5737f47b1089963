"""Registry-wide checks that do not need rendering.

Every check returns diagnostics and never raises; the registry itself has
already rejected structural cycles.
"""

from typing import Iterable, List, Optional

from px_forge.assets import (
    BUILTIN_GLYPHS,
    BrushRef,
    Composition,
    FillRef,
    Shape,
    StampRef,
)
from px_forge.diagnostics import Diagnostic, Diagnostics, collect, warning
from px_forge.expr import references
from px_forge.registry import Registry
from px_forge.types import AssetKind


def _used_glyphs(grid: Iterable[str]) -> set:
    return {g for row in grid for g in row}


def check_empty_grids(registry: Registry) -> List[Diagnostic]:
    found = []
    for kind in (AssetKind.SHAPE, AssetKind.PREFAB, AssetKind.MAP):
        for asset in registry.of_kind(kind):
            if not asset.grid or not any(row.strip() for row in asset.grid):  # type: ignore[union-attr]
                found.append(
                    warning(
                        "empty-grid",
                        f"{asset.id} has an empty grid",
                        asset=asset.id,
                        location=asset.location,
                    )
                )
    return found


def check_duplicate_names(registry: Registry) -> List[Diagnostic]:
    prefabs = {p.name for p in registry.of_kind(AssetKind.PREFAB)}
    return [
        warning(
            "duplicate-name",
            f"'{shape.name}' is both a shape and a prefab; compositions use the shape",
            asset=shape.id,
            names=(shape.name,),
            location=shape.location,
        )
        for shape in registry.of_kind(AssetKind.SHAPE)
        if shape.name in prefabs
    ]


def check_shape(registry: Registry, shape: Shape) -> List[Diagnostic]:
    found = []
    used = _used_glyphs(shape.grid)
    for symbol, entry in sorted(shape.legend.items()):
        if isinstance(entry, StampRef) and registry.stamp(entry.stamp) is None:
            found.append(
                warning(
                    "missing-stamp",
                    f"symbol '{symbol}' refers to unknown stamp '{entry.stamp}'",
                    asset=shape.id,
                    symbol=symbol,
                    names=(entry.stamp,),
                    location=shape.location,
                )
            )
        elif isinstance(entry, (BrushRef, FillRef)) and registry.brush(entry.brush) is None:
            found.append(
                warning(
                    "missing-brush",
                    f"symbol '{symbol}' refers to unknown brush '{entry.brush}'",
                    asset=shape.id,
                    symbol=symbol,
                    names=(entry.brush,),
                    location=shape.location,
                )
            )
        if symbol not in used:
            found.append(
                warning(
                    "unused-legend",
                    f"legend symbol '{symbol}' is not used in the grid",
                    asset=shape.id,
                    symbol=symbol,
                    location=shape.location,
                )
            )
    for symbol in sorted(used):
        if symbol in shape.legend or symbol in BUILTIN_GLYPHS:
            continue
        if registry.stamp_for_glyph(symbol) is None:
            found.append(
                warning(
                    "unresolved-glyph",
                    f"symbol '{symbol}' matches no legend entry, stamp glyph or builtin",
                    asset=shape.id,
                    symbol=symbol,
                    location=shape.location,
                )
            )
    return found


def check_composition(registry: Registry, composition: Composition) -> List[Diagnostic]:
    found = []
    used = _used_glyphs(composition.grid)
    for symbol, value in sorted(composition.legend.items()):
        if not composition.is_empty(value) and registry.child(value) is None:
            found.append(
                warning(
                    "missing-ref",
                    f"symbol '{symbol}' refers to unknown shape or prefab '{value}'",
                    asset=composition.id,
                    symbol=symbol,
                    names=(value,),
                    location=composition.location,
                )
            )
        if symbol not in used:
            found.append(
                warning(
                    "unused-legend",
                    f"legend symbol '{symbol}' is not used in the grid",
                    asset=composition.id,
                    symbol=symbol,
                    location=composition.location,
                )
            )
    for symbol in sorted(used - set(composition.legend) - {" "}):
        found.append(
            warning(
                "unmapped-glyph",
                f"symbol '{symbol}' has no legend entry",
                asset=composition.id,
                symbol=symbol,
                location=composition.location,
            )
        )
    return found


def check_palettes(registry: Registry, shader_name: Optional[str] = None) -> List[Diagnostic]:
    """Shader palettes exist, and brush bindings name defined colors."""
    found = []
    for shader in registry.of_kind(AssetKind.SHADER):
        palette = registry.shader(shader.name).palette  # type: ignore[union-attr]
        if palette and not registry.colors.has_palette(palette):
            found.append(
                warning(
                    "missing-palette",
                    f"shader '{shader.name}' uses unknown palette '{palette}'",
                    asset=shader.id,
                    names=(palette,),
                    location=shader.location,
                )
            )
    active = registry.shader(shader_name)
    palette_name = active.palette if active.palette and registry.colors.has_palette(active.palette) else "default"
    palette = registry.colors.palette(palette_name)
    defined = set(palette.colors)
    if active.variant:
        defined |= set(palette.variants.get(active.variant, {}))
    for shape in registry.of_kind(AssetKind.SHAPE):
        for symbol, entry in sorted(shape.legend.items()):  # type: ignore[union-attr]
            if not isinstance(entry, (BrushRef, FillRef)):
                continue
            for expr in entry.bindings.values():
                for name in references(expr):
                    if name not in defined:
                        found.append(
                            warning(
                                "missing-color",
                                f"symbol '{symbol}' binds undefined color '${name}' "
                                f"of palette '{palette_name}'",
                                asset=shape.id,
                                symbol=symbol,
                                names=(name,),
                                location=shape.location,
                            )
                        )
    return found


def check_stamp_sizes(registry: Registry, tile_size: Optional[int]) -> List[Diagnostic]:
    if tile_size is None:
        return []
    found = []
    for stamp in registry.of_kind(AssetKind.STAMP):
        if (stamp.width, stamp.height) != (tile_size, tile_size):  # type: ignore[union-attr]
            found.append(
                warning(
                    "stamp-size-mismatch",
                    f"stamp '{stamp.name}' is {stamp.width}x{stamp.height}, "  # type: ignore[union-attr]
                    f"not the {tile_size}x{tile_size} tile size",
                    asset=stamp.id,
                    location=stamp.location,
                )
            )
    return found


def validate(
    registry: Registry, shader: Optional[str] = None, tile_size: Optional[int] = None
) -> Diagnostics:
    """All registry diagnostics plus every check above, in a stable order."""
    per_asset: List[Diagnostic] = []
    for asset_id in registry.order:
        asset = registry.assets[asset_id]
        if isinstance(asset, Shape):
            per_asset.extend(check_shape(registry, asset))
        elif isinstance(asset, Composition):
            per_asset.extend(check_composition(registry, asset))
    return collect(
        registry.diagnostics,
        check_empty_grids(registry),
        check_duplicate_names(registry),
        per_asset,
        check_palettes(registry, shader),
        check_stamp_sizes(registry, tile_size),
    )
