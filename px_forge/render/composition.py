"""Prefab and map compositing on a uniform cell grid.

The cell size is the largest width and the largest height among the
children the grid actually places, never less than 1x1. Children are blitted
at the top-left of their cell with alpha-aware overwrite.
"""

import logging
from typing import List, Mapping, Tuple

from px_forge.assets import Composition
from px_forge.diagnostics import Diagnostic, warning
from px_forge.render.result import (
    Placement,
    RenderedResult,
    blit,
    new_canvas,
    placeholder,
)


logger = logging.getLogger(__name__)


def cell_size(
    composition: Composition, children: Mapping[str, RenderedResult]
) -> Tuple[int, int]:
    used = {g for row in composition.grid for g in row}
    sizes = [
        children[value].size
        for glyph, value in composition.legend.items()
        if glyph in used and value in children and not composition.is_empty(value)
    ]
    width = max((w for w, _ in sizes), default=1)
    height = max((h for _, h in sizes), default=1)
    return max(width, 1), max(height, 1)


def render_composition(
    composition: Composition, children: Mapping[str, RenderedResult]
) -> Tuple[RenderedResult, List[Diagnostic]]:
    """Composite already rendered ``children`` (keyed by legend value).

    A legend value missing from ``children`` and a non-space glyph without a
    legend entry are drawn as magenta cells with a warning. The reserved
    ``empty`` value of maps draws nothing and records no placement.
    """
    cell_w, cell_h = cell_size(composition, children)
    canvas = new_canvas(composition_columns(composition) * cell_w, len(composition.grid) * cell_h)
    placements: List[Placement] = []
    diagnostics: List[Diagnostic] = []
    location = composition.location

    for r, row in enumerate(composition.grid):
        for c, glyph in enumerate(row):
            x, y = c * cell_w, r * cell_h
            where = location.at(r, c) if location else None
            value = composition.legend.get(glyph)
            if value is None:
                if glyph != " ":
                    diagnostics.append(
                        warning(
                            "unmapped-glyph",
                            f"symbol '{glyph}' has no legend entry",
                            asset=composition.id,
                            symbol=glyph,
                            location=where,
                        )
                    )
                    blit(canvas, placeholder(cell_w, cell_h), x, y)
                continue
            if composition.is_empty(value):
                continue
            child = children.get(value)
            if child is None:
                diagnostics.append(
                    warning(
                        "missing-ref",
                        f"symbol '{glyph}' refers to unknown shape or prefab '{value}'",
                        asset=composition.id,
                        symbol=glyph,
                        names=(value,),
                        location=where,
                    )
                )
                blit(canvas, placeholder(cell_w, cell_h), x, y)
                continue
            blit(canvas, child.pixels, x, y)
            placements.append(Placement(value, (x, y)))

    logger.debug(
        f"composed {composition.kind} '{composition.name}': "
        f"{len(placements)} instances, cell {cell_w}x{cell_h}"
    )
    result = RenderedResult(
        name=composition.name,
        kind=composition.kind,
        pixels=canvas,
        tags=composition.tags,
        placements=tuple(placements),
    )
    return result, diagnostics


def composition_columns(composition: Composition) -> int:
    return max((len(row) for row in composition.grid), default=0)
