"""Asset definitions.

Every definition the registry stores is a frozen dataclass exposing ``kind``
and ``id``. Builtin stamps, brushes, the ``default`` palette and shader and
the builtin targets are plain module constants; they back lookups that miss
the registry but are never registered themselves.
"""

from typing import Union

from .brush import BUILTIN_BRUSHES, Brush, brush_from_rows
from .composition import EMPTY, Composition, Map, Prefab
from .palette import DEFAULT_PALETTE, Palette, parse_palette_body
from .shader import (
    DEFAULT_SHADER,
    Brightness,
    Contrast,
    CustomEffect,
    Effect,
    Scanlines,
    Shader,
    Vignette,
    merge_shader,
    parse_effect,
)
from .shape import BrushRef, FillRef, LegendEntry, Shape, StampRef, pad_rows
from .stamp import (
    BUILTIN_GLYPHS,
    BUILTIN_STAMPS,
    Stamp,
    StampToken,
    stamp_from_rows,
)
from .target import BUILTIN_TARGETS, PaletteMode, SheetMode, Target, parse_sheet


Asset = Union[Palette, Stamp, Brush, Shader, Shape, Prefab, Map, Target]

__all__ = [
    "Asset",
    "BUILTIN_BRUSHES",
    "BUILTIN_GLYPHS",
    "BUILTIN_STAMPS",
    "BUILTIN_TARGETS",
    "Brightness",
    "Brush",
    "BrushRef",
    "Composition",
    "Contrast",
    "CustomEffect",
    "DEFAULT_PALETTE",
    "DEFAULT_SHADER",
    "EMPTY",
    "Effect",
    "FillRef",
    "LegendEntry",
    "Map",
    "Palette",
    "PaletteMode",
    "Prefab",
    "Scanlines",
    "Shader",
    "Shape",
    "SheetMode",
    "Stamp",
    "StampRef",
    "StampToken",
    "Target",
    "Vignette",
    "brush_from_rows",
    "merge_shader",
    "pad_rows",
    "parse_effect",
    "parse_palette_body",
    "parse_sheet",
    "stamp_from_rows",
]
