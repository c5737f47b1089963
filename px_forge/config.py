"""Build settings and their priority chain.

Each layer is a partial mapping of setting name to value where ``None`` (or
absence) means "not set here". :func:`merge_settings` walks the layers from
highest to lowest priority: command line, target profile, per-asset header,
then the compiled-in defaults below.
"""

from dataclasses import dataclass, fields, replace
import logging
from typing import Any, Dict, Mapping, Optional, Tuple

from px_forge.assets import PaletteMode, SheetMode, Target


logger = logging.getLogger(__name__)

DEFAULT_SCALE = 1
DEFAULT_SHEET = SheetMode.NONE
DEFAULT_PADDING = 0
DEFAULT_PALETTE_MODE = PaletteMode.RGBA
DEFAULT_TILE_SIZE: Optional[int] = None
DEFAULT_WORKERS = 4


@dataclass(frozen=True)
class BuildSettings:
    """Fully merged settings the core consumes.

    Attributes:
        scale: Integer upscale factor, at least 1.
        sheet: Whether and how results are packed into an atlas.
        sheet_size: Atlas size for ``SheetMode.FIXED``.
        padding: Pixels between packed sprites.
        palette_mode: Full color or palette-constrained output.
        tile_size: Cell size for fixed-grid formats.
        shader: Shader name to render with; ``None`` means ``default``.
        workers: Render worker threads.
    """

    scale: int = DEFAULT_SCALE
    sheet: SheetMode = DEFAULT_SHEET
    sheet_size: Optional[Tuple[int, int]] = None
    padding: int = DEFAULT_PADDING
    palette_mode: PaletteMode = DEFAULT_PALETTE_MODE
    tile_size: Optional[int] = DEFAULT_TILE_SIZE
    shader: Optional[str] = None
    workers: int = DEFAULT_WORKERS

    def __post_init__(self) -> None:
        if self.scale < 1:
            raise ValueError(f"scale must be >= 1, got {self.scale}")
        if self.padding < 0:
            raise ValueError(f"padding must be >= 0, got {self.padding}")
        if self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")
        if self.sheet == SheetMode.FIXED and self.sheet_size is None:
            raise ValueError("a fixed sheet needs a sheet_size")


SETTING_NAMES = tuple(f.name for f in fields(BuildSettings))


def target_layer(target: Optional[Target]) -> Mapping[str, Any]:
    """The settings a target profile contributes."""
    if target is None:
        return {}
    return {
        "scale": target.scale,
        "sheet": target.sheet,
        "sheet_size": target.sheet_size,
        "padding": target.padding,
        "palette_mode": target.palette_mode,
        "tile_size": target.tile_size,
        "shader": target.shader,
    }


def merge_settings(
    cli: Optional[Mapping[str, Any]] = None,
    target: Optional[Target] = None,
    header: Optional[Mapping[str, Any]] = None,
    defaults: BuildSettings = BuildSettings(),
) -> BuildSettings:
    """Merge the layers, first non-``None`` value wins per setting.

    Unknown keys in a layer are ignored with a debug log.
    """
    updates: Dict[str, Any] = {}
    for layer in (header or {}, target_layer(target), cli or {}):
        for key, value in layer.items():
            if key not in SETTING_NAMES:
                logger.debug(f"ignoring unknown setting '{key}'")
                continue
            if value is not None:
                updates[key] = value
    return replace(defaults, **updates)
