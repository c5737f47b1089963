"""Targets: output profiles.

Every setting is optional; ``None`` means the profile leaves it to the next
layer of :func:`px_forge.config.merge_settings`.
"""

from dataclasses import dataclass
from enum import StrEnum, auto
from typing import Any, Dict, Optional, Tuple

from px_forge.errors import DocumentError
from px_forge.types import AssetId, AssetKind, SourceLocation


class SheetMode(StrEnum):
    NONE = auto()
    AUTO = auto()
    FIXED = auto()


class PaletteMode(StrEnum):
    RGBA = auto()
    INDEXED = auto()


@dataclass(frozen=True)
class Target:
    name: str
    format: str = "png"
    scale: Optional[int] = None
    sheet: Optional[SheetMode] = None
    sheet_size: Optional[Tuple[int, int]] = None
    padding: Optional[int] = None
    palette_mode: Optional[PaletteMode] = None
    tile_size: Optional[int] = None
    shader: Optional[str] = None
    location: Optional[SourceLocation] = None

    kind = AssetKind.TARGET

    @property
    def id(self) -> AssetId:
        return AssetId(self.kind, self.name)


def parse_sheet(value: Any) -> Tuple[SheetMode, Optional[Tuple[int, int]]]:
    """Interpret ``none``/``false``, ``auto``/``true`` or ``WxH``."""
    if value is None or value is False:
        return SheetMode.NONE, None
    if value is True:
        return SheetMode.AUTO, None
    text = str(value).strip().lower()
    if text in ("none", "false", "no"):
        return SheetMode.NONE, None
    if text in ("auto", "true", "yes"):
        return SheetMode.AUTO, None
    width, sep, height = text.partition("x")
    if sep and width.isdigit() and height.isdigit():
        return SheetMode.FIXED, (int(width), int(height))
    raise DocumentError(f"invalid sheet setting {value!r}")


BUILTIN_TARGETS: Dict[str, Target] = {
    "web": Target(name="web", format="png"),
    "sheet": Target(name="sheet", format="png", sheet=SheetMode.AUTO),
    "p8": Target(
        name="p8",
        format="p8",
        scale=1,
        sheet=SheetMode.FIXED,
        sheet_size=(128, 128),
        padding=0,
        palette_mode=PaletteMode.INDEXED,
        tile_size=8,
    ),
}
