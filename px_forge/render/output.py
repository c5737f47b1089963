"""Handoff helpers for output writers: scaling, Pillow images, sheet JSON."""

from typing import Any, Dict, Union
import os

import numpy as np
from PIL import Image

from px_forge.render.result import UInt8Array
from px_forge.render.sheet import Sheet


APP_NAME = "px-forge"
APP_VERSION = "0.1.0"


def scale_pixels(pixels: UInt8Array, factor: int) -> UInt8Array:
    """Nearest-neighbour integer upscale."""
    if factor < 1:
        raise ValueError(f"scale must be >= 1, got {factor}")
    if factor == 1:
        return pixels
    return np.repeat(np.repeat(pixels, factor, axis=0), factor, axis=1)


def to_image(pixels: UInt8Array) -> Image.Image:
    return Image.fromarray(np.ascontiguousarray(pixels, dtype=np.uint8))


def write_png(pixels: UInt8Array, path: Union[str, "os.PathLike[str]"]) -> None:
    to_image(pixels).save(path, format="PNG")


def sheet_metadata(sheet: Sheet, image: str, scale: int = 1) -> Dict[str, Any]:
    """TexturePacker-style hash description of ``sheet``."""
    frames: Dict[str, Any] = {}
    for frame in sheet.frames:
        frames[frame.name] = {
            "frame": {"x": frame.x, "y": frame.y, "w": frame.width, "h": frame.height},
            "rotated": False,
            "trimmed": False,
            "spriteSourceSize": {"x": 0, "y": 0, "w": frame.width, "h": frame.height},
            "sourceSize": {"w": frame.width, "h": frame.height},
        }
    return {
        "frames": frames,
        "meta": {
            "app": APP_NAME,
            "version": APP_VERSION,
            "image": image,
            "size": {"w": sheet.width, "h": sheet.height},
            "scale": str(scale),
        },
    }
