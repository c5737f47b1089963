"""Post-processing effects over RGBA buffers.

Effects touch color channels only; alpha is preserved. They run in the
order the shader lists them.
"""

import logging
from typing import Iterable

import numpy as np

from px_forge.assets import Brightness, Contrast, CustomEffect, Effect, Scanlines, Vignette
from px_forge.render.result import UInt8Array


logger = logging.getLogger(__name__)


def _vignette(rgb: np.ndarray, strength: float) -> np.ndarray:
    height, width = rgb.shape[:2]
    ys = (np.arange(height) + 0.5) / height - 0.5
    xs = (np.arange(width) + 0.5) / width - 0.5
    distance = np.sqrt(ys[:, None] ** 2 + xs[None, :] ** 2) / np.sqrt(0.5)
    factor = 1.0 - strength * distance**2
    return rgb * np.clip(factor, 0.0, 1.0)[:, :, None]


def _scanlines(rgb: np.ndarray, opacity: float, gap: int) -> np.ndarray:
    out = rgb.copy()
    out[:: max(gap, 1)] *= 1.0 - opacity
    return out


def apply_effects(pixels: UInt8Array, effects: Iterable[Effect]) -> UInt8Array:
    """Return a new buffer with ``effects`` applied in order."""
    effects = list(effects)
    if not effects or pixels.size == 0:
        return pixels
    rgb = pixels[:, :, :3].astype(np.float64)
    for effect in effects:
        if isinstance(effect, Vignette):
            rgb = _vignette(rgb, effect.strength)
        elif isinstance(effect, Scanlines):
            rgb = _scanlines(rgb, effect.opacity, effect.gap)
        elif isinstance(effect, Brightness):
            rgb = rgb + effect.amount * 255.0
        elif isinstance(effect, Contrast):
            rgb = (rgb - 128.0) * (1.0 + effect.amount) + 128.0
        elif isinstance(effect, CustomEffect):
            logger.debug(f"skipping custom effect '{effect.name}'")
        rgb = np.clip(rgb, 0.0, 255.0)
    out = pixels.copy()
    out[:, :, :3] = np.rint(rgb).astype(np.uint8)
    return out
