"""Rendered results and the pixel-buffer primitives every stage shares.

Buffers are ``uint8`` arrays shaped ``(height, width, 4)``, row-major RGBA.
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple

import numpy as np
import numpy.typing as npt

from px_forge.color import MAGENTA
from px_forge.types import AssetKind, PixelPosition, Rgba


UInt8Array = npt.NDArray[np.uint8]
BoolArray = npt.NDArray[np.bool_]


@dataclass(frozen=True)
class Placement:
    """One child instance drawn into a composition."""

    name: str
    position: PixelPosition


@dataclass(frozen=True, eq=False)
class RenderedResult:
    """Pixels plus provenance.

    Attributes:
        name: Source asset name.
        kind: Source asset kind.
        pixels: ``(height, width, 4)`` RGBA buffer.
        tags: Tags copied from the source asset.
        placements: Row-major child placements, compositions only.
    """

    name: str
    kind: AssetKind
    pixels: UInt8Array
    tags: Tuple[str, ...] = ()
    placements: Tuple[Placement, ...] = ()

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    def pixel(self, x: int, y: int) -> Rgba:
        r, g, b, a = (int(v) for v in self.pixels[y, x])
        return (r, g, b, a)

    def instances(self) -> Dict[str, List[PixelPosition]]:
        """Every position each referenced name was placed at, names sorted."""
        grouped: Dict[str, List[PixelPosition]] = {}
        for placement in self.placements:
            grouped.setdefault(placement.name, []).append(placement.position)
        return {name: grouped[name] for name in sorted(grouped)}


def new_canvas(width: int, height: int) -> UInt8Array:
    return np.zeros((height, width, 4), dtype=np.uint8)


def solid(width: int, height: int, color: Rgba) -> UInt8Array:
    canvas = new_canvas(width, height)
    canvas[:, :] = color
    return canvas


def placeholder(width: int = 1, height: int = 1) -> UInt8Array:
    """The visible stand-in for anything that failed to resolve."""
    return solid(width, height, MAGENTA)


def blit(dest: UInt8Array, src: UInt8Array, x: int, y: int) -> None:
    """Alpha-aware copy of ``src`` onto ``dest`` at ``(x, y)``, in place.

    Source pixels with nonzero alpha replace the destination; fully
    transparent ones leave it as is. Parts outside ``dest`` are clipped.
    """
    height, width = dest.shape[:2]
    x0, y0 = max(x, 0), max(y, 0)
    x1, y1 = min(x + src.shape[1], width), min(y + src.shape[0], height)
    if x0 >= x1 or y0 >= y1:
        return
    region = src[y0 - y : y1 - y, x0 - x : x1 - x]
    mask: BoolArray = region[:, :, 3] > 0
    dest[y0:y1, x0:x1][mask] = region[mask]


def paste(dest: UInt8Array, src: UInt8Array, x: int, y: int) -> None:
    """Opaque copy of ``src`` onto ``dest`` at ``(x, y)``, clipped."""
    height, width = dest.shape[:2]
    x1, y1 = min(x + src.shape[1], width), min(y + src.shape[0], height)
    if x >= x1 or y >= y1:
        return
    dest[y:y1, x:x1] = src[: y1 - y, : x1 - x]
