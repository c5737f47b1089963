"""Shelf packing of rendered results into one atlas.

Width rule: the atlas is the smallest power of two that is at least as wide
as the widest input and at least the side of a square holding the total
padded area, ``next_pow2(max(max_w, ceil(sqrt(sum((w + p) * (h + p))))))``.
A fixed width may be passed instead (fixed-size sheet targets); it still
grows to the widest input, so no frame is ever clipped.

Rectangles are stably sorted by height, tallest first, then placed left to
right. A rectangle that would cross the right edge opens a new shelf below
the current one (unless it is the first on its shelf). Padding separates
neighbours on a shelf and consecutive shelves; there is none at the edges.
"""

from dataclasses import dataclass
import math
from typing import Optional, Sequence, Tuple

from px_forge.render.result import RenderedResult, UInt8Array, new_canvas, paste


@dataclass(frozen=True)
class Frame:
    name: str
    x: int
    y: int
    width: int
    height: int


@dataclass(frozen=True, eq=False)
class Sheet:
    pixels: UInt8Array
    frames: Tuple[Frame, ...]

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])


def next_power_of_two(n: int) -> int:
    return 1 if n <= 1 else 1 << (n - 1).bit_length()


def sheet_width(sizes: Sequence[Tuple[int, int]], padding: int) -> int:
    if not sizes:
        return 0
    widest = max(w for w, _ in sizes)
    area = sum((w + padding) * (h + padding) for w, h in sizes)
    return next_power_of_two(max(widest, math.ceil(math.sqrt(area))))


def pack(
    results: Sequence[RenderedResult],
    padding: int = 0,
    width: Optional[int] = None,
    height: Optional[int] = None,
) -> Sheet:
    """Pack ``results`` into one atlas.

    Args:
        results: Rendered buffers; their names become frame names.
        padding: Gap in pixels between rectangles and between shelves.
        width: Fixed atlas width, widened to the widest result if needed;
            computed by the width rule when ``None``.
        height: Minimum atlas height (fixed-size sheets).

    Returns:
        The atlas and its frames in packing order.
    """
    ordered = sorted(results, key=lambda r: r.height, reverse=True)
    atlas_width = width if width is not None else sheet_width([r.size for r in ordered], padding)
    # a fixed width never clips; it grows to the widest sprite
    atlas_width = max([atlas_width] + [r.width for r in ordered])
    frames = []
    cursor_x = cursor_y = shelf_height = 0
    for result in ordered:
        w, h = result.size
        if cursor_x > 0 and cursor_x + w > atlas_width:
            cursor_y += shelf_height + padding
            cursor_x = shelf_height = 0
        frames.append(Frame(result.name, cursor_x, cursor_y, w, h))
        cursor_x += w + padding
        shelf_height = max(shelf_height, h)
    atlas_height = cursor_y + shelf_height
    if height is not None:
        atlas_height = max(atlas_height, height)
    pixels = new_canvas(atlas_width, atlas_height)
    for frame, result in zip(frames, ordered):
        paste(pixels, result.pixels, frame.x, frame.y)
    return Sheet(pixels=pixels, frames=tuple(frames))
