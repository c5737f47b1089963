"""RGBA helpers and the pure color transforms used by expressions.

Colors are plain ``(r, g, b, a)`` tuples of ints in ``0..255``. Lightness and
saturation adjustments go through HSL (``colorsys`` HLS); a zero amount
always returns the input untouched so the transforms have exact identities.
"""

import colorsys
from typing import Tuple

from px_forge.errors import ColorExpressionError
from px_forge.types import Rgba


MAGENTA: Rgba = (255, 0, 255, 255)
TRANSPARENT: Rgba = (0, 0, 0, 0)
BLACK: Rgba = (0, 0, 0, 255)
WHITE: Rgba = (255, 255, 255, 255)


def parse_hex(text: str) -> Rgba:
    """Parse ``#RGB``, ``#RGBA``, ``#RRGGBB`` or ``#RRGGBBAA`` (``#`` optional)."""
    digits = text.strip().removeprefix("#")
    if len(digits) in (3, 4):
        digits = "".join(c * 2 for c in digits)
    if len(digits) == 6:
        digits += "ff"
    if len(digits) != 8:
        raise ColorExpressionError(f"invalid hex color '{text}'")
    try:
        r, g, b, a = (int(digits[i : i + 2], 16) for i in range(0, 8, 2))
    except ValueError as exc:
        raise ColorExpressionError(f"invalid hex color '{text}'") from exc
    return (r, g, b, a)


def to_hex(color: Rgba) -> str:
    r, g, b, a = color
    if a == 255:
        return f"#{r:02x}{g:02x}{b:02x}"
    return f"#{r:02x}{g:02x}{b:02x}{a:02x}"


def _clamp(value: float) -> int:
    return max(0, min(255, round(value)))


def _to_hls(color: Rgba) -> Tuple[float, float, float]:
    r, g, b, _ = color
    return colorsys.rgb_to_hls(r / 255.0, g / 255.0, b / 255.0)


def _from_hls(h: float, l: float, s: float, alpha: int) -> Rgba:
    r, g, b = colorsys.hls_to_rgb(h % 1.0, min(1.0, max(0.0, l)), min(1.0, max(0.0, s)))
    return (_clamp(r * 255), _clamp(g * 255), _clamp(b * 255), alpha)


def lighten(color: Rgba, amount: float) -> Rgba:
    """Move lightness toward white by ``amount`` (a 0..1 fraction)."""
    if amount == 0:
        return color
    h, l, s = _to_hls(color)
    return _from_hls(h, l + (1.0 - l) * amount, s, color[3])


def darken(color: Rgba, amount: float) -> Rgba:
    """Move lightness toward black by ``amount`` (a 0..1 fraction)."""
    if amount == 0:
        return color
    h, l, s = _to_hls(color)
    return _from_hls(h, l - l * amount, s, color[3])


def saturate(color: Rgba, amount: float) -> Rgba:
    if amount == 0:
        return color
    h, l, s = _to_hls(color)
    return _from_hls(h, l, s + (1.0 - s) * amount, color[3])


def desaturate(color: Rgba, amount: float) -> Rgba:
    if amount == 0:
        return color
    h, l, s = _to_hls(color)
    return _from_hls(h, l, s - s * amount, color[3])


def hue_shift(color: Rgba, degrees: float) -> Rgba:
    """Rotate hue by ``degrees``; full turns are identities."""
    if degrees % 360 == 0:
        return color
    h, l, s = _to_hls(color)
    return _from_hls(h + degrees / 360.0, l, s, color[3])


def mix(a: Rgba, b: Rgba, amount: float) -> Rgba:
    """Linear per-channel blend, ``amount`` = 0 gives ``a``, 1 gives ``b``."""
    if a == b or amount == 0:
        return a
    return tuple(_clamp(x * (1.0 - amount) + y * amount) for x, y in zip(a, b))  # type: ignore[return-value]


def with_alpha(color: Rgba, amount: float) -> Rgba:
    """Replace the alpha channel with ``amount`` (0..1) of full opacity."""
    r, g, b, _ = color
    return (r, g, b, _clamp(amount * 255))
