# contrast/color.py
"""
WCAG 2.1 color math: sRGB linearization, relative luminance, contrast ratio,
and 8-bit hex encoding.
"""

import re
from typing import Optional

from .core import Color


WHITE = Color(1.0, 1.0, 1.0)
BLACK = Color(0.0, 0.0, 0.0)

_HEX_PATTERN = re.compile(r"[0-9A-Fa-f]{6}")


def linearize(channel: float) -> float:
    """Convert one sRGB channel (0..1) to linear light."""
    if channel <= 0.04045:
        return channel / 12.92
    return ((channel + 0.055) / 1.055) ** 2.4


def relative_luminance(color: Color) -> float:
    return (
        0.2126 * linearize(color.r) +
        0.7152 * linearize(color.g) +
        0.0722 * linearize(color.b)
    )


def contrast_ratio(l1: float, l2: float) -> float:
    """
    Contrast ratio between two relative luminances.

    Argument order does not matter; the result lies in [1, 21].
    """
    lighter = max(l1, l2)
    darker = min(l1, l2)
    return (lighter + 0.05) / (darker + 0.05)


def contrast_ratio_for(foreground: Color, background: Color) -> float:
    return contrast_ratio(relative_luminance(foreground), relative_luminance(background))


def rgb_to_hex(color: Color) -> str:
    """Quantize to 8 bits per channel and format as ``#RRGGBB``."""
    channels = (_to_byte(color.r), _to_byte(color.g), _to_byte(color.b))
    return "#" + "".join(f"{value:02X}" for value in channels)


def hex_to_rgb(value) -> Optional[Color]:
    """
    Parse ``#RRGGBB`` or ``RRGGBB``.

    Returns None for anything else. Shorthand, alpha, named colors,
    surrounding whitespace and non-string input are not supported.
    """
    if not isinstance(value, str):
        return None

    digits = value[1:] if value.startswith("#") else value
    if not _HEX_PATTERN.fullmatch(digits):
        return None

    n = int(digits, 16)
    return Color(
        r=((n >> 16) & 255) / 255,
        g=((n >> 8) & 255) / 255,
        b=(n & 255) / 255,
    )


def _to_byte(channel: float) -> int:
    # Round half up like the host does, clamped for out-of-range inputs
    return min(255, max(0, int(channel * 255 + 0.5)))
