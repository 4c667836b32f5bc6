"""Tagged colour values: hex, HSL and RGBA, with explicit parse/format.

Numeric conversion goes through Pillow's ``ImageColor`` so hex and HSL
strings resolve exactly the way image code elsewhere resolves them.
"""

import math
import re
from dataclasses import dataclass

from PIL import ImageColor

from engine.errors import InputError

_HEX_RE = re.compile(r"^#(?:[0-9a-f]{3}|[0-9a-f]{6})$")
_NUM = r"([-+]?\d*\.?\d+)"
_HSL_RE = re.compile(rf"^hsl\(\s*{_NUM}\s*,\s*{_NUM}%\s*,\s*{_NUM}%\s*\)$")
_RGBA_RE = re.compile(rf"^rgba?\(\s*{_NUM}\s*,\s*{_NUM}\s*,\s*{_NUM}\s*(?:,\s*{_NUM}\s*)?\)$")


@dataclass(frozen=True)
class HexColor:
    value: str  # "#rrggbb", lower case


@dataclass(frozen=True)
class HslColor:
    h: float  # degrees
    s: float  # percent
    l: float  # percent


@dataclass(frozen=True)
class RgbaColor:
    r: int
    g: int
    b: int
    a: float = 1.0


Color = HexColor | HslColor | RgbaColor


def _check_channel(value: float, name: str, high: float) -> float:
    if not math.isfinite(value) or not 0 <= value <= high:
        raise InputError(f"{name} must be in [0, {high:g}], got {value!r}")
    return value


def parse_color(text: str) -> Color:
    """Parse ``#rgb``, ``#rrggbb``, ``hsl(h, s%, l%)``, ``rgb(...)`` or ``rgba(...)``.

    Raises:
        InputError: For anything else, or out-of-range components.
    """
    if not isinstance(text, str):
        raise InputError(f"colour must be a string, got {type(text).__name__}")
    s = text.strip().lower()

    if _HEX_RE.match(s):
        r, g, b = ImageColor.getrgb(s)[:3]
        return HexColor(f"#{r:02x}{g:02x}{b:02x}")

    match = _HSL_RE.match(s)
    if match:
        h, sat, light = (float(v) for v in match.groups())
        _check_channel(sat, "saturation", 100)
        _check_channel(light, "lightness", 100)
        return HslColor(h % 360.0, sat, light)

    match = _RGBA_RE.match(s)
    if match:
        r, g, b, a = match.groups()
        channels = [_check_channel(float(v), "channel", 255) for v in (r, g, b)]
        alpha = _check_channel(float(a), "alpha", 1) if a is not None else 1.0
        return RgbaColor(*(int(round(c)) for c in channels), alpha)

    raise InputError(f"unrecognised colour: {text!r}")


def _num(value: float) -> str:
    text = f"{value:.4f}".rstrip("0").rstrip(".")
    return text or "0"


def format_color(color: Color) -> str:
    if isinstance(color, HexColor):
        return color.value
    if isinstance(color, HslColor):
        return f"hsl({_num(color.h)}, {_num(color.s)}%, {_num(color.l)}%)"
    if isinstance(color, RgbaColor):
        return f"rgba({color.r}, {color.g}, {color.b}, {_num(color.a)})"
    raise InputError(f"not a colour: {color!r}")


def to_rgba(color: Color) -> tuple[int, int, int, float]:
    """Resolve any colour variant to ``(r, g, b, alpha)``."""
    if isinstance(color, RgbaColor):
        return (color.r, color.g, color.b, color.a)
    if isinstance(color, (HexColor, HslColor)):
        r, g, b = ImageColor.getrgb(format_color(color))[:3]
        return (r, g, b, 1.0)
    raise InputError(f"not a colour: {color!r}")


def shift_color(color: Color, amount: float) -> HexColor:
    """Brighten (``amount > 0``) or darken each channel by ``·(1 + amount)``."""
    r, g, b, _ = to_rgba(color)
    shifted = [min(255, max(0, int(round(c * (1.0 + amount))))) for c in (r, g, b)]
    return HexColor("#{:02x}{:02x}{:02x}".format(*shifted))
