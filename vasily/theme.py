"""Theme colours and the latency heatmap gradient."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Tuple, Union

RGB = Tuple[float, float, float]

ANSI_GRADIENT = ("2", "3", "1")
ANSI256_GRADIENT = ("119", "112", "148", "142", "136", "130", "124")

_WHITE_REF = (0.95047, 1.00000, 1.08883)
_LONG_HEX = re.compile(r"#([0-9a-fA-F]{2})([0-9a-fA-F]{2})([0-9a-fA-F]{2})")
_SHORT_HEX = re.compile(r"#([0-9a-fA-F])([0-9a-fA-F])([0-9a-fA-F])")


@dataclass(frozen=True)
class CompleteColor:
    """A colour given for true-colour, 256-colour and 16-colour terminals."""

    true_color: str = ""
    ansi256: str = ""
    ansi: str = ""


Color = Union[str, CompleteColor, None]


@dataclass(frozen=True)
class AdaptiveColor:
    """A colour chosen by whether the terminal background is light or dark."""

    light: Color = None
    dark: Color = None


DEFAULT_COLORS = {
    "surface": None,
    "on_surface": AdaptiveColor(light="#222222", dark="#BBBBBB"),
    "on_surface_variant": AdaptiveColor(light="#444444", dark="#888888"),
    "primary": AdaptiveColor(
        light=CompleteColor("#68a3ff", "33", "12"),
        dark=CompleteColor("#1c3965", "18", "4"),
    ),
    "on_primary": AdaptiveColor(light="#111111", dark="#CCCCCC"),
    "secondary": AdaptiveColor(
        light=CompleteColor("#9cc3ff", "251", "7"),
        dark=CompleteColor("#323a47", "237", "8"),
    ),
    "on_secondary": AdaptiveColor(light="#111111", dark="#CCCCCC"),
    "error": AdaptiveColor(dark=CompleteColor("#a8242a", "124", "1")),
    "on_error": AdaptiveColor(
        light=CompleteColor("#d22f37", "124", "1"),
        dark=CompleteColor("#CCCCCC", "252", "7"),
    ),
}


def hex_color(s: str) -> RGB:
    """Parse "#rrggbb" or "#rgb" into RGB in [0, 1]; pure red if s is invalid."""
    m = _LONG_HEX.fullmatch(s)
    if m:
        return tuple(int(g, 16) / 255.0 for g in m.groups())  # type: ignore[return-value]
    m = _SHORT_HEX.fullmatch(s)
    if m:
        return tuple(int(g, 16) / 15.0 for g in m.groups())  # type: ignore[return-value]
    return (1.0, 0.0, 0.0)


def _to_hex(rgb: RGB) -> str:
    return "#" + "".join(f"{int(c * 255.0 + 0.5):02x}" for c in rgb)


def _linearize(v: float) -> float:
    return v / 12.92 if v <= 0.04045 else ((v + 0.055) / 1.055) ** 2.4


def _delinearize(v: float) -> float:
    return 12.92 * v if v <= 0.0031308 else 1.055 * v ** (1.0 / 2.4) - 0.055


def _lab_f(t: float) -> float:
    if t > 6.0**3 / 29.0**3:
        return t ** (1.0 / 3.0)
    return t / 3.0 * 29.0**2 / 6.0**2 + 4.0 / 29.0


def _lab_finv(t: float) -> float:
    if t > 6.0 / 29.0:
        return t**3
    return 3.0 * 6.0**2 / 29.0**2 * (t - 4.0 / 29.0)


def _to_hcl(rgb: RGB) -> Tuple[float, float, float]:
    r, g, b = (_linearize(c) for c in rgb)
    x = 0.4124564 * r + 0.3575761 * g + 0.1804375 * b
    y = 0.2126729 * r + 0.7151522 * g + 0.0721750 * b
    z = 0.0193339 * r + 0.1191920 * g + 0.9503041 * b
    fx, fy, fz = (_lab_f(v / w) for v, w in zip((x, y, z), _WHITE_REF))
    lum = 1.16 * fy - 0.16
    a = 5.0 * (fx - fy)
    bb = 2.0 * (fy - fz)
    h = math.degrees(math.atan2(bb, a)) % 360.0
    c = math.hypot(a, bb)
    return h, c, lum


def _from_hcl(h: float, c: float, lum: float) -> RGB:
    rad = math.radians(h)
    a, bb = c * math.cos(rad), c * math.sin(rad)
    l2 = (lum + 0.16) / 1.16
    x = _WHITE_REF[0] * _lab_finv(l2 + a / 5.0)
    y = _WHITE_REF[1] * _lab_finv(l2)
    z = _WHITE_REF[2] * _lab_finv(l2 - bb / 2.0)
    r = 3.2404542 * x - 1.5371385 * y - 0.4985314 * z
    g = -0.9692660 * x + 1.8760108 * y + 0.0415560 * z
    b = 0.0556434 * x - 0.2040259 * y + 1.0572252 * z
    return tuple(min(1.0, max(0.0, _delinearize(v))) for v in (r, g, b))  # type: ignore[return-value]


def _interp_angle(a0: float, a1: float, t: float) -> float:
    delta = ((a1 - a0) % 360.0 + 540.0) % 360.0 - 180.0
    return (a0 + t * delta + 360.0) % 360.0


def _blend_hcl(low: RGB, high: RGB, t: float) -> RGB:
    h1, c1, l1 = _to_hcl(low)
    h2, c2, l2 = _to_hcl(high)
    # An achromatic end takes the hue of the other.
    if c1 <= 0.00015 and c2 >= 0.00015:
        h1 = h2
    elif c2 <= 0.00015 and c1 >= 0.00015:
        h2 = h1
    return _from_hcl(_interp_angle(h1, h2, t), c1 + t * (c2 - c1), l1 + t * (l2 - l1))


def _pick(palette: Tuple[str, ...], v: float) -> str:
    return palette[math.floor(v * (len(palette) - 1) + 0.5)]


def _color(low: str, high: str, v: float) -> CompleteColor:
    return CompleteColor(
        true_color=_to_hex(_blend_hcl(hex_color(low), hex_color(high), v)),
        ansi256=_pick(ANSI256_GRADIENT, v),
        ansi=_pick(ANSI_GRADIENT, v),
    )


@dataclass(frozen=True)
class Gradient:
    """A colour gradient representing a fraction from 0 to 1."""

    dark_low: str
    dark_high: str
    light_low: str
    light_high: str

    def at(self, v: float) -> AdaptiveColor:
        """Return the colour for v, which must lie in [0, 1]."""
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"gradient position out of range: {v}")
        return AdaptiveColor(
            light=_color(self.light_low, self.light_high, v),
            dark=_color(self.dark_low, self.dark_high, v),
        )


HEATMAP = Gradient(
    light_low="#5ad02d",
    light_high="#d22f37",
    dark_low="#3fa423",
    dark_high="#a8242a",
)