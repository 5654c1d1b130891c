# variant_engine/colors/color_math.py
# --------------------------------------------------------------------------------------
# Hex parsing and sRGB -> XYZ -> CIE L*a*b* conversion (D65) with CIE76 deltaE.
# --------------------------------------------------------------------------------------
from __future__ import annotations

import math
import re
from typing import Optional, Tuple

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")

# D65 reference white
REF_X = 0.95047
REF_Y = 1.00000
REF_Z = 1.08883

Lab = Tuple[float, float, float]


def is_hex_color(value: str | None) -> bool:
    if not value or not isinstance(value, str):
        return False
    return bool(_HEX_RE.match(value.strip()))


def normalize_hex(value: str | None) -> Optional[str]:
    """'#ABC' / 'aabbcc' -> '#aabbcc'; None if not a 3/6 digit hex."""
    if not is_hex_color(value):
        return None
    digits = value.strip().lstrip("#").lower()
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    return f"#{digits}"


def hex_to_rgb(value: str | None) -> Optional[Tuple[int, int, int]]:
    hx = normalize_hex(value)
    if hx is None:
        return None
    return int(hx[1:3], 16), int(hx[3:5], 16), int(hx[5:7], 16)


def _linearize(c: float) -> float:
    return c / 12.92 if c <= 0.04045 else ((c + 0.055) / 1.055) ** 2.4


def rgb_to_xyz(rgb: Tuple[int, int, int]) -> Tuple[float, float, float]:
    r, g, b = (_linearize(v / 255) for v in rgb)
    return (
        r * 0.4124 + g * 0.3576 + b * 0.1805,
        r * 0.2126 + g * 0.7152 + b * 0.0722,
        r * 0.0193 + g * 0.1192 + b * 0.9505,
    )


def _f(t: float) -> float:
    return t ** (1 / 3) if t > 0.008856 else (7.787 * t) + (16 / 116)


def xyz_to_lab(xyz: Tuple[float, float, float]) -> Lab:
    x, y, z = xyz
    fx = _f(x / REF_X)
    fy = _f(y / REF_Y)
    fz = _f(z / REF_Z)
    return 116 * fy - 16, 500 * (fx - fy), 200 * (fy - fz)


def hex_to_lab(value: str | None) -> Optional[Lab]:
    rgb = hex_to_rgb(value)
    if rgb is None:
        return None
    return xyz_to_lab(rgb_to_xyz(rgb))


def delta_e(lab_a: Lab, lab_b: Lab) -> float:
    """CIE76: Euclidean distance in Lab space."""
    return math.sqrt(sum((p - q) ** 2 for p, q in zip(lab_a, lab_b)))
