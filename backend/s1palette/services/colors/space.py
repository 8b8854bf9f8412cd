"""
Color space conversions.

Colors are stored as RGB triples of 8-bit integers. HSL, HSV and Lab values
are computed on demand and never stored. All hues are expressed as a
fraction of a full turn in [0, 1).
"""

import colorsys
from typing import Sequence, Tuple

import numpy as np

Color = Tuple[int, int, int]

# sRGB (D65) to XYZ, scaled so that Y of reference white is 100
RGB_TO_XYZ = np.array([
    [0.4124, 0.3576, 0.1805],
    [0.2126, 0.7152, 0.0722],
    [0.0193, 0.1192, 0.9505],
])
D65_WHITE = np.array([95.047, 100.0, 108.883])

SRGB_LINEAR_THRESHOLD = 0.04045
LAB_EPSILON = 0.008856


def clamp_channel(value: float) -> int:
    """Round a channel value to the nearest integer in [0, 255]."""
    return int(max(0, min(255, round(value))))


def clamp_unit(value: float) -> float:
    """Clamp a value into [0, 1]."""
    return max(0.0, min(1.0, value))


def normalize_hue(h: float) -> float:
    """
    Wrap a hue into [0, 1).

    Args:
        h: Hue as a fraction of a turn, any real value

    Returns:
        Equivalent hue in [0, 1)
    """
    h = h % 1.0
    # -1e-18 % 1.0 evaluates to 1.0
    if h >= 1.0:
        h = 0.0
    return h


def to_color(values: Sequence[float]) -> Color:
    """Coerce any three numbers into a clamped RGB triple."""
    r, g, b = values
    return (clamp_channel(r), clamp_channel(g), clamp_channel(b))


def rgb_to_hex(rgb: Sequence[int]) -> str:
    """Convert an RGB triple to a #RRGGBB string."""
    r, g, b = to_color(rgb)
    return f"#{r:02X}{g:02X}{b:02X}"


def rgb_to_hsl(rgb: Sequence[int]) -> Tuple[float, float, float]:
    """
    Convert RGB to HSL.

    Args:
        rgb: RGB triple with channels in [0, 255]

    Returns:
        Tuple of (H, S, L), each in [0, 1]. Achromatic colors get H = 0.
    """
    r, g, b = (c / 255.0 for c in rgb)
    h, l, s = colorsys.rgb_to_hls(r, g, b)
    return h, s, l


def hsl_to_rgb(h: float, s: float, l: float) -> Color:
    """
    Convert HSL to RGB.

    Hue is wrapped into [0, 1); saturation and lightness are clamped to
    [0, 1] before conversion so the result is always a valid color.
    """
    r, g, b = colorsys.hls_to_rgb(normalize_hue(h), clamp_unit(l), clamp_unit(s))
    return to_color((r * 255.0, g * 255.0, b * 255.0))


def rgb_to_hsv(rgb: Sequence[int]) -> Tuple[float, float, float]:
    """Convert RGB to HSV; H, S, V each in [0, 1], H = 0 when achromatic."""
    r, g, b = (c / 255.0 for c in rgb)
    return colorsys.rgb_to_hsv(r, g, b)


def hsv_to_rgb(h: float, s: float, v: float) -> Color:
    """Convert HSV to RGB."""
    r, g, b = colorsys.hsv_to_rgb(normalize_hue(h), clamp_unit(s), clamp_unit(v))
    return to_color((r * 255.0, g * 255.0, b * 255.0))


def hue_array(pixels: np.ndarray) -> np.ndarray:
    """
    Vectorized HSL hue for an (N, 3) RGB array.

    Same sector formulas as :func:`colorsys.rgb_to_hls`, so results agree
    with :func:`rgb_to_hsl` for every pixel.
    """
    rgb = np.asarray(pixels, dtype=np.float64).reshape(-1, 3) / 255.0
    maxc = rgb.max(axis=1)
    minc = rgb.min(axis=1)
    rangec = maxc - minc
    chromatic = rangec > 0

    safe_range = np.where(chromatic, rangec, 1.0)
    rc = (maxc - rgb[:, 0]) / safe_range
    gc = (maxc - rgb[:, 1]) / safe_range
    bc = (maxc - rgb[:, 2]) / safe_range

    h = np.where(
        rgb[:, 0] == maxc,
        bc - gc,
        np.where(rgb[:, 1] == maxc, 2.0 + rc - bc, 4.0 + gc - rc),
    )
    h = (h / 6.0) % 1.0
    return np.where(chromatic, h, 0.0)


def rgb_to_lab_array(pixels) -> np.ndarray:
    """
    Convert an (N, 3) RGB array (0-255) to CIE Lab under D65.

    Returns:
        (N, 3) float array of (L, a, b)
    """
    rgb = np.asarray(pixels, dtype=np.float64).reshape(-1, 3) / 255.0

    # sRGB gamma decode
    linear = np.where(
        rgb > SRGB_LINEAR_THRESHOLD,
        ((rgb + 0.055) / 1.055) ** 2.4,
        rgb / 12.92,
    ) * 100.0

    xyz = linear @ RGB_TO_XYZ.T / D65_WHITE

    f = np.where(xyz > LAB_EPSILON, np.cbrt(xyz), 7.787 * xyz + 16.0 / 116.0)

    L = 116.0 * f[:, 1] - 16.0
    a = 500.0 * (f[:, 0] - f[:, 1])
    b = 200.0 * (f[:, 1] - f[:, 2])

    return np.column_stack([L, a, b])


def rgb_to_lab(rgb: Sequence[int]) -> Tuple[float, float, float]:
    """Convert a single RGB triple to Lab."""
    L, a, b = rgb_to_lab_array([rgb])[0]
    return float(L), float(a), float(b)
