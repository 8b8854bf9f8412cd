"""
Harmonic palette expansion.

Expands one seed color into a group of colors: plain lightness variations,
or a complementary, triadic, analogous or monochromatic family. Every
generator returns exactly ``n`` colors.
"""

import math
from typing import Callable, Dict, List, Optional

import numpy as np

from s1palette.schemas import PaletteType
from ..space import Color, hsl_to_rgb, normalize_hue, rgb_to_hsl

# Visible lightness band swept by every generator
LIGHTNESS_MIN = 0.15
LIGHTNESS_MAX = 0.85

# Per-step jitter for variations, to avoid banding
HUE_JITTER = 0.025
SATURATION_JITTER = 0.05

# Half-width of the analogous hue band, in turns
ANALOGOUS_SPREAD = 0.04


def rotate_hue(h: float, turns: float) -> float:
    """
    Rotate a hue by a fraction of a turn.

    Args:
        h: Original hue [0, 1)
        turns: Rotation, e.g. 0.5 for the complement (can be negative)

    Returns:
        Rotated hue [0, 1) with wraparound
    """
    return normalize_hue(h + turns)


def lightness_ramp(n: int) -> List[float]:
    """Evenly spaced lightness values from LIGHTNESS_MIN to LIGHTNESS_MAX."""
    if n <= 0:
        return []
    if n == 1:
        return [(LIGHTNESS_MIN + LIGHTNESS_MAX) / 2.0]
    step = (LIGHTNESS_MAX - LIGHTNESS_MIN) / (n - 1)
    return [LIGHTNESS_MIN + step * i for i in range(n)]


def sort_by_lightness(colors: List[Color], descending: bool = True) -> List[Color]:
    """Stable sort of colors by HSL lightness."""
    return sorted(colors, key=lambda c: rgb_to_hsl(c)[2], reverse=descending)


def _variations_at(h: float, s: float, l: float, n: int,
                   rng: np.random.Generator) -> List[Color]:
    """Jittered lightness ramp at a given hue and saturation."""
    if n <= 0:
        return []
    if n == 1:
        return [hsl_to_rgb(h, s, l)]

    colors = []
    for step_l in lightness_ramp(n):
        jitter_h = rng.uniform(-HUE_JITTER, HUE_JITTER)
        jitter_s = rng.uniform(-SATURATION_JITTER, SATURATION_JITTER)
        colors.append(hsl_to_rgb(rotate_hue(h, jitter_h), s + jitter_s, step_l))
    return sort_by_lightness(colors)


def generate_variations(seed: Color, n: int, rng: np.random.Generator) -> List[Color]:
    """
    Tints and shades of the seed, lightest first.

    A single requested color is the seed itself.
    """
    if n == 1:
        return [seed]
    h, s, l = rgb_to_hsl(seed)
    return _variations_at(h, s, l, n, rng)


def generate_complementary(seed: Color, n: int, rng: np.random.Generator) -> List[Color]:
    """Variations of the seed (ceil half) followed by its complement (floor half)."""
    h, s, l = rgb_to_hsl(seed)
    base_n = math.ceil(n / 2)
    comp_n = n // 2

    base = generate_variations(seed, base_n, rng) if base_n > 0 else []
    complement = _variations_at(rotate_hue(h, 0.5), s, l, comp_n, rng)
    return base + complement


def generate_triadic(seed: Color, n: int, rng: np.random.Generator) -> List[Color]:
    """
    Variations at the seed hue, hue + 1/3 and hue + 2/3.

    The seed hue gets the ceil share; the remainder is split as evenly as
    possible between the other two.
    """
    h, s, l = rgb_to_hsl(seed)
    base_n = math.ceil(n / 3)
    rest = n - base_n
    second_n = math.ceil(rest / 2)
    third_n = rest - second_n

    base = generate_variations(seed, base_n, rng) if base_n > 0 else []
    second = _variations_at(rotate_hue(h, 1.0 / 3.0), s, l, second_n, rng)
    third = _variations_at(rotate_hue(h, 2.0 / 3.0), s, l, third_n, rng)
    return base + second + third


def generate_analogous(seed: Color, n: int,
                       rng: Optional[np.random.Generator] = None) -> List[Color]:
    """Sweep across a narrow hue band around the seed, lightest first."""
    if n <= 0:
        return []
    if n == 1:
        return [seed]

    h, s, _ = rgb_to_hsl(seed)
    colors = []
    for i, step_l in enumerate(lightness_ramp(n)):
        offset = -ANALOGOUS_SPREAD + 2.0 * ANALOGOUS_SPREAD * i / (n - 1)
        colors.append(hsl_to_rgb(rotate_hue(h, offset), s, step_l))
    return sort_by_lightness(colors)


def generate_monochromatic(seed: Color, n: int,
                           rng: Optional[np.random.Generator] = None) -> List[Color]:
    """Seed hue and saturation at evenly ramped lightness, darkest first."""
    if n <= 0:
        return []
    if n == 1:
        return [seed]

    h, s, _ = rgb_to_hsl(seed)
    return [hsl_to_rgb(h, s, step_l) for step_l in lightness_ramp(n)]


GENERATORS: Dict[PaletteType, Callable[[Color, int, np.random.Generator], List[Color]]] = {
    PaletteType.VARIATIONS: generate_variations,
    PaletteType.COMPLEMENTARY: generate_complementary,
    PaletteType.TRIADIC: generate_triadic,
    PaletteType.ANALOGOUS: generate_analogous,
    PaletteType.MONOCHROMATIC: generate_monochromatic,
}


def expand_seed(seed: Color, palette_type: PaletteType, n: int,
                rng: np.random.Generator) -> List[Color]:
    """
    Expand a seed color into ``n`` colors.

    Raises:
        ValueError: For an unknown palette type
    """
    try:
        generator = GENERATORS[PaletteType(palette_type)]
    except ValueError:
        raise ValueError(f"Unknown palette type: {palette_type}") from None
    return generator(seed, n, rng)
