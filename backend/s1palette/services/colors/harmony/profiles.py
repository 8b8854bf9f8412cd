"""
Stylistic harmonization profiles.

A profile scales and shifts HSL lightness and saturation of every palette
color, then clamps them into the profile's bands, giving the palette a
consistent "feel" (retro, vibrant, pastel, ...).
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Tuple

from loguru import logger

from ..space import Color, clamp_unit, hsl_to_rgb, rgb_to_hsl


@dataclass(frozen=True)
class HarmonizationProfile:
    """Named lightness/saturation transform."""
    name: str
    lightness_multiplier: float = 1.0
    lightness_shift: float = 0.0
    saturation_multiplier: float = 1.0
    saturation_shift: float = 0.0
    lightness_range: Optional[Tuple[float, float]] = None
    saturation_range: Optional[Tuple[float, float]] = None

    @property
    def is_identity(self) -> bool:
        return (
            self.lightness_multiplier == 1.0 and self.lightness_shift == 0.0
            and self.saturation_multiplier == 1.0 and self.saturation_shift == 0.0
            and self.lightness_range is None and self.saturation_range is None
        )

    def apply_hsl(self, h: float, s: float, l: float) -> Tuple[float, float, float]:
        """
        Transform one HSL color.

        Order: scale and shift lightness, scale and shift saturation, clamp
        each into the profile band, then hard-clamp both into [0, 1].
        """
        l = l * self.lightness_multiplier + self.lightness_shift
        s = s * self.saturation_multiplier + self.saturation_shift

        if self.lightness_range is not None:
            low, high = self.lightness_range
            l = max(low, min(high, l))
        if self.saturation_range is not None:
            low, high = self.saturation_range
            s = max(low, min(high, s))

        return h, clamp_unit(s), clamp_unit(l)

    def apply(self, color: Color) -> Color:
        h, s, l = rgb_to_hsl(color)
        return hsl_to_rgb(*self.apply_hsl(h, s, l))


NONE_PROFILE = HarmonizationProfile("none")

PROFILES: Mapping[str, HarmonizationProfile] = MappingProxyType({
    "none": NONE_PROFILE,
    "70s": HarmonizationProfile(
        "70s",
        lightness_multiplier=0.85, lightness_shift=0.1,
        saturation_multiplier=0.7, saturation_shift=0.0,
        lightness_range=(0.3, 0.7), saturation_range=(0.4, 0.8),
    ),
    "80s": HarmonizationProfile(
        "80s",
        lightness_multiplier=1.2, lightness_shift=0.0,
        saturation_multiplier=1.3, saturation_shift=0.1,
        lightness_range=(0.4, 0.9), saturation_range=(0.6, 1.0),
    ),
    "vibrant": HarmonizationProfile(
        "vibrant",
        lightness_multiplier=1.0, lightness_shift=0.0,
        saturation_multiplier=1.4, saturation_shift=0.2,
        lightness_range=(0.3, 0.8), saturation_range=(0.7, 1.0),
    ),
    "neon": HarmonizationProfile(
        "neon",
        lightness_multiplier=1.3, lightness_shift=0.1,
        saturation_multiplier=1.5, saturation_shift=0.3,
        lightness_range=(0.6, 1.0), saturation_range=(0.8, 1.0),
    ),
    "pastel": HarmonizationProfile(
        "pastel",
        lightness_multiplier=1.2, lightness_shift=0.2,
        saturation_multiplier=0.5, saturation_shift=0.0,
        lightness_range=(0.7, 0.95), saturation_range=(0.2, 0.6),
    ),
})


def get_profile(name: Optional[str]) -> HarmonizationProfile:
    """Look up a profile by name; unknown names resolve to 'none'."""
    profile = PROFILES.get((name or "none").strip().lower())
    if profile is None:
        logger.debug(f"Unknown harmonization profile '{name}', using 'none'")
        return NONE_PROFILE
    return profile


def apply_profile(palette: Iterable[Color], profile_name: Optional[str]) -> List[Color]:
    """
    Apply a named harmonization profile to every color of a palette.

    Args:
        palette: Colors to transform
        profile_name: Profile key, e.g. "pastel"; unknown names act as "none"

    Returns:
        New list of colors; the input is not modified
    """
    profile = get_profile(profile_name)
    if profile.is_identity:
        return list(palette)
    return [profile.apply(color) for color in palette]
