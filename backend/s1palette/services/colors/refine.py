"""
Palette refinement.

Drops colors that read as visually dead (near black, near white, near
gray), then greedily removes perceptually similar colors, then collapses
exact duplicates. Output order is always input order restricted to the
colors kept.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional

from loguru import logger

from s1palette.config import config
from .distance import delta_e_lab
from .space import Color, rgb_to_hsl, rgb_to_lab_array, to_color


@dataclass(frozen=True)
class RangeFilterPolicy:
    """HSL bounds a color must lie strictly inside to be kept."""
    min_lightness: float = 0.1
    max_lightness: float = 0.95
    min_saturation: float = 0.1

    def __post_init__(self):
        if not config.validate_lightness_bounds(self.min_lightness, self.max_lightness):
            raise ValueError(
                f"Invalid lightness bounds: {self.min_lightness} .. {self.max_lightness}"
            )

    @classmethod
    def from_config(cls) -> "RangeFilterPolicy":
        return cls(
            min_lightness=config.RANGE_MIN_LIGHTNESS,
            max_lightness=config.RANGE_MAX_LIGHTNESS,
            min_saturation=config.RANGE_MIN_SATURATION,
        )

    def accepts(self, color: Color) -> bool:
        _, s, l = rgb_to_hsl(color)
        return self.min_lightness < l < self.max_lightness and s > self.min_saturation


def filter_by_range(palette: Iterable[Color],
                    policy: Optional[RangeFilterPolicy] = None) -> List[Color]:
    """Keep colors whose lightness and saturation fall inside the policy bounds."""
    policy = policy or RangeFilterPolicy.from_config()
    return [color for color in palette if policy.accepts(color)]


def filter_similar(palette: Iterable[Color], threshold: float) -> List[Color]:
    """
    Greedy streaming similarity filter.

    The first color is always kept. Each later color is kept only if its
    delta-E to every already kept color is at least ``threshold``.
    """
    colors = list(palette)
    if not colors:
        return []

    labs = rgb_to_lab_array(colors)
    kept: List[Color] = []
    kept_labs = []
    for color, lab in zip(colors, labs):
        if any(delta_e_lab(lab, other) < threshold for other in kept_labs):
            continue
        kept.append(color)
        kept_labs.append(lab)
    return kept


def dedupe_exact(palette: Iterable[Color]) -> List[Color]:
    """Remove repeated RGB triples, keeping the first occurrence."""
    seen = set()
    unique = []
    for color in palette:
        key = tuple(color)
        if key in seen:
            continue
        seen.add(key)
        unique.append(color)
    return unique


def refine_palette(palette: Iterable[Color], similarity_threshold: float,
                   policy: Optional[RangeFilterPolicy] = None) -> List[Color]:
    """
    Range filter, similarity filter and exact dedup, in that order.

    Args:
        palette: Raw palette
        similarity_threshold: Minimum delta-E between kept colors
        policy: Range filter bounds; defaults come from Config

    Returns:
        Refined palette, never longer than the input
    """
    colors = [to_color(c) for c in palette]
    in_range = filter_by_range(colors, policy)
    distinct = filter_similar(in_range, similarity_threshold)
    unique = dedupe_exact(distinct)

    logger.debug(
        f"Refined palette: {len(colors)} raw -> {len(in_range)} in range -> "
        f"{len(distinct)} distinct -> {len(unique)} unique"
    )
    return unique
