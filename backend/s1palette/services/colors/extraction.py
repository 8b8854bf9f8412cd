"""
Dominant color extraction.

Turns a pixel buffer into a small list of seed colors using one of two
strategies:

- categorical: one median color per fixed hue category
- clustered: k-means in delta-E space, seeded by distance-weighted sampling
"""

import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

import numpy as np
from loguru import logger

from s1palette.config import config
from s1palette.schemas import ExtractionConfig, ExtractionMethod
from s1palette.utils.metrics import get_metrics_instance
from .distance import pairwise_delta_e
from .space import Color, hue_array, rgb_to_lab_array, to_color


@dataclass(frozen=True)
class HueCategory:
    """Named hue bucket made of half-open [low, high) ranges."""
    name: str
    ranges: Tuple[Tuple[float, float], ...]

    def contains(self, hue: float) -> bool:
        return any(low <= hue < high for low, high in self.ranges)

    def mask(self, hues: np.ndarray) -> np.ndarray:
        """Boolean mask of the hues falling in this category."""
        selected = np.zeros(hues.shape, dtype=bool)
        for low, high in self.ranges:
            selected |= (hues >= low) & (hues < high)
        return selected


# Output order of categorical extraction
HUE_CATEGORIES: Tuple[HueCategory, ...] = (
    HueCategory("red", ((0.0, 0.0833), (0.9167, 1.0))),
    HueCategory("orange", ((0.0833, 0.1667),)),
    HueCategory("yellow", ((0.1667, 0.25),)),
    HueCategory("green", ((0.25, 0.5),)),
    HueCategory("blue", ((0.5, 0.75),)),
    HueCategory("purple", ((0.75, 0.9167),)),
)


def as_pixel_buffer(pixels) -> np.ndarray:
    """
    Normalize a pixel buffer into an (N, 3) uint8 array.

    Channel values are rounded and clamped to [0, 255] rather than rejected.

    Raises:
        ValueError: If the input is not a sequence of RGB triples
    """
    arr = np.asarray(pixels, dtype=np.float64)
    if arr.size == 0:
        return np.zeros((0, 3), dtype=np.uint8)
    if arr.ndim != 2 or arr.shape[1] != 3:
        raise ValueError(f"Pixel buffer must have shape (N, 3), got {arr.shape}")
    if not np.all(np.isfinite(arr)):
        raise ValueError("Pixel buffer contains non-finite channel values")
    return np.clip(np.rint(arr), 0, 255).astype(np.uint8)


def median_color(pixels: np.ndarray) -> Color:
    """
    Per-channel median of a non-empty pixel group.

    Each channel is sorted independently and the element at index N // 2 is
    taken, so the result is always a channel value present in the group.
    """
    ordered = np.sort(pixels, axis=0)
    return to_color(ordered[len(ordered) // 2])


def categorical_seeds(pixels: np.ndarray) -> List[Color]:
    """
    One median color per non-empty hue category, in category order.

    Args:
        pixels: (N, 3) uint8 pixel buffer

    Returns:
        Up to six seed colors ordered red, orange, yellow, green, blue, purple
    """
    if len(pixels) == 0:
        return []

    hues = hue_array(pixels)
    seeds = []
    for category in HUE_CATEGORIES:
        members = pixels[category.mask(hues)]
        if len(members) == 0:
            continue
        seed = median_color(members)
        logger.debug(f"Category {category.name}: {len(members)} pixels -> {seed}")
        seeds.append(seed)
    return seeds


@dataclass
class ClusterResult:
    """Outcome of a clustered extraction run."""
    centroids: List[Color] = field(default_factory=list)
    iterations: int = 0
    converged: bool = False
    deadline_exceeded: bool = False
    padded: bool = False


def _choose_initial_centroids(sample_lab: np.ndarray, k: int,
                              rng: np.random.Generator) -> List[int]:
    """
    Distance-weighted centroid seeding.

    The first index is uniform. Each following index is drawn by roulette
    over every sample's (unsquared) delta-E to its nearest chosen centroid.
    When all samples already coincide with a centroid the draw is uniform.
    """
    m = len(sample_lab)
    chosen = [int(rng.integers(0, m))]
    min_dist = pairwise_delta_e(sample_lab, sample_lab[chosen[0]][None, :])[:, 0]

    for _ in range(1, k):
        # Target and lookup share one cumulative sum
        cumulative = np.cumsum(min_dist)
        total = float(cumulative[-1])
        if total <= 0.0:
            idx = int(rng.integers(0, m))
        else:
            target = rng.random() * total
            idx = int(np.searchsorted(cumulative, target, side="right"))
            idx = min(idx, m - 1)
        chosen.append(idx)
        dist_to_new = pairwise_delta_e(sample_lab, sample_lab[idx][None, :])[:, 0]
        min_dist = np.minimum(min_dist, dist_to_new)

    return chosen


def cluster_seeds(
    pixels: np.ndarray,
    k: int,
    rng: np.random.Generator,
    sample_cap: int = config.KMEANS_SAMPLE_CAP,
    max_iter: int = config.KMEANS_MAX_ITER,
    tolerance: float = config.KMEANS_TOLERANCE,
    deadline_s: float = config.KMEANS_DEADLINE_S,
    clock: Callable[[], float] = time.monotonic,
) -> ClusterResult:
    """
    k-means style extraction using delta-E distance and median centroids.

    Args:
        pixels: (N, 3) uint8 pixel buffer
        k: Number of seeds to produce
        rng: Random source for sampling and seeding
        sample_cap: Buffers larger than this are sampled with replacement
        max_iter: Maximum refinement rounds
        tolerance: Stop once no centroid moves more than this (delta-E)
        deadline_s: Soft wall-clock budget; best centroids so far are
            returned when it runs out
        clock: Monotonic time source

    Returns:
        ClusterResult with exactly k centroids in seeding order, or none
        when the buffer is empty or k <= 0
    """
    start = clock()
    n = len(pixels)

    if k <= 0 or n == 0:
        return ClusterResult(converged=True)

    # Too few pixels to cluster: keep them all and pad with random picks
    if n < k:
        extra = rng.integers(0, n, size=k - n)
        padded = [to_color(p) for p in pixels] + [to_color(pixels[i]) for i in extra]
        logger.info(f"Buffer has {n} pixels for k={k}; padded by resampling")
        return ClusterResult(centroids=padded, converged=True, padded=True)

    if n > sample_cap:
        sample = pixels[rng.integers(0, n, size=sample_cap)]
    else:
        sample = pixels
    sample_lab = rgb_to_lab_array(sample)

    initial = _choose_initial_centroids(sample_lab, k, rng)
    centroids = sample[initial].astype(np.int64)
    centroid_lab = sample_lab[initial]

    result = ClusterResult()
    for _ in range(max_iter):
        elapsed = clock() - start
        if elapsed >= deadline_s:
            result.deadline_exceeded = True
            logger.warning(
                f"k-means deadline of {deadline_s:.2f}s exceeded after "
                f"{result.iterations} iterations; returning best centroids so far"
            )
            get_metrics_instance().increment_deadline_exceeded()
            break

        labels = np.argmin(pairwise_delta_e(sample_lab, centroid_lab), axis=1)

        new_centroids = centroids.copy()
        for j in range(k):
            members = sample[labels == j]
            # Empty clusters keep their previous centroid
            if len(members):
                new_centroids[j] = np.sort(members, axis=0)[len(members) // 2]

        new_lab = rgb_to_lab_array(new_centroids)
        shift = float(np.sqrt(((new_lab - centroid_lab) ** 2).sum(axis=1)).max())

        centroids, centroid_lab = new_centroids, new_lab
        result.iterations += 1

        if shift <= tolerance:
            result.converged = True
            break

    result.centroids = [to_color(c) for c in centroids]
    logger.debug(
        f"k-means finished: k={k}, samples={len(sample)}, iterations={result.iterations}, "
        f"converged={result.converged}"
    )
    return result


class SeedExtractor:
    """Common interface of the seed extraction strategies."""

    method: ExtractionMethod

    def extract(self, pixels: np.ndarray, rng: np.random.Generator) -> List[Color]:
        raise NotImplementedError


class CategoricalExtractor(SeedExtractor):
    """Median color of each non-empty hue category. Deterministic."""

    method = ExtractionMethod.CATEGORICAL

    def extract(self, pixels: np.ndarray, rng: np.random.Generator) -> List[Color]:
        return categorical_seeds(pixels)


class ClusteredExtractor(SeedExtractor):
    """k-means centroids in delta-E space."""

    method = ExtractionMethod.CLUSTERED

    def __init__(self, k: int, deadline_s: Optional[float] = None):
        self.k = k
        self.deadline_s = config.KMEANS_DEADLINE_S if deadline_s is None else deadline_s

    def extract(self, pixels: np.ndarray, rng: np.random.Generator) -> List[Color]:
        return cluster_seeds(pixels, self.k, rng, deadline_s=self.deadline_s).centroids


def get_extractor(extraction_config: ExtractionConfig) -> SeedExtractor:
    """Select the seed extraction strategy named by the config."""
    if extraction_config.method == ExtractionMethod.CLUSTERED:
        return ClusteredExtractor(extraction_config.cluster_count)
    return CategoricalExtractor()
