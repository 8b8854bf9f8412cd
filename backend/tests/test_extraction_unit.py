"""
Unit tests for dominant color extraction.

Tests the seed extraction strategies:
- pixel buffer normalization and median colors
- categorical hue-bucket extraction and its fixed output order
- clustered extraction: sampling, seeding, convergence, padding and deadline
"""

import numpy as np
import pytest
from loguru import logger

from s1palette.schemas import ExtractionConfig
from s1palette.services.colors.extraction import (
    HUE_CATEGORIES, CategoricalExtractor, ClusteredExtractor, as_pixel_buffer,
    _choose_initial_centroids, categorical_seeds, cluster_seeds, get_extractor,
    median_color
)
from s1palette.services.colors.space import rgb_to_hsl
from s1palette.utils.metrics import get_metrics_instance

RED = (200, 30, 30)
ORANGE = (255, 140, 0)
YELLOW = (200, 220, 20)
GREEN = (0, 255, 0)
BLUE = (30, 30, 200)
PURPLE = (160, 32, 240)
CATEGORY_COLORS = [RED, ORANGE, YELLOW, GREEN, BLUE, PURPLE]


def make_config(**overrides):
    values = dict(
        method="categorical", colors_per_group=5, cluster_count=3,
        palette_type="variations", harmonization="none", similarity_threshold=10.0,
    )
    values.update(overrides)
    return ExtractionConfig(**values)


class TestPixelBuffer:
    """Test pixel buffer normalization"""

    def test_clamps_out_of_range_channels(self):
        buffer = as_pixel_buffer([[300, -5, 12.6]])
        assert buffer.dtype == np.uint8
        np.testing.assert_array_equal(buffer, [[255, 0, 13]])

    def test_empty_buffer(self):
        assert as_pixel_buffer([]).shape == (0, 3)

    def test_rejects_malformed_shape(self):
        with pytest.raises(ValueError):
            as_pixel_buffer([[1, 2], [3, 4]])
        with pytest.raises(ValueError):
            as_pixel_buffer([1, 2, 3])

    def test_rejects_non_finite(self):
        with pytest.raises(ValueError):
            as_pixel_buffer([[np.nan, 0, 0]])


class TestMedianColor:
    """Test per-channel median"""

    def test_odd_count(self):
        pixels = np.array([[10, 200, 0], [20, 100, 5], [30, 0, 10]], dtype=np.uint8)
        assert median_color(pixels) == (20, 100, 5)

    def test_even_count_takes_upper_middle(self):
        pixels = np.array([[1, 1, 1], [2, 2, 2], [3, 3, 3], [4, 4, 4]], dtype=np.uint8)
        assert median_color(pixels) == (3, 3, 3)

    def test_resists_outliers(self):
        pixels = np.array([RED] * 9 + [(255, 0, 0)], dtype=np.uint8)
        assert median_color(pixels) == RED


class TestCategoricalExtraction:
    """Test hue-bucket extraction"""

    def test_fixture_colors_fall_in_expected_categories(self):
        for category, color in zip(HUE_CATEGORIES, CATEGORY_COLORS):
            assert category.contains(rgb_to_hsl(color)[0]), category.name

    def test_red_wraps_around(self):
        red = HUE_CATEGORIES[0]
        assert red.name == "red"
        assert red.contains(0.95)
        assert red.contains(0.01)
        assert not red.contains(0.5)

    def test_output_follows_category_order(self, rng):
        """Output is red -> purple whatever the input pixel order."""
        pixels = np.array([c for c in CATEGORY_COLORS for _ in range(20)], dtype=np.uint8)
        rng.shuffle(pixels)
        assert categorical_seeds(pixels) == CATEGORY_COLORS

        reversed_pixels = np.array(list(reversed(CATEGORY_COLORS)), dtype=np.uint8)
        assert categorical_seeds(reversed_pixels) == CATEGORY_COLORS

    def test_empty_categories_are_skipped(self):
        pixels = np.array([BLUE] * 10 + [RED] * 5, dtype=np.uint8)
        assert categorical_seeds(pixels) == [RED, BLUE]

    def test_single_color_buffer(self):
        pixels = np.array([RED] * 100, dtype=np.uint8)
        assert categorical_seeds(pixels) == [RED]

    def test_empty_buffer(self):
        assert categorical_seeds(np.zeros((0, 3), dtype=np.uint8)) == []

    def test_deterministic(self, rng):
        pixels = rng.integers(0, 256, size=(500, 3)).astype(np.uint8)
        assert categorical_seeds(pixels) == categorical_seeds(pixels.copy())


class TestClusteredExtraction:
    """Test k-means extraction in delta-E space"""

    def test_empty_buffer_or_zero_k(self, rng):
        empty = np.zeros((0, 3), dtype=np.uint8)
        assert cluster_seeds(empty, 3, rng).centroids == []
        pixels = np.array([RED] * 10, dtype=np.uint8)
        assert cluster_seeds(pixels, 0, rng).centroids == []

    def test_tiny_buffer_is_padded(self, rng):
        pixels = np.array([RED, BLUE], dtype=np.uint8)
        result = cluster_seeds(pixels, 5, rng)
        assert result.padded
        assert len(result.centroids) == 5
        assert result.centroids[:2] == [RED, BLUE]
        assert set(result.centroids) <= {RED, BLUE}

    def test_separated_blobs(self, rng):
        pixels = np.array([RED] * 50 + [BLUE] * 50, dtype=np.uint8)
        result = cluster_seeds(pixels, 2, rng)
        assert set(result.centroids) == {RED, BLUE}
        assert result.converged
        assert not result.deadline_exceeded

    def test_large_buffer_is_sampled(self, rng):
        pixels = np.array([RED, GREEN, BLUE] * 2000, dtype=np.uint8)
        result = cluster_seeds(pixels, 3, rng, sample_cap=1000)
        assert len(result.centroids) == 3
        assert set(result.centroids) == {RED, GREEN, BLUE}

    def test_returns_exactly_k(self, rng):
        pixels = rng.integers(0, 256, size=(400, 3)).astype(np.uint8)
        for k in (1, 4, 16):
            assert len(cluster_seeds(pixels, k, rng).centroids) == k

    def test_more_clusters_than_distinct_colors(self, rng):
        pixels = np.array([RED] * 30 + [BLUE] * 30, dtype=np.uint8)
        result = cluster_seeds(pixels, 4, rng)
        assert len(result.centroids) == 4
        assert set(result.centroids) == {RED, BLUE}

    def test_reproducible_with_seeded_rng(self):
        pixels = np.random.default_rng(0).integers(0, 256, size=(300, 3)).astype(np.uint8)
        first = cluster_seeds(pixels, 5, np.random.default_rng(99)).centroids
        second = cluster_seeds(pixels, 5, np.random.default_rng(99)).centroids
        assert first == second

    def test_iteration_cap(self, rng):
        pixels = rng.integers(0, 256, size=(300, 3)).astype(np.uint8)
        result = cluster_seeds(pixels, 5, rng, max_iter=0)
        assert result.iterations == 0
        assert not result.converged
        assert len(result.centroids) == 5

    def test_deadline_returns_best_so_far(self, rng):
        """An exhausted time budget logs a warning instead of raising."""
        messages = []
        handler_id = logger.add(messages.append, level="WARNING")
        try:
            pixels = rng.integers(0, 256, size=(300, 3)).astype(np.uint8)
            result = cluster_seeds(pixels, 4, rng, deadline_s=0.0)
        finally:
            logger.remove(handler_id)

        assert result.deadline_exceeded
        assert result.iterations == 0
        assert len(result.centroids) == 4
        assert any("deadline" in str(m) for m in messages)
        assert get_metrics_instance().get_counters()["kmeans_deadline_exceeded_total"] == 1

    def test_deadline_uses_injected_clock(self, rng):
        ticks = iter([0.0, 0.0, 10.0, 20.0, 30.0])
        pixels = rng.integers(0, 256, size=(300, 3)).astype(np.uint8)
        result = cluster_seeds(pixels, 3, rng, tolerance=-1.0, deadline_s=5.0,
                               clock=lambda: next(ticks))
        assert result.iterations == 1
        assert result.deadline_exceeded


class FixedDrawRng:
    """Random source whose first pick is index 0 and whose roulette draw is fixed."""

    def __init__(self, draw: float):
        self.draw = draw

    def integers(self, low, high=None, size=None):
        return 0

    def random(self):
        return self.draw


class TestCentroidSeeding:
    """Test the distance-weighted choice of initial centroids"""

    # Lab points at delta-E 1 and 3 from the first one
    LINE = np.array([[50.0, 0.0, 0.0], [51.0, 0.0, 0.0], [53.0, 0.0, 0.0]])

    def test_weights_are_plain_distances(self):
        # Weights 0, 1, 3: a draw of 0.2 lands on index 1 (squared weights would pick 2)
        assert _choose_initial_centroids(self.LINE, 2, FixedDrawRng(0.2)) == [0, 1]
        assert _choose_initial_centroids(self.LINE, 2, FixedDrawRng(0.3)) == [0, 2]

    def test_top_of_range_skips_existing_centroid(self):
        lab = np.array([[50.0, 0.0, 0.0], [60.0, 0.0, 0.0], [50.0, 0.0, 0.0]])
        chosen = _choose_initial_centroids(lab, 2, FixedDrawRng(np.nextafter(1.0, 0.0)))
        assert chosen == [0, 1]

    def test_random_lab_sets_never_pick_zero_weight(self, rng):
        draw = FixedDrawRng(np.nextafter(1.0, 0.0))
        for _ in range(50):
            lab = rng.uniform(-100, 100, size=(26, 3))
            lab[-1] = lab[0]
            chosen = _choose_initial_centroids(lab, 2, draw)
            assert not np.array_equal(lab[chosen[1]], lab[0])

    def test_coincident_samples_fall_back_to_uniform(self):
        lab = np.tile([[50.0, 10.0, 10.0]], (4, 1))
        assert _choose_initial_centroids(lab, 3, FixedDrawRng(0.5)) == [0, 0, 0]


class TestStrategySelection:
    """Test selection of the extraction strategy from config"""

    def test_categorical(self):
        extractor = get_extractor(make_config(method="categorical"))
        assert isinstance(extractor, CategoricalExtractor)

    def test_clustered(self):
        extractor = get_extractor(make_config(method="clustered", cluster_count=7))
        assert isinstance(extractor, ClusteredExtractor)
        assert extractor.k == 7

    def test_strategies_share_interface(self, rng):
        pixels = np.array([RED] * 20 + [BLUE] * 20, dtype=np.uint8)
        for method in ("categorical", "clustered"):
            seeds = get_extractor(make_config(method=method, cluster_count=2)).extract(pixels, rng)
            assert set(seeds) == {RED, BLUE}
