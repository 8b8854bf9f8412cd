"""
Unit tests for palette refinement.

Tests the range filter, the greedy similarity filter and exact dedup.
"""

import numpy as np
import pytest

from s1palette.services.colors.distance import delta_e
from s1palette.services.colors.refine import (
    RangeFilterPolicy, dedupe_exact, filter_by_range, filter_similar, refine_palette
)

RED = (200, 30, 30)
RED_NEAR = (201, 30, 30)
BLUE = (30, 30, 200)
GREEN = (30, 200, 30)


class TestRangeFilter:
    """Test near-black/near-white/near-gray removal."""

    def test_drops_dead_colors(self):
        palette = [(0, 0, 0), RED, (255, 255, 255), (128, 128, 128), (250, 250, 252), BLUE]
        assert filter_by_range(palette) == [RED, BLUE]

    def test_custom_policy(self):
        policy = RangeFilterPolicy(min_lightness=0.0, max_lightness=1.0, min_saturation=-1.0)
        palette = [(128, 128, 128), RED]
        assert filter_by_range(palette, policy) == palette

    def test_default_policy_from_config(self):
        policy = RangeFilterPolicy.from_config()
        assert policy.min_lightness == pytest.approx(0.1)
        assert policy.max_lightness == pytest.approx(0.95)
        assert policy.min_saturation == pytest.approx(0.1)

    @pytest.mark.parametrize("low, high", [(0.9, 0.2), (0.5, 0.5), (-0.1, 0.9), (0.1, 1.5)])
    def test_rejects_invalid_lightness_bounds(self, low, high):
        with pytest.raises(ValueError):
            RangeFilterPolicy(min_lightness=low, max_lightness=high)


class TestSimilarityFilter:
    """Test greedy delta-E filtering."""

    def test_first_color_always_kept(self):
        assert filter_similar([RED], 30.0) == [RED]

    def test_drops_close_colors(self):
        assert filter_similar([RED, RED_NEAR, BLUE], 10.0) == [RED, BLUE]

    def test_zero_threshold_keeps_everything(self):
        palette = [RED, RED, RED_NEAR]
        assert filter_similar(palette, 0.0) == palette

    def test_threshold_boundary(self):
        distance = delta_e(RED, BLUE)
        assert filter_similar([RED, BLUE], distance - 1e-6) == [RED, BLUE]
        assert filter_similar([RED, BLUE], distance + 1e-6) == [RED]

    def test_stable_order(self):
        palette = [GREEN, RED, BLUE]
        assert filter_similar(palette, 5.0) == palette

    def test_empty(self):
        assert filter_similar([], 10.0) == []

    def test_idempotent(self, rng):
        palette = [tuple(int(c) for c in p) for p in rng.integers(0, 256, size=(200, 3))]
        for threshold in (0.0, 5.0, 10.0, 30.0):
            once = filter_similar(palette, threshold)
            assert filter_similar(once, threshold) == once

    def test_kept_colors_are_pairwise_distinct(self, rng):
        palette = [tuple(int(c) for c in p) for p in rng.integers(0, 256, size=(100, 3))]
        kept = filter_similar(palette, 15.0)
        for i, a in enumerate(kept):
            for b in kept[i + 1:]:
                assert delta_e(a, b) >= 15.0 - 1e-9


class TestDedupe:
    """Test exact dedup."""

    def test_first_seen_order(self):
        assert dedupe_exact([BLUE, RED, BLUE, GREEN, RED]) == [BLUE, RED, GREEN]

    def test_lists_and_tuples_collapse_together(self):
        assert dedupe_exact([[1, 2, 3], (1, 2, 3)]) == [[1, 2, 3]]


class TestRefinePalette:
    """Test the full refinement chain."""

    def test_never_longer_than_input(self, rng):
        palette = [tuple(int(c) for c in p) for p in rng.integers(0, 256, size=(150, 3))]
        for threshold in (0.0, 10.0, 30.0):
            refined = refine_palette(palette, threshold)
            assert len(refined) <= len(palette)
            assert len(set(refined)) == len(refined)

    def test_chain(self):
        palette = [(0, 0, 0), RED, RED_NEAR, RED, BLUE, (255, 255, 255)]
        assert refine_palette(palette, 10.0) == [RED, BLUE]
        assert refine_palette(palette, 0.0) == [RED, RED_NEAR, BLUE]

    def test_returns_tuples(self):
        assert refine_palette([[200, 30, 30]], 10.0) == [RED]

    def test_empty(self):
        assert refine_palette([], 10.0) == []
