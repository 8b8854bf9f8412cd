"""
Palette Pipeline Orchestrator

Chains the color stages together:
pixel buffer -> seed extraction -> per-seed expansion -> harmonization -> refinement.

Every run is a pure function of the pixel buffer, the extraction config and
the random source; nothing is shared between runs apart from metrics.
"""

import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np
from loguru import logger

from s1palette.schemas import ExtractionConfig
from s1palette.services.colors.extraction import as_pixel_buffer, get_extractor
from s1palette.services.colors.harmony import expand_seed
from s1palette.services.colors.harmony.profiles import apply_profile
from s1palette.services.colors.refine import RangeFilterPolicy, refine_palette
from s1palette.services.colors.space import Color
from s1palette.utils.metrics import get_metrics_instance, performance_monitor


@dataclass
class PaletteResult:
    """Result container for one pipeline run."""
    seeds: List[Color] = field(default_factory=list)
    raw_palette: List[Color] = field(default_factory=list)
    palette: List[Color] = field(default_factory=list)
    pixel_count: int = 0
    timings: Dict[str, float] = field(default_factory=dict)


def run_pipeline(
    pixels,
    extraction_config: ExtractionConfig,
    rng: np.random.Generator,
    range_policy: Optional[RangeFilterPolicy] = None,
) -> PaletteResult:
    """
    Compute a palette from a pixel buffer.

    Args:
        pixels: Sequence of RGB triples or an (N, 3) array; values are clamped
        extraction_config: Fully resolved extraction parameters
        rng: Random source for sampling, seeding and jitter
        range_policy: Optional override of the range filter bounds

    Returns:
        PaletteResult with seeds, raw and refined palettes and stage timings

    Raises:
        ValueError: If the pixel buffer is not a sequence of RGB triples
    """
    metrics = get_metrics_instance()
    metrics.increment_request_count()
    metrics.increment_method_count(extraction_config.method.value)

    result = PaletteResult()
    start_time = time.perf_counter()

    buffer = as_pixel_buffer(pixels)
    result.pixel_count = len(buffer)

    with performance_monitor("extract", result.timings):
        extractor = get_extractor(extraction_config)
        result.seeds = extractor.extract(buffer, rng)

    logger.info(
        f"Extracted {len(result.seeds)} seeds from {result.pixel_count} pixels "
        f"({extraction_config.method.value})"
    )

    with performance_monitor("expand", result.timings):
        for seed in result.seeds:
            result.raw_palette.extend(
                expand_seed(seed, extraction_config.palette_type,
                            extraction_config.colors_per_group, rng)
            )

    with performance_monitor("harmonize", result.timings):
        harmonized = apply_profile(result.raw_palette, extraction_config.harmonization)

    with performance_monitor("refine", result.timings):
        result.palette = refine_palette(
            harmonized, extraction_config.similarity_threshold, range_policy
        )

    result.timings["total"] = (time.perf_counter() - start_time) * 1000
    metrics.record_timing("total", result.timings["total"])
    metrics.record_palette_size(len(result.palette))

    logger.info(
        f"Palette complete: {len(result.raw_palette)} raw -> {len(result.palette)} final "
        f"in {result.timings['total']:.1f}ms"
    )
    return result


def generate_palette(pixels, extraction_config: ExtractionConfig,
                     rng: np.random.Generator) -> List[Color]:
    """Compute only the final palette for a pixel buffer."""
    return run_pipeline(pixels, extraction_config, rng).palette
