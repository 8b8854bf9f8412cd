"""
S1 Palette API Routes
Implements /v1/palette, /v1/palette/export and /v1/metrics.
"""
from typing import Any, Dict, Optional

import numpy as np
from fastapi import APIRouter, File, HTTPException, Query, UploadFile
from fastapi.responses import Response

from s1palette.config import config
from s1palette.schemas import (
    ColorPaletteDocument, ExtractionConfig, ExtractionMethod, PaletteColor,
    PaletteExportRequest, PaletteResponse, PaletteType
)
from s1palette.services.colors.export import dumps_palette, export_palette
from s1palette.services.colors.space import rgb_to_hex
from s1palette.services.imaging import read_pixel_buffer, validate_file_upload
from s1palette.services.pipeline import run_pipeline
from s1palette.utils.ids import generate_request_id
from s1palette.utils.logging import request_logger
from s1palette.utils.metrics import get_metrics_instance

router = APIRouter(prefix="/v1", tags=["Palette"])


def _palette_colors(colors) -> list:
    return [PaletteColor(hex=rgb_to_hex(c), rgb=tuple(c)) for c in colors]


@router.post(
    "/palette",
    response_model=PaletteResponse,
    summary="Generate Palette",
    description="Extract seed colors from an image and expand them into a refined palette"
)
async def create_palette(
    file: UploadFile = File(..., description="Image to extract colors from"),
    method: ExtractionMethod = Query(ExtractionMethod.CATEGORICAL, description="Seed extraction strategy"),
    colors_per_group: int = Query(10, ge=3, le=20, description="Colors generated per seed"),
    cluster_count: int = Query(3, ge=1, le=16, description="Number of clusters (clustered method)"),
    palette_type: PaletteType = Query(PaletteType.VARIATIONS, description="Seed expansion rule"),
    harmonization: str = Query("none", max_length=32, description="Harmonization profile"),
    similarity_threshold: float = Query(10.0, ge=0.0, le=30.0, description="Minimum delta-E between colors"),
    seed: Optional[int] = Query(None, ge=0, description="Random seed for reproducible output"),
) -> PaletteResponse:
    """
    Generate a palette from an uploaded image.

    The image is downsampled to a small pixel buffer, seeds are extracted
    with the chosen method, expanded, optionally harmonized and refined.
    Passing ``seed`` makes the output reproducible.
    """
    request_id = generate_request_id("pal")
    log = request_logger(request_id)
    log.info("Starting palette generation")

    validate_file_upload(file)
    pixels = await read_pixel_buffer(file, config.MAX_EDGE)

    extraction_config = ExtractionConfig(
        method=method,
        colors_per_group=colors_per_group,
        cluster_count=cluster_count,
        palette_type=palette_type,
        harmonization=harmonization,
        similarity_threshold=similarity_threshold,
    )

    try:
        result = run_pipeline(pixels, extraction_config, np.random.default_rng(seed))
    except ValueError as e:
        get_metrics_instance().increment_failure_count("invalid_input")
        log.warning(f"Palette generation rejected: {str(e)}")
        raise HTTPException(status_code=400, detail=str(e))

    log.bind(ms_total=result.timings.get("total", 0.0)).info(
        f"Palette generation complete: {len(result.palette)} colors"
    )

    return PaletteResponse(
        palette=_palette_colors(result.palette),
        seeds=_palette_colors(result.seeds),
        export=ColorPaletteDocument(**export_palette(result.palette)),
        metadata={
            "request_id": request_id,
            "pixel_count": result.pixel_count,
            "raw_palette_size": len(result.raw_palette),
            "timings_ms": result.timings,
            "config": extraction_config.model_dump(mode="json"),
            "seed": seed,
        },
    )


@router.post(
    "/palette/export",
    summary="Export Palette",
    description="Serialize RGB colors as a Studio One .colorpalette file"
)
async def export_colorpalette(request: PaletteExportRequest) -> Response:
    """Return a downloadable .colorpalette document."""
    if not request.colors:
        raise HTTPException(status_code=400, detail="No palette to export")

    return Response(
        content=dumps_palette(request.colors),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{config.EXPORT_FILENAME}"'},
    )


@router.get("/metrics", summary="Service Metrics")
async def get_metrics() -> Dict[str, Any]:
    """In-process counters and stage timing statistics."""
    return get_metrics_instance().get_summary()
