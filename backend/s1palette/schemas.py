"""
S1 Palette Schemas
Pydantic models for extraction configuration and API request/response validation.
"""
from enum import Enum
from typing import Any, Dict, List, Tuple

from pydantic import BaseModel, ConfigDict, Field


class ExtractionMethod(str, Enum):
    """Seed extraction strategies."""
    CATEGORICAL = "categorical"  # Median color per fixed hue bucket
    CLUSTERED = "clustered"      # k-means in delta-E space


class PaletteType(str, Enum):
    """Ways to expand a seed color into a group of colors."""
    VARIATIONS = "variations"
    COMPLEMENTARY = "complementary"
    TRIADIC = "triadic"
    ANALOGOUS = "analogous"
    MONOCHROMATIC = "monochromatic"


class ExtractionConfig(BaseModel):
    """
    Fully resolved parameters for one palette computation.

    Every field is required. Defaults for interactive callers live in the
    API layer, never here.
    """
    model_config = ConfigDict(frozen=True)

    method: ExtractionMethod = Field(..., description="Seed extraction strategy")
    colors_per_group: int = Field(
        ..., ge=3, le=20,
        description="Number of colors generated from each seed"
    )
    cluster_count: int = Field(
        ..., ge=1, le=16,
        description="Number of k-means centroids (clustered method only)"
    )
    palette_type: PaletteType = Field(..., description="Seed expansion rule")
    harmonization: str = Field(
        ...,
        description="Harmonization profile name; unknown names behave as 'none'"
    )
    similarity_threshold: float = Field(
        ..., ge=0.0, le=30.0,
        description="Minimum delta-E between kept colors"
    )


# ============================================================================
# API SCHEMAS
# ============================================================================

class PaletteColor(BaseModel):
    """Single color of a generated palette."""
    hex: str = Field(
        ...,
        pattern=r"^#[0-9A-F]{6}$",
        description="Hex color code in format #RRGGBB"
    )
    rgb: Tuple[int, int, int] = Field(..., description="RGB channels (0-255)")


class ColorPaletteDocument(BaseModel):
    """Studio One .colorpalette document."""
    colors: List[str] = Field(
        ...,
        description="Opaque colors as 8 uppercase hex digits, FF + BB + GG + RR"
    )


class PaletteResponse(BaseModel):
    """Response of the palette generation endpoint."""
    palette: List[PaletteColor] = Field(..., description="Final refined palette")
    seeds: List[PaletteColor] = Field(..., description="Seed colors before expansion")
    export: ColorPaletteDocument = Field(..., description="Palette in .colorpalette format")
    metadata: Dict[str, Any] = Field(..., description="Request id, pixel counts, timings, config")


class PaletteExportRequest(BaseModel):
    """Request body for exporting an existing palette."""
    colors: List[Tuple[int, int, int]] = Field(
        ...,
        description="RGB triples; channel values are clamped to 0-255"
    )


class HealthResponse(BaseModel):
    """Health check response."""
    ok: bool = Field(True, description="Service health status")
    version: str = Field(..., description="Service version")
    service: str = Field("s1palette", description="Service name")
