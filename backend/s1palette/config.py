"""
S1 Palette Configuration
Manages environment variables and defaults for the palette service.
"""
import os


class Config:
    """Configuration class for the palette service."""

    # Upload limits and pixel buffer size
    MAX_FILE_MB: int = int(os.environ.get("S1PALETTE_MAX_FILE_MB", "10"))
    MAX_EDGE: int = int(os.environ.get("S1PALETTE_MAX_EDGE", "150"))

    # Logging
    LOG_LEVEL: str = os.environ.get("S1PALETTE_LOG_LEVEL", "INFO")

    # Clustered extraction
    KMEANS_SAMPLE_CAP: int = int(os.environ.get("S1PALETTE_KMEANS_SAMPLE_CAP", "1000"))
    KMEANS_MAX_ITER: int = int(os.environ.get("S1PALETTE_KMEANS_MAX_ITER", "10"))
    KMEANS_TOLERANCE: float = float(os.environ.get("S1PALETTE_KMEANS_TOLERANCE", "1.0"))
    KMEANS_DEADLINE_S: float = float(os.environ.get("S1PALETTE_KMEANS_DEADLINE_S", "5.0"))

    # Range filter thresholds (HSL)
    RANGE_MIN_LIGHTNESS: float = float(os.environ.get("S1PALETTE_RANGE_MIN_LIGHTNESS", "0.1"))
    RANGE_MAX_LIGHTNESS: float = float(os.environ.get("S1PALETTE_RANGE_MAX_LIGHTNESS", "0.95"))
    RANGE_MIN_SATURATION: float = float(os.environ.get("S1PALETTE_RANGE_MIN_SATURATION", "0.1"))

    # Samples kept per timing series in the metrics collector
    METRICS_WINDOW: int = int(os.environ.get("S1PALETTE_METRICS_WINDOW", "1000"))

    # Export
    EXPORT_FILENAME: str = os.environ.get("S1PALETTE_EXPORT_FILENAME", "palette.colorpalette")

    # Supported image formats
    SUPPORTED_MIME_TYPES = ["image/jpeg", "image/png", "image/webp", "image/gif", "image/bmp"]
    SUPPORTED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp", ".gif", ".bmp"}

    @classmethod
    def validate_max_edge(cls, max_edge: int) -> bool:
        """Validate pixel buffer edge size."""
        return 16 <= max_edge <= 1024

    @classmethod
    def validate_lightness_bounds(cls, low: float, high: float) -> bool:
        """Validate range filter lightness bounds."""
        return 0.0 <= low < high <= 1.0


# Global config instance
config = Config()
