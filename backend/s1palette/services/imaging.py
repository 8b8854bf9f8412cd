"""
S1 Palette Imaging Utilities
Handles upload validation, decoding and downsampling into a pixel buffer.
"""
import io

import numpy as np
from fastapi import HTTPException, UploadFile
from PIL import Image, UnidentifiedImageError

from s1palette.config import config


def validate_file_upload(file: UploadFile) -> None:
    """
    Validate uploaded file for format compliance.

    Args:
        file: FastAPI UploadFile object

    Raises:
        HTTPException: 400 for oversized files, 415 for unsupported formats
    """
    # Check file size (file.size might be None for some clients)
    if getattr(file, "size", None) and file.size > config.MAX_FILE_MB * 1024 * 1024:
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Maximum size: {config.MAX_FILE_MB}MB"
        )

    if file.content_type and file.content_type not in config.SUPPORTED_MIME_TYPES:
        raise HTTPException(
            status_code=415,
            detail=f"Unsupported media type. Supported: {', '.join(config.SUPPORTED_MIME_TYPES)}"
        )

    if file.filename and "." in file.filename:
        ext = "." + file.filename.lower().rsplit(".", 1)[-1]
        if ext not in config.SUPPORTED_EXTENSIONS:
            raise HTTPException(
                status_code=415,
                detail=f"Unsupported file extension. Supported: {', '.join(sorted(config.SUPPORTED_EXTENSIONS))}"
            )


def load_pixel_buffer(image_bytes: bytes, max_edge: int = config.MAX_EDGE) -> np.ndarray:
    """
    Decode an image and flatten it into a row-major pixel buffer.

    Images larger than ``max_edge`` on their longest side are downsampled
    with their aspect ratio preserved; smaller images are left as is.

    Args:
        image_bytes: Encoded image file contents
        max_edge: Maximum width/height of the sampled image

    Returns:
        (N, 3) uint8 RGB array

    Raises:
        ValueError: If ``max_edge`` is out of range or the bytes cannot be
            decoded as an image
    """
    if not config.validate_max_edge(max_edge):
        raise ValueError(f"max_edge must be between 16 and 1024, got {max_edge}")

    try:
        image = Image.open(io.BytesIO(image_bytes))
        image.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
        raise ValueError(f"Failed to decode image: {str(e)}")

    if image.mode != "RGB":
        image = image.convert("RGB")

    if max(image.size) > max_edge:
        image.thumbnail((max_edge, max_edge), Image.Resampling.BILINEAR)

    return np.asarray(image, dtype=np.uint8).reshape(-1, 3)


async def read_pixel_buffer(file: UploadFile, max_edge: int = config.MAX_EDGE) -> np.ndarray:
    """
    Read an uploaded image into a pixel buffer.

    Raises:
        HTTPException: 400 for unreadable, oversized or undecodable files
    """
    try:
        file_bytes = await file.read()
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Failed to read file: {str(e)}")

    if not file_bytes:
        raise HTTPException(status_code=400, detail="Empty file")

    if len(file_bytes) > config.MAX_FILE_MB * 1024 * 1024:
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Maximum size: {config.MAX_FILE_MB}MB"
        )

    try:
        return load_pixel_buffer(file_bytes, max_edge)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
