"""Image-level helpers (load, JPEG encoding, error placeholder)."""

from .processing import (
    JPEG_MAX_DIMENSION,
    JPEG_QUALITY,
    encode_jpeg,
    error_image,
    load_image,
)

__all__ = [
    "JPEG_MAX_DIMENSION",
    "JPEG_QUALITY",
    "encode_jpeg",
    "error_image",
    "load_image",
]
