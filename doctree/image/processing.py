"""Raster helpers: load, encode and the load-problem placeholder.

Images are numpy BGR arrays as returned by OpenCV; text is drawn with PIL
and converted back, the same way translated text is rendered onto pages.
"""

from __future__ import annotations

import cv2
import numpy as np
from PIL import Image, ImageDraw, ImageFont

JPEG_QUALITY = 94
JPEG_MAX_DIMENSION = 65500

ERROR_IMAGE_SIZE = (400, 100)
ERROR_IMAGE_BACKGROUND = (250, 140, 140)
ERROR_IMAGE_TEXT_COLOR = (0, 255, 255)
ERROR_IMAGE_TEXT_POSITION = (20, 40)
ERROR_IMAGE_CAPTION = "Image load problem."


def load_image(path: str) -> np.ndarray:
    """Load an image file from disk.

    Doxygen:
    - @param path: Path to an image file.
    - @return: BGR uint8 array.
    - @throws ValueError: If the file is not an image or too large to re-encode as JPEG.
    """
    img = cv2.imread(path, cv2.IMREAD_COLOR)
    if img is None:
        raise ValueError(f"Failed to load image: {path}")
    height, width = img.shape[:2]
    if max(height, width) > JPEG_MAX_DIMENSION:
        raise ValueError(f"Image {path} is {width}x{height}, larger than JPEG allows")
    return img


def encode_jpeg(img: np.ndarray, quality: int = JPEG_QUALITY) -> bytes:
    """Serialize a BGR array as JPEG bytes."""
    ok, buf = cv2.imencode(".jpg", img, [int(cv2.IMWRITE_JPEG_QUALITY), int(quality)])
    if not ok:
        raise RuntimeError("JPEG encoding failed")
    return buf.tobytes()


def error_image() -> np.ndarray:
    """Placeholder shown whenever an inline image cannot be served.

    Doxygen:
    - @return: 400x100 BGR array, flat warning color with a short caption.
    """
    width, height = ERROR_IMAGE_SIZE
    canvas = np.full((height, width, 3), ERROR_IMAGE_BACKGROUND, dtype=np.uint8)
    img_pil = Image.fromarray(canvas)
    draw = ImageDraw.Draw(img_pil)
    draw.text(ERROR_IMAGE_TEXT_POSITION, ERROR_IMAGE_CAPTION, font=ImageFont.load_default(), fill=ERROR_IMAGE_TEXT_COLOR)
    return cv2.cvtColor(np.array(img_pil), cv2.COLOR_RGB2BGR)
