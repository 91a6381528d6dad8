"""Pillow decode/encode helpers. No engine imports."""

from __future__ import annotations

import io
import logging

import numpy as np
from numpy.typing import NDArray
from PIL import Image, UnidentifiedImageError

from layerforge.errors import DecodeError, EncodeFailure

logger = logging.getLogger(__name__)


def decode_image(data: bytes, label: str = "") -> Image.Image:
    """Decode raw bytes into an RGBA Pillow image.

    Raises DecodeError for empty, truncated or unrecognised data.
    """
    if not data:
        raise DecodeError(f"Empty image data{_suffix(label)}")
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            rgba = img.convert("RGBA")
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as e:
        raise DecodeError(f"Cannot decode image{_suffix(label)}: {e}") from e
    return rgba


def to_pixels(img: Image.Image) -> NDArray[np.uint8]:
    """H x W x 4 uint8 copy of an image."""
    if img.mode != "RGBA":
        img = img.convert("RGBA")
    return np.array(img, dtype=np.uint8)


def encode_png(pixels: NDArray[np.uint8]) -> bytes:
    """Encode an H x W x 4 RGBA array as PNG, keeping the alpha channel."""
    try:
        img = Image.fromarray(np.ascontiguousarray(pixels, dtype=np.uint8))
        buffer = io.BytesIO()
        img.save(buffer, format="PNG")
    except (OSError, ValueError, TypeError) as e:
        logger.error("PNG encoding failed: %s", e)
        raise EncodeFailure(f"Failed to encode PNG: {e}") from e
    return buffer.getvalue()


def _suffix(label: str) -> str:
    return f" ({label})" if label else ""
