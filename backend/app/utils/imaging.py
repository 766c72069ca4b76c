"""Image container decoding: uploaded bytes to an RGBA pixel array via Pillow."""

from __future__ import annotations

import base64
import binascii
import io

import numpy as np
from numpy.typing import NDArray
from PIL import Image, UnidentifiedImageError

from app.engine.errors import InvalidImage


def decode_image(data: bytes) -> NDArray[np.uint8]:
    """Decode PNG/JPEG/... bytes into an HxWx4 uint8 RGBA array."""
    if not data:
        raise InvalidImage("No image data")
    try:
        with Image.open(io.BytesIO(data)) as img:
            return np.array(img.convert("RGBA"))
    except (UnidentifiedImageError, OSError) as e:
        raise InvalidImage(f"Could not decode image: {e}") from e


def decode_base64_image(payload: str) -> NDArray[np.uint8]:
    """Decode a base64 string (optionally a ``data:image/...;base64,`` URL)."""
    if payload.startswith("data:"):
        _, _, payload = payload.partition(",")
    try:
        raw = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidImage(f"Image is not valid base64: {e}") from e
    return decode_image(raw)


def encode_png_base64(pixels: NDArray[np.uint8]) -> str:
    """Inverse helper for clients and tests: RGB/RGBA array → base64 PNG."""
    buf = io.BytesIO()
    Image.fromarray(pixels).save(buf, format="PNG")
    return base64.b64encode(buf.getvalue()).decode("ascii")
