"""Shared test fixtures."""

from __future__ import annotations

import numpy as np
import pytest

from app.engine.field import DarknessField
from app.engine.pins import Pin
from app.utils.imaging import encode_png_base64


# Four corners of a 10x10 surface, in square-layout order
CORNER_PINS = [
    Pin(index=0, x=0.0, y=0.0),
    Pin(index=1, x=10.0, y=0.0),
    Pin(index=2, x=10.0, y=10.0),
    Pin(index=3, x=0.0, y=10.0),
]


def solid_rgb(width: int, height: int, value: int) -> np.ndarray:
    return np.full((height, width, 3), value, dtype=np.uint8)


def diagonal_band(size: int, thickness: int = 3) -> np.ndarray:
    """White RGBA image with a black band along the main diagonal."""
    img = np.full((size, size, 4), 255, dtype=np.uint8)
    for i in range(size):
        lo, hi = max(0, i - thickness), min(size, i + thickness + 1)
        img[i, lo:hi, :3] = 0
    return img


@pytest.fixture
def corner_pins() -> list[Pin]:
    return list(CORNER_PINS)


@pytest.fixture
def uniform_field() -> DarknessField:
    return DarknessField.uniform(10, 10, 1.0)


@pytest.fixture
def random_field() -> DarknessField:
    rng = np.random.default_rng(42)
    return DarknessField(rng.random((60, 60)))


@pytest.fixture
def band_image() -> np.ndarray:
    return diagonal_band(40)


@pytest.fixture
def black_png() -> str:
    return encode_png_base64(solid_rgb(10, 10, 0))


@pytest.fixture
def white_png() -> str:
    return encode_png_base64(solid_rgb(10, 10, 255))


@pytest.fixture
def band_png() -> str:
    return encode_png_base64(diagonal_band(40))
