"""Darkness field: the target ink map sampled from a source image under a view transform.

The field is a row-major ``values[y, x]`` grid of intensities in [0, 1]
(1 = fully dark). Output cell (ox, oy) reads the source at
``((ox − offset_x) / zoom, (oy − offset_y) / zoom)``; cells that land outside
the source image carry no ink.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray
from scipy.ndimage import map_coordinates

from app.engine.errors import InvalidImage, InvalidParameter
from app.utils.math_helpers import luminance_darkness

logger = logging.getLogger(__name__)

_RGB = 3
_RGBA = 4


@dataclass(frozen=True)
class ViewTransform:
    """Zoom + pan mapping source pixels onto the output surface."""

    zoom: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0

    def __post_init__(self) -> None:
        if not all(math.isfinite(v) for v in (self.zoom, self.offset_x, self.offset_y)):
            raise InvalidParameter(f"View transform must be finite, got {self}")
        if self.zoom <= 0:
            raise InvalidParameter(f"Zoom must be > 0, got {self.zoom}")

    def to_source(self, ox: NDArray | float, oy: NDArray | float) -> tuple:
        """Inverse transform: output coordinates → source coordinates."""
        return ((ox - self.offset_x) / self.zoom, (oy - self.offset_y) / self.zoom)


@dataclass
class DarknessField:
    """Grid of per-cell ink intensity, clamped to [0, 1]."""

    values: NDArray[np.float64]

    def __post_init__(self) -> None:
        values = np.asarray(self.values, dtype=np.float64)
        if values.ndim != 2 or values.size == 0:
            raise InvalidImage(f"Darkness field must be a non-empty 2D grid, got shape {values.shape}")
        if np.isnan(values).any():
            raise InvalidImage("Darkness field contains NaN")
        self.values = np.clip(values, 0.0, 1.0)

    @classmethod
    def uniform(cls, width: int, height: int, value: float = 1.0) -> DarknessField:
        return cls(np.full((height, width), value, dtype=np.float64))

    @property
    def width(self) -> int:
        return int(self.values.shape[1])

    @property
    def height(self) -> int:
        return int(self.values.shape[0])

    def copy(self) -> DarknessField:
        return DarknessField(self.values.copy())

    def total(self) -> float:
        return float(self.values.sum())


def _pixel_array(pixels, source_width: int, source_height: int) -> NDArray:
    """Shape a raw RGB/RGBA buffer into HxWxC, rejecting anything malformed."""
    if source_width <= 0 or source_height <= 0:
        raise InvalidImage(f"Source image has zero dimension: {source_width}x{source_height}")

    if isinstance(pixels, np.ndarray):
        arr = pixels
    elif isinstance(pixels, (bytes, bytearray, memoryview)):
        arr = np.frombuffer(pixels, dtype=np.uint8)
    else:
        raise InvalidImage(f"Unsupported pixel buffer type: {type(pixels).__name__}")

    if arr.size == 0:
        raise InvalidImage("Pixel buffer is empty")

    if arr.ndim == 3:
        if arr.shape[:2] != (source_height, source_width) or arr.shape[2] not in (_RGB, _RGBA):
            raise InvalidImage(
                f"Pixel array shape {arr.shape} does not match {source_width}x{source_height} RGB/RGBA"
            )
        return arr

    if arr.ndim != 1:
        raise InvalidImage(f"Pixel buffer must be flat or HxWxC, got {arr.ndim} dimensions")

    channels, rest = divmod(arr.size, source_width * source_height)
    if rest or channels not in (_RGB, _RGBA):
        raise InvalidImage(
            f"Buffer of {arr.size} samples is not RGB or RGBA for {source_width}x{source_height}"
        )
    return arr.reshape(source_height, source_width, channels)


def sample_field(
    darkness: NDArray[np.float64],
    output_width: int,
    output_height: int,
    view: ViewTransform,
) -> NDArray[np.float64]:
    """Resample a source darkness grid onto the output surface (bilinear, edges clamped)."""
    source_height, source_width = darkness.shape
    oy, ox = np.mgrid[0:output_height, 0:output_width].astype(np.float64)
    sx, sy = view.to_source(ox, oy)

    inside = (sx >= 0) & (sx < source_width) & (sy >= 0) & (sy < source_height)
    values = np.zeros((output_height, output_width), dtype=np.float64)
    if inside.any():
        coords = np.vstack([sy[inside], sx[inside]])
        values[inside] = map_coordinates(darkness, coords, order=1, mode="nearest")
    return values


def build_darkness_field(
    pixels,
    source_width: int,
    source_height: int,
    output_width: int,
    output_height: int,
    zoom: float = 1.0,
    offset_x: float = 0.0,
    offset_y: float = 0.0,
) -> DarknessField:
    """Build the output-sized darkness field for a decoded RGB/RGBA buffer.

    ``pixels`` is either a flat byte buffer (channel count inferred from its
    length) or an HxWx3 / HxWx4 array. Raises InvalidImage for an empty or
    malformed buffer and InvalidParameter for a bad output size or zoom.
    """
    view = ViewTransform(zoom=zoom, offset_x=offset_x, offset_y=offset_y)
    for name, value in (("output_width", output_width), ("output_height", output_height)):
        if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value <= 0:
            raise InvalidParameter(f"{name} must be a positive integer, got {value!r}")

    arr = _pixel_array(pixels, source_width, source_height)
    darkness = luminance_darkness(arr)
    field = DarknessField(sample_field(darkness, int(output_width), int(output_height), view))

    logger.debug(
        "Built %dx%d field from %dx%d source (zoom=%.3f, offset=(%.1f, %.1f)), ink=%.1f",
        output_width,
        output_height,
        source_width,
        source_height,
        zoom,
        offset_x,
        offset_y,
        field.total(),
    )
    return field


def view_transform_for_fit(
    source_width: int,
    source_height: int,
    output_width: int,
    output_height: int,
) -> ViewTransform:
    """Zoom/offset that scales the source to cover the output, centered."""
    if min(source_width, source_height) <= 0:
        raise InvalidImage(f"Source image has zero dimension: {source_width}x{source_height}")
    zoom = max(output_width / source_width, output_height / source_height)
    return ViewTransform(
        zoom=zoom,
        offset_x=(output_width - source_width * zoom) / 2,
        offset_y=(output_height - source_height * zoom) / 2,
    )
