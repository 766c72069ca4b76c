"""Math helpers: luminance, rounding. No engine imports."""

from __future__ import annotations

import math

import numpy as np
from numpy.typing import NDArray

# ITU-R BT.601 luma weights for R, G, B.
LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114], dtype=np.float64)

_MAX_CHANNEL = 255.0


def luminance_darkness(pixels: NDArray) -> NDArray[np.float64]:
    """Darkness in [0, 1] for an HxWx3 (RGB) or HxWx4 (RGBA) array of 0–255 samples.

    darkness = 1 − luma/255. RGBA pixels are composited over white, so a fully
    transparent pixel carries no ink whatever its color.
    """
    samples = np.asarray(pixels, dtype=np.float64)
    luma = samples[..., :3] @ LUMA_WEIGHTS
    darkness = 1.0 - luma / _MAX_CHANNEL
    if samples.shape[-1] == 4:
        darkness *= samples[..., 3] / _MAX_CHANNEL
    return np.clip(darkness, 0.0, 1.0)


def round_half_up(value: float) -> int:
    """Round to nearest int with halves going up (Python's round() is banker's)."""
    return int(math.floor(value + 0.5))
