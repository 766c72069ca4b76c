"""Rasterization utilities: surface points to grid cells, chords to digital lines."""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray
from skimage.draw import line as draw_line

from app.utils.math_helpers import round_half_up


def point_to_cell(x: float, y: float, width: int, height: int) -> tuple[int, int]:
    """Nearest (row, col) cell for a surface point, clamped into the grid.

    Pins on the far edge (x == width) land in the last column.
    """
    col = min(max(round_half_up(x), 0), width - 1)
    row = min(max(round_half_up(y), 0), height - 1)
    return (row, col)


def chord_cells(
    p0: tuple[float, float],
    p1: tuple[float, float],
    width: int,
    height: int,
) -> tuple[NDArray[np.intp], NDArray[np.intp]]:
    """(rows, cols) of the digital line between two surface points.

    One cell per unit step along the longer axis. Endpoints are put in a
    canonical order first, so both directions walk the identical cell set.
    """
    a = point_to_cell(p0[0], p0[1], width, height)
    b = point_to_cell(p1[0], p1[1], width, height)
    (r0, c0), (r1, c1) = sorted((a, b))
    rr, cc = draw_line(r0, c0, r1, c1)
    return rr.astype(np.intp), cc.astype(np.intp)
