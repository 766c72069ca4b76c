"""Line sampler: mean ink under a chord.

Scores are normalized by the number of sampled cells so long chords are not
favored just for crossing more pixels.
"""

from __future__ import annotations

from concurrent.futures import Executor
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from app.engine.field import DarknessField
from app.engine.pins import Pin
from app.utils.rasterizer import chord_cells

Cells = tuple[NDArray[np.intp], NDArray[np.intp]]


@dataclass(frozen=True)
class LineCandidate:
    from_pin: int
    to_pin: int
    score: float


def score_cells(field: DarknessField, cells: Cells) -> float:
    rr, cc = cells
    return float(field.values[rr, cc].mean())


def score_line(
    field: DarknessField,
    p0: tuple[float, float],
    p1: tuple[float, float],
) -> float:
    """Mean darkness along the chord p0–p1. Read-only and symmetric."""
    return score_cells(field, chord_cells(p0, p1, field.width, field.height))


class ChordCache:
    """Chord cells per unordered pin pair, computed on first use.

    Owned by a single generation run; the grid size is fixed at creation.
    """

    def __init__(self, pins: list[Pin], width: int, height: int) -> None:
        self.pins = pins
        self.width = width
        self.height = height
        self._cells: dict[tuple[int, int], Cells] = {}

    def cells(self, i: int, j: int) -> Cells:
        key = (i, j) if i < j else (j, i)
        cached = self._cells.get(key)
        if cached is None:
            cached = chord_cells(
                self.pins[key[0]].position,
                self.pins[key[1]].position,
                self.width,
                self.height,
            )
            self._cells[key] = cached
        return cached

    def score(self, field: DarknessField, i: int, j: int) -> float:
        return score_cells(field, self.cells(i, j))

    def __len__(self) -> int:
        return len(self._cells)


def score_candidates(
    field: DarknessField,
    cache: ChordCache,
    current: int,
    candidates: list[int],
    executor: Executor | None = None,
) -> NDArray[np.float64]:
    """Score every chord current→candidate; result is ordered like ``candidates``.

    With an executor the candidates are scored concurrently; the field must
    not change until this returns.
    """
    if not candidates:
        return np.empty(0, dtype=np.float64)

    # Cells are memoized up front so worker threads only read the cache.
    for pin in candidates:
        cache.cells(current, pin)

    if executor is None:
        scores = [cache.score(field, current, pin) for pin in candidates]
    else:
        scores = list(executor.map(lambda pin: cache.score(field, current, pin), candidates))
    return np.asarray(scores, dtype=np.float64)


def select_best(
    current: int,
    candidates: list[int],
    scores: NDArray[np.float64],
    tie_tolerance: float = 0.0,
) -> LineCandidate:
    """Max score; scores within ``tie_tolerance`` of the max go to the smallest pin index."""
    best = float(scores.max())
    tied = [pin for pin, s in zip(candidates, scores) if s >= best - tie_tolerance]
    pin = min(tied)
    return LineCandidate(from_pin=current, to_pin=pin, score=float(scores[candidates.index(pin)]))
