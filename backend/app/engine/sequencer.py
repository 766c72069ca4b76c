"""Greedy sequencer: picks the darkest remaining chord from the current pin, one at a time.

Each accepted chord removes ``ink_weight`` from every cell it covers, so the
next iteration sees what is still uncovered. The run works on its own copy of
the field; the caller's field is never touched.
"""

from __future__ import annotations

import enum
import logging
import threading
import time
from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable

import numpy as np

from app.engine.config import SequencerOptions
from app.engine.errors import InvalidParameter
from app.engine.field import DarknessField
from app.engine.pins import MIN_PIN_COUNT, Pin
from app.engine.sampler import ChordCache, score_candidates, select_best

logger = logging.getLogger(__name__)


class TerminationReason(str, enum.Enum):
    COMPLETED = "completed"
    NO_INK = "no_ink"
    NO_CANDIDATES = "no_candidates"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class ChordStep:
    """One accepted chord, as reported to progress callbacks."""

    step: int
    from_pin: int
    to_pin: int
    score: float
    remaining_ink: float


@dataclass
class StringArtResult:
    """Ordered pin indices to thread, starting from ``start_pin``.

    ``sequence`` excludes the start pin: the first chord is
    start_pin → sequence[0].
    """

    start_pin: int
    requested_lines: int
    sequence: list[int] = field(default_factory=list)
    scores: list[float] = field(default_factory=list)
    termination: TerminationReason = TerminationReason.COMPLETED
    initial_ink: float = 0.0
    remaining_ink: float = 0.0

    @property
    def completed_early(self) -> bool:
        return self.termination is not TerminationReason.COMPLETED

    @property
    def path(self) -> list[int]:
        return [self.start_pin, *self.sequence]

    def chords(self) -> list[tuple[int, int]]:
        path = self.path
        return list(zip(path[:-1], path[1:]))


ProgressCallback = Callable[[ChordStep], None]


def _edge(a: int, b: int) -> tuple[int, int]:
    return (a, b) if a < b else (b, a)


def validate_request(pins: list[Pin], start_pin: int, line_count: int, options: SequencerOptions) -> None:
    if len(pins) < MIN_PIN_COUNT:
        raise InvalidParameter(f"Need at least {MIN_PIN_COUNT} pins, got {len(pins)}")
    if isinstance(line_count, bool) or not isinstance(line_count, (int, np.integer)) or line_count < 0:
        raise InvalidParameter(f"Line count must be a non-negative integer, got {line_count!r}")
    if (
        isinstance(start_pin, bool)
        or not isinstance(start_pin, (int, np.integer))
        or not 0 <= start_pin < len(pins)
    ):
        raise InvalidParameter(f"Start pin {start_pin!r} out of range 0..{len(pins) - 1}")
    options.validate()


class GreedySequencer:
    """Sequential chord search over an exclusively owned working field."""

    def __init__(
        self,
        pins: list[Pin],
        field: DarknessField,
        options: SequencerOptions | None = None,
    ) -> None:
        self.pins = pins
        self.options = options or SequencerOptions()
        self.field = field.copy()
        self.cache = ChordCache(pins, self.field.width, self.field.height)
        self.edge_uses: dict[tuple[int, int], int] = {}

    def candidates(self, history: list[int]) -> list[int]:
        """Pins reachable from ``history[-1]`` this iteration, ascending."""
        current = history[-1]
        window = self.options.exclusion_window
        excluded = set(history[-(window + 1):-1]) if window > 0 else set()
        cap = self.options.max_repeats_per_edge
        return [
            pin
            for pin in range(len(self.pins))
            if pin != current
            and pin not in excluded
            and (cap is None or self.edge_uses.get(_edge(current, pin), 0) < cap)
        ]

    def apply_chord(self, a: int, b: int) -> None:
        """Remove ink along a→b, clamped at 0."""
        rr, cc = self.cache.cells(a, b)
        values = self.field.values
        values[rr, cc] = (values[rr, cc] - self.options.ink_weight).clip(min=0.0)
        key = _edge(a, b)
        self.edge_uses[key] = self.edge_uses.get(key, 0) + 1

    def new_result(self, start_pin: int, line_count: int) -> StringArtResult:
        total = self.field.total()
        return StringArtResult(
            start_pin=int(start_pin),
            requested_lines=int(line_count),
            initial_ink=total,
            remaining_ink=total,
        )

    def steps(
        self,
        result: StringArtResult,
        cancel_event: threading.Event | None = None,
    ) -> Iterator[ChordStep]:
        """Run the search, yielding each accepted chord; ``result`` is filled in place.

        ``result.termination`` is final once the iterator is exhausted.
        Closing the iterator early leaves the partial sequence in ``result``.
        """
        opts = self.options
        history = [result.start_pin]
        executor = ThreadPoolExecutor(max_workers=opts.workers) if opts.workers > 1 else None
        try:
            for step in range(1, result.requested_lines + 1):
                if cancel_event is not None and cancel_event.is_set():
                    result.termination = TerminationReason.CANCELLED
                    break

                current = history[-1]
                candidates = self.candidates(history)
                if not candidates:
                    result.termination = TerminationReason.NO_CANDIDATES
                    break

                scores = score_candidates(self.field, self.cache, current, candidates, executor)
                if float(scores.max()) <= opts.termination_threshold:
                    result.termination = TerminationReason.NO_INK
                    break

                best = select_best(current, candidates, scores, opts.tie_tolerance)
                self.apply_chord(current, best.to_pin)
                history.append(best.to_pin)
                result.sequence.append(best.to_pin)
                result.scores.append(best.score)
                result.remaining_ink = self.field.total()

                logger.debug("  chord %d: %d → %d (score %.4f)", step, current, best.to_pin, best.score)
                yield ChordStep(
                    step=step,
                    from_pin=current,
                    to_pin=best.to_pin,
                    score=best.score,
                    remaining_ink=result.remaining_ink,
                )
        finally:
            if executor is not None:
                executor.shutdown(wait=True)

    def run(
        self,
        start_pin: int,
        line_count: int,
        cancel_event: threading.Event | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> StringArtResult:
        result = self.new_result(start_pin, line_count)
        started = time.perf_counter()
        for chord in self.steps(result, cancel_event):
            if progress_callback is not None:
                progress_callback(chord)

        elapsed = (time.perf_counter() - started) * 1000
        if result.completed_early:
            logger.info(
                "Sequencer stopped early (%s): %d/%d chords in %.0fms",
                result.termination.value,
                len(result.sequence),
                line_count,
                elapsed,
            )
        else:
            logger.info("Sequencer complete: %d chords in %.0fms", len(result.sequence), elapsed)
        return result


def generate_sequence(
    pins: list[Pin],
    field: DarknessField,
    start_pin: int,
    line_count: int,
    options: SequencerOptions | dict | None = None,
    *,
    cancel_event: threading.Event | None = None,
    progress_callback: ProgressCallback | None = None,
) -> StringArtResult:
    """Produce up to ``line_count`` pin indices approximating ``field``.

    ``options`` may be a SequencerOptions or a dict overriding any subset of
    the defaults. Stopping short (no ink, no legal candidate, cancellation) is
    reported through ``result.termination``, never raised.
    """
    if isinstance(options, dict):
        options = SequencerOptions().with_overrides(options)
    options = options or SequencerOptions()
    validate_request(pins, start_pin, line_count, options)

    sequencer = GreedySequencer(pins, field, options)
    return sequencer.run(start_pin, line_count, cancel_event, progress_callback)
