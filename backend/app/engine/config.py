"""Sequencer configuration: tunables for the greedy chord search."""

from __future__ import annotations

import math
import numbers
from dataclasses import asdict, dataclass, fields
from typing import Any

from app.engine.errors import InvalidParameter


def _check_int(name: str, value: Any, minimum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral) or value < minimum:
        raise InvalidParameter(f"{name} must be an integer >= {minimum}, got {value!r}")


def _check_finite(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, numbers.Real) or not math.isfinite(value):
        raise InvalidParameter(f"{name} must be a finite number, got {value!r}")


@dataclass
class SequencerOptions:
    """Controls candidate filtering, ink removal and termination."""

    # Pins visited just before the current pin that may not be chosen next
    exclusion_window: int = 2
    # Max uses of one undirected pin pair; None = unlimited
    max_repeats_per_edge: int | None = 1
    # Intensity removed from every cell a chosen chord covers
    ink_weight: float = 0.2
    # Best score at or below this means the image is covered
    termination_threshold: float = 1e-3
    # Scores within this of the best are ties (smallest pin index wins)
    tie_tolerance: float = 1e-9
    # Threads scoring candidates within one iteration
    workers: int = 1

    def validate(self) -> None:
        """Raise InvalidParameter for any missing, non-finite or out-of-range tunable."""
        _check_int("exclusion_window", self.exclusion_window, 0)
        if self.max_repeats_per_edge is not None:
            _check_int("max_repeats_per_edge", self.max_repeats_per_edge, 1)
        _check_finite("ink_weight", self.ink_weight)
        if self.ink_weight <= 0:
            raise InvalidParameter(f"ink_weight must be > 0, got {self.ink_weight}")
        _check_finite("termination_threshold", self.termination_threshold)
        _check_finite("tie_tolerance", self.tie_tolerance)
        if self.tie_tolerance < 0:
            raise InvalidParameter(f"tie_tolerance must be >= 0, got {self.tie_tolerance}")
        _check_int("workers", self.workers, 1)

    def with_overrides(self, overrides: dict[str, Any] | None) -> SequencerOptions:
        """Copy with any subset of fields replaced. Unknown keys are rejected."""
        data = asdict(self)
        known = {f.name for f in fields(self)}
        for key, value in (overrides or {}).items():
            if key not in known:
                raise InvalidParameter(f"Unknown sequencer option: {key}")
            data[key] = value
        return SequencerOptions(**data)
