"""Tests for the greedy sequencer."""

import threading

import numpy as np
import pytest

from app.engine.config import SequencerOptions
from app.engine.errors import InvalidParameter
from app.engine.field import DarknessField, build_darkness_field
from app.engine.pins import Pin, generate_pins
from app.engine.sequencer import GreedySequencer, TerminationReason, generate_sequence
from tests.conftest import solid_rgb


def _edges(path: list[int]) -> list[tuple[int, int]]:
    return [tuple(sorted(pair)) for pair in zip(path[:-1], path[1:])]


def test_corner_scenario_tie_breaking(corner_pins, uniform_field):
    options = SequencerOptions(exclusion_window=1, ink_weight=0.2, max_repeats_per_edge=1)
    result = generate_sequence(corner_pins, uniform_field, 0, 3, options)
    # 1: all chords tie at 1.0 → smallest index.
    # 2: 1→2 and 1→3 tie at 0.98 (both share the used corner cell) → 2.
    # 3: 2→3 (0.98) beats the diagonal 2→0 (0.96, two used corners); 1 is excluded.
    assert result.sequence == [1, 2, 3]
    assert result.termination is TerminationReason.COMPLETED
    assert not result.completed_early
    assert result.scores == pytest.approx([1.0, 0.98, 0.98])


def test_deterministic(random_field):
    pins = generate_pins("circle", 24, 60, 60)
    first = generate_sequence(pins, random_field, 0, 40)
    second = generate_sequence(pins, random_field, 0, 40)
    assert first.sequence == second.sequence
    assert first.scores == second.scores


def test_threaded_scoring_is_deterministic(random_field):
    pins = generate_pins("circle", 24, 60, 60)
    serial = generate_sequence(pins, random_field, 3, 40, {"workers": 1})
    threaded = generate_sequence(pins, random_field, 3, 40, {"workers": 4})
    assert serial.sequence == threaded.sequence


def test_full_length_on_uniform_field():
    pins = generate_pins("circle", 36, 80, 80)
    field = DarknessField.uniform(80, 80, 1.0)
    result = generate_sequence(pins, field, 0, 60, {"ink_weight": 0.05})
    assert len(result.sequence) == 60
    assert result.termination is TerminationReason.COMPLETED


def test_length_bound_and_no_repeat_adjacent(random_field):
    pins = generate_pins("square", 20, 60, 60)
    result = generate_sequence(pins, random_field, 5, 80)
    assert len(result.sequence) <= 80
    path = result.path
    assert path[0] == 5
    assert all(a != b for a, b in zip(path[:-1], path[1:]))


def test_exclusion_window_respected(random_field):
    pins = generate_pins("circle", 16, 60, 60)
    result = generate_sequence(pins, random_field, 0, 60, {"exclusion_window": 3, "max_repeats_per_edge": None})
    path = result.path
    for i in range(1, len(path) - 1):
        assert path[i + 1] not in path[max(0, i - 3):i]


def test_ink_decreases_monotonically(random_field):
    pins = generate_pins("circle", 24, 60, 60)
    steps = []
    result = GreedySequencer(pins, random_field).run(0, 30, progress_callback=steps.append)

    previous = result.initial_ink
    for step in steps:
        if step.score > 0:
            assert step.remaining_ink < previous
        else:
            assert step.remaining_ink <= previous
        previous = step.remaining_ink
    assert result.remaining_ink == pytest.approx(previous)


def test_edge_cap_respected():
    pins = generate_pins("square", 5, 20, 20)
    field = DarknessField.uniform(20, 20, 1.0)
    options = {"exclusion_window": 0, "max_repeats_per_edge": 1, "ink_weight": 0.05}
    result = generate_sequence(pins, field, 0, 50, options)
    edges = _edges(result.path)
    assert len(edges) == len(set(edges))
    assert len(edges) <= 10
    assert result.termination is TerminationReason.NO_CANDIDATES
    assert result.completed_early


def test_edge_cap_allows_repeats_up_to_limit():
    pins = generate_pins("square", 4, 20, 20)
    field = DarknessField.uniform(20, 20, 1.0)
    options = {"exclusion_window": 0, "max_repeats_per_edge": 2, "ink_weight": 0.01}
    result = generate_sequence(pins, field, 0, 30, options)
    edges = _edges(result.path)
    assert max(edges.count(e) for e in set(edges)) <= 2


def test_out_of_view_image_terminates_immediately():
    field = build_darkness_field(solid_rgb(20, 20, 0), 20, 20, 50, 50, offset_x=500, offset_y=500)
    pins = generate_pins("circle", 12, 50, 50)
    result = generate_sequence(pins, field, 0, 100)
    assert result.sequence == []
    assert result.termination is TerminationReason.NO_INK
    assert result.completed_early


def test_zero_lines_is_empty_not_error(corner_pins, uniform_field):
    result = generate_sequence(corner_pins, uniform_field, 0, 0)
    assert result.sequence == []
    assert result.termination is TerminationReason.COMPLETED
    assert not result.completed_early


def test_caller_field_untouched(corner_pins, uniform_field):
    generate_sequence(corner_pins, uniform_field, 0, 3)
    assert np.all(uniform_field.values == 1.0)


def test_working_field_stays_in_range():
    pins = generate_pins("circle", 10, 30, 30)
    sequencer = GreedySequencer(
        pins,
        DarknessField.uniform(30, 30, 0.5),
        SequencerOptions(ink_weight=0.9, max_repeats_per_edge=None, termination_threshold=0.0),
    )
    sequencer.run(0, 40)
    assert sequencer.field.values.min() >= 0.0
    assert sequencer.field.values.max() <= 1.0


def test_cancellation_returns_partial_sequence(random_field):
    pins = generate_pins("circle", 24, 60, 60)
    cancel = threading.Event()

    def _stop_after_three(step):
        if step.step == 3:
            cancel.set()

    result = generate_sequence(
        pins, random_field, 0, 50, cancel_event=cancel, progress_callback=_stop_after_three
    )
    assert len(result.sequence) == 3
    assert result.termination is TerminationReason.CANCELLED
    assert result.completed_early


def test_invalid_requests(corner_pins, uniform_field):
    with pytest.raises(InvalidParameter):
        generate_sequence([Pin(0, 1.0, 1.0)], uniform_field, 0, 5)
    with pytest.raises(InvalidParameter):
        generate_sequence(corner_pins, uniform_field, 0, -1)
    with pytest.raises(InvalidParameter):
        generate_sequence(corner_pins, uniform_field, 4, 5)
    with pytest.raises(InvalidParameter):
        generate_sequence(corner_pins, uniform_field, 0, 5, {"ink_weight": 0})
    with pytest.raises(InvalidParameter):
        generate_sequence(corner_pins, uniform_field, 0, 5, {"max_repeats_per_edge": 0})
    with pytest.raises(InvalidParameter):
        generate_sequence(corner_pins, uniform_field, 0, 5, {"exclusion_window": -1})
    with pytest.raises(InvalidParameter):
        generate_sequence(corner_pins, uniform_field, 0, 5, {"bogus": 1})


@pytest.mark.parametrize(
    "overrides",
    [
        {"exclusion_window": None},
        {"ink_weight": None},
        {"termination_threshold": None},
        {"termination_threshold": float("nan")},
        {"tie_tolerance": float("nan")},
        {"tie_tolerance": float("inf")},
        {"ink_weight": float("nan")},
        {"exclusion_window": 1.5},
        {"workers": 0},
    ],
)
def test_invalid_option_values(corner_pins, uniform_field, overrides):
    with pytest.raises(InvalidParameter):
        generate_sequence(corner_pins, uniform_field, 0, 5, overrides)


def test_numpy_integer_arguments(corner_pins, uniform_field):
    result = generate_sequence(
        corner_pins, uniform_field, np.int64(0), np.int64(3), {"exclusion_window": 1}
    )
    assert result.sequence == [1, 2, 3]
    assert type(result.start_pin) is int
    assert type(result.requested_lines) is int


def test_option_overrides_keep_defaults():
    options = SequencerOptions().with_overrides({"ink_weight": 0.5})
    assert options.ink_weight == 0.5
    assert options.exclusion_window == SequencerOptions().exclusion_window
