"""Tests for the generation pipeline orchestrator."""

import threading

import numpy as np
import pytest

from app.engine.config import SequencerOptions
from app.engine.context import GenerationContext
from app.engine.errors import InvalidParameter
from app.engine.field import ViewTransform
from app.engine.pins import Shape
from app.engine.pipeline import create_pipeline
from app.engine.sequencer import TerminationReason


def _ctx(pixels: np.ndarray, **kwargs) -> GenerationContext:
    defaults = dict(width=50, height=50, pin_count=16, line_count=10)
    defaults.update(kwargs)
    return GenerationContext(pixels=pixels, **defaults)


def test_run_populates_context(band_image):
    ctx = create_pipeline().run(_ctx(band_image))

    assert ctx.completed_stages == ["field", "pins", "sequence"]
    assert set(ctx.timings_ms) == {"field", "pins", "sequence"}
    assert (ctx.darkness.width, ctx.darkness.height) == (50, 50)
    assert len(ctx.pins) == 16
    assert 0 < len(ctx.result.sequence) <= 10
    assert ctx.view is not None
    assert ctx.summary()["source"] == [40, 40]


def test_explicit_view_and_square(band_image):
    ctx = _ctx(band_image, view=ViewTransform(zoom=1.0), shape=Shape.SQUARE)
    ctx = create_pipeline().run(ctx)
    assert ctx.view.zoom == 1.0
    # 40x40 image in the top-left of a 50x50 surface
    assert ctx.darkness.values[45:, :].sum() == 0.0


def test_blank_image_stops_early():
    white = np.full((20, 20, 3), 255, dtype=np.uint8)
    ctx = create_pipeline().run(_ctx(white))
    assert ctx.result.sequence == []
    assert ctx.result.termination is TerminationReason.NO_INK


def test_invalid_parameters_propagate(band_image):
    with pytest.raises(InvalidParameter):
        create_pipeline().run(_ctx(band_image, pin_count=1))
    with pytest.raises(InvalidParameter):
        create_pipeline().run(_ctx(band_image, start_pin=99))


def test_run_streaming_reports_progress(band_image):
    ctx = _ctx(band_image, line_count=12)
    events = list(create_pipeline(progress_every=4).run_streaming(ctx))

    stages = [(e["stage"], e["status"]) for e in events if "step" not in e]
    assert stages == [
        ("field", "running"),
        ("field", "ok"),
        ("pins", "running"),
        ("pins", "ok"),
        ("sequence", "running"),
        ("sequence", "ok"),
    ]
    steps = [e["step"] for e in events if "step" in e]
    assert steps == [s for s in (4, 8, 12) if s <= len(ctx.result.sequence)]
    assert events[-1]["termination"] == ctx.result.termination.value
    assert ctx.completed_stages == ["field", "pins", "sequence"]


def test_streaming_matches_run(band_image):
    streamed = _ctx(band_image, line_count=20)
    list(create_pipeline().run_streaming(streamed))
    direct = create_pipeline().run(_ctx(band_image, line_count=20))
    assert streamed.result.sequence == direct.result.sequence


def test_cancel_before_sequence(band_image):
    cancel = threading.Event()
    cancel.set()
    ctx = create_pipeline().run(_ctx(band_image), cancel_event=cancel)
    assert ctx.result.sequence == []
    assert ctx.result.termination is TerminationReason.CANCELLED


def test_options_flow_through(band_image):
    ctx = _ctx(band_image, options=SequencerOptions(exclusion_window=0, max_repeats_per_edge=None))
    ctx = create_pipeline().run(ctx)
    assert ctx.result.requested_lines == 10


def test_cancel_mid_stream_keeps_partial_sequence():
    cancel = threading.Event()
    ctx = _ctx(np.zeros((20, 20, 3), dtype=np.uint8), line_count=50)

    for progress in create_pipeline(progress_every=1).run_streaming(ctx, cancel):
        if progress.get("step") == 2:
            cancel.set()

    assert ctx.result.termination is TerminationReason.CANCELLED
    assert len(ctx.result.sequence) == 2
