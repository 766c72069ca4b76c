"""Pipeline orchestrator: darkness field, pin layout, then the greedy sequence."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Generator
from typing import Any

from app.engine.context import GenerationContext
from app.engine.field import build_darkness_field, view_transform_for_fit
from app.engine.pins import generate_pins
from app.engine.sequencer import GreedySequencer, validate_request

logger = logging.getLogger(__name__)

STAGES = ("field", "pins", "sequence")


class GenerationPipeline:
    """Runs the three generation stages over one GenerationContext."""

    def __init__(self, progress_every: int = 25) -> None:
        self.progress_every = max(1, progress_every)

    def build_field(self, ctx: GenerationContext) -> None:
        view = ctx.view or view_transform_for_fit(
            ctx.source_width, ctx.source_height, ctx.width, ctx.height
        )
        ctx.view = view
        ctx.darkness = build_darkness_field(
            ctx.pixels,
            ctx.source_width,
            ctx.source_height,
            ctx.width,
            ctx.height,
            zoom=view.zoom,
            offset_x=view.offset_x,
            offset_y=view.offset_y,
        )

    def layout_pins(self, ctx: GenerationContext) -> None:
        ctx.pins = generate_pins(ctx.shape, ctx.pin_count, ctx.width, ctx.height, ctx.margin)

    def _sequencer(self, ctx: GenerationContext) -> GreedySequencer:
        validate_request(ctx.pins, ctx.start_pin, ctx.line_count, ctx.options)
        return GreedySequencer(ctx.pins, ctx.darkness, ctx.options)

    def _timed(self, ctx: GenerationContext, stage: str, fn) -> float:
        t0 = time.perf_counter()
        fn(ctx)
        elapsed = round((time.perf_counter() - t0) * 1000, 1)
        ctx.timings_ms[stage] = elapsed
        ctx.completed_stages.append(stage)
        logger.debug("  %s completed in %.1fms", stage, elapsed)
        return elapsed

    def run(
        self,
        ctx: GenerationContext,
        cancel_event: threading.Event | None = None,
    ) -> GenerationContext:
        """Run every stage. Engine errors propagate; early termination does not raise."""
        start = time.perf_counter()

        self._timed(ctx, "field", self.build_field)
        self._timed(ctx, "pins", self.layout_pins)

        def _sequence(c: GenerationContext) -> None:
            c.result = self._sequencer(c).run(c.start_pin, c.line_count, cancel_event)

        self._timed(ctx, "sequence", _sequence)

        total = (time.perf_counter() - start) * 1000
        logger.info(
            "Pipeline complete: %d/%d chords, %s, in %.0fms",
            len(ctx.result.sequence),
            ctx.line_count,
            ctx.result.termination.value,
            total,
        )
        logger.debug("Run summary: %s", ctx.summary())
        return ctx

    def run_streaming(
        self,
        ctx: GenerationContext,
        cancel_event: threading.Event | None = None,
    ) -> Generator[dict[str, Any], None, None]:
        """Run the pipeline, yielding a progress dict after each stage and every
        ``progress_every`` chords.

        The caller's ``ctx`` is mutated in-place, so after the generator is
        exhausted the context holds all results (same as ``run()``).
        """
        total_stages = len(STAGES)

        for index, (stage, fn) in enumerate(
            (("field", self.build_field), ("pins", self.layout_pins))
        ):
            yield {"stage": stage, "index": index, "total": total_stages, "status": "running"}
            elapsed = self._timed(ctx, stage, fn)
            yield {
                "stage": stage,
                "index": index,
                "total": total_stages,
                "status": "ok",
                "elapsed_ms": elapsed,
            }

        yield {"stage": "sequence", "index": 2, "total": total_stages, "status": "running"}
        t0 = time.perf_counter()
        sequencer = self._sequencer(ctx)
        result = sequencer.new_result(ctx.start_pin, ctx.line_count)
        ctx.result = result

        for chord in sequencer.steps(result, cancel_event):
            if chord.step % self.progress_every == 0:
                yield {
                    "stage": "sequence",
                    "index": 2,
                    "total": total_stages,
                    "status": "running",
                    "step": chord.step,
                    "lines": ctx.line_count,
                    "sub_progress": round(chord.step / ctx.line_count, 3),
                    "remaining_ink": round(chord.remaining_ink, 3),
                }

        elapsed = round((time.perf_counter() - t0) * 1000, 1)
        ctx.timings_ms["sequence"] = elapsed
        ctx.completed_stages.append("sequence")
        yield {
            "stage": "sequence",
            "index": 2,
            "total": total_stages,
            "status": "ok",
            "elapsed_ms": elapsed,
            "termination": result.termination.value,
        }


def create_pipeline(progress_every: int = 25) -> GenerationPipeline:
    """Factory function for creating a pipeline instance."""
    return GenerationPipeline(progress_every=progress_every)
