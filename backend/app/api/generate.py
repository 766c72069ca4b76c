"""POST /api/generate: full string-art generation."""

from __future__ import annotations

import asyncio
import json
import logging
import threading
import time
from collections.abc import AsyncGenerator

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from app.api.limits import check_line_count, check_pin_count, check_surface
from app.config import Settings
from app.dependencies import get_settings
from app.engine.config import SequencerOptions
from app.engine.context import GenerationContext
from app.engine.errors import StringArtError
from app.engine.field import ViewTransform
from app.engine.pins import parse_shape
from app.engine.pipeline import create_pipeline
from app.models.requests import GenerateRequest, ViewModel
from app.models.responses import ERROR_RESPONSES, GenerateResponse, PinModel
from app.utils.imaging import decode_base64_image

logger = logging.getLogger(__name__)

router = APIRouter()


_SENTINEL = object()  # marks end of queue


def build_context(req: GenerateRequest, settings: Settings) -> GenerationContext:
    """Validate limits, decode the image and assemble a fresh context for one run."""
    check_surface(req.width, req.height, settings)
    check_pin_count(req.pin_count, settings)
    check_line_count(req.line_count, settings)

    options = SequencerOptions(workers=settings.scoring_workers).with_overrides(
        req.options.model_dump(exclude_unset=True)
    )
    options.validate()
    return GenerationContext(
        pixels=decode_base64_image(req.image),
        width=req.width,
        height=req.height,
        view=ViewTransform(**req.view.model_dump()) if req.view else None,
        shape=parse_shape(req.shape),
        pin_count=req.pin_count,
        margin=req.margin,
        start_pin=req.start_pin,
        line_count=req.line_count,
        options=options,
    )


def context_to_response(ctx: GenerationContext, elapsed_ms: float) -> GenerateResponse:
    result = ctx.result
    return GenerateResponse(
        pins=[PinModel(index=p.index, x=p.x, y=p.y) for p in ctx.pins],
        start_pin=result.start_pin,
        sequence=result.sequence,
        requested_lines=result.requested_lines,
        lines_drawn=len(result.sequence),
        completed_early=result.completed_early,
        termination=result.termination.value,
        initial_ink=round(result.initial_ink, 4),
        remaining_ink=round(result.remaining_ink, 4),
        mean_score=round(sum(result.scores) / len(result.scores), 4) if result.scores else 0.0,
        view=ViewModel(zoom=ctx.view.zoom, offset_x=ctx.view.offset_x, offset_y=ctx.view.offset_y),
        timings_ms=ctx.timings_ms,
        processing_time_ms=round(elapsed_ms, 1),
    )


def _sse(event: str, payload: dict) -> str:
    return f"event: {event}\ndata: {json.dumps(payload)}\n\n"


async def _stream_generate(req: GenerateRequest, settings: Settings) -> AsyncGenerator[str, None]:
    """Drive pipeline.run_streaming() in a thread, yielding SSE events as they arrive."""
    start = time.perf_counter()

    try:
        ctx = build_context(req, settings)
    except StringArtError as e:
        yield _sse("error", {"type": "error", "error": e.kind, "message": str(e)})
        yield _sse("done", {"type": "done"})
        return

    pipeline = create_pipeline(progress_every=settings.progress_every)
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()
    cancel = threading.Event()

    def _run_pipeline() -> None:
        """Sync pipeline in thread, pushing progress dicts onto the async queue."""
        try:
            for progress in pipeline.run_streaming(ctx, cancel):
                loop.call_soon_threadsafe(queue.put_nowait, ("progress", progress))
        except StringArtError as e:
            error = {"type": "error", "error": e.kind, "message": str(e)}
            loop.call_soon_threadsafe(queue.put_nowait, ("error", error))
        except Exception as e:
            logger.exception("Generation failed")
            error = {"type": "error", "error": "internal_error", "message": str(e)}
            loop.call_soon_threadsafe(queue.put_nowait, ("error", error))
        loop.call_soon_threadsafe(queue.put_nowait, _SENTINEL)

    # Start pipeline in a thread so the event loop stays free to flush SSE
    loop.run_in_executor(None, _run_pipeline)

    failed = False
    try:
        while True:
            item = await queue.get()
            if item is _SENTINEL:
                break
            event, data = item
            failed = failed or event == "error"
            yield _sse(event, data)
    finally:
        # Client went away or we are done: stop the sequencer between iterations
        cancel.set()

    if not failed:
        elapsed = (time.perf_counter() - start) * 1000
        yield _sse("result", context_to_response(ctx, elapsed).model_dump())

    yield _sse("done", {"type": "done"})


@router.post("/generate/stream")
async def generate_stream(
    req: GenerateRequest,
    settings: Settings = Depends(get_settings),
) -> StreamingResponse:
    return StreamingResponse(
        _stream_generate(req, settings),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


@router.post("/generate", response_model=GenerateResponse, responses=ERROR_RESPONSES)
async def generate(
    req: GenerateRequest,
    settings: Settings = Depends(get_settings),
) -> GenerateResponse:
    start = time.perf_counter()

    ctx = build_context(req, settings)
    pipeline = create_pipeline(progress_every=settings.progress_every)
    ctx = await asyncio.get_running_loop().run_in_executor(None, pipeline.run, ctx)

    elapsed = (time.perf_counter() - start) * 1000
    return context_to_response(ctx, elapsed)
