"""POST /api/field: darkness field summary for a view, used to preview the crop."""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends

from app.api.limits import check_surface
from app.config import Settings
from app.dependencies import get_settings
from app.engine.context import GenerationContext
from app.engine.field import ViewTransform
from app.engine.pipeline import create_pipeline
from app.models.requests import FieldRequest, ViewModel
from app.models.responses import ERROR_RESPONSES, FieldResponse
from app.utils.imaging import decode_base64_image

router = APIRouter()


@router.post("/field", response_model=FieldResponse, responses=ERROR_RESPONSES)
async def field(req: FieldRequest, settings: Settings = Depends(get_settings)) -> FieldResponse:
    check_surface(req.width, req.height, settings)

    ctx = GenerationContext(
        pixels=decode_base64_image(req.image),
        width=req.width,
        height=req.height,
        view=ViewTransform(**req.view.model_dump()) if req.view else None,
    )
    pipeline = create_pipeline()
    await asyncio.get_running_loop().run_in_executor(None, pipeline.build_field, ctx)

    values = ctx.darkness.values
    return FieldResponse(
        width=ctx.darkness.width,
        height=ctx.darkness.height,
        view=ViewModel(zoom=ctx.view.zoom, offset_x=ctx.view.offset_x, offset_y=ctx.view.offset_y),
        total_ink=round(float(values.sum()), 4),
        mean_ink=round(float(values.mean()), 4),
        max_ink=round(float(values.max()), 4),
    )
