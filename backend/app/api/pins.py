"""POST /api/pins: pin layout for a shape."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.limits import check_pin_count, check_surface
from app.config import Settings
from app.dependencies import get_settings
from app.engine.pins import generate_pins, parse_shape
from app.models.requests import PinsRequest
from app.models.responses import ERROR_RESPONSES, PinModel, PinsResponse

router = APIRouter()


@router.post("/pins", response_model=PinsResponse, responses=ERROR_RESPONSES)
async def pins(req: PinsRequest, settings: Settings = Depends(get_settings)) -> PinsResponse:
    check_pin_count(req.count, settings)
    check_surface(req.width, req.height, settings)

    shape = parse_shape(req.shape)
    layout = generate_pins(shape, req.count, req.width, req.height, req.margin)
    return PinsResponse(
        shape=shape.value,
        pins=[PinModel(index=p.index, x=p.x, y=p.y) for p in layout],
    )
