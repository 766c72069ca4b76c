"""Health check + meta endpoints."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter

from app.engine.config import SequencerOptions
from app.engine.registry import get_registry
from app.models.responses import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(
        status="ok",
        version="0.1.0",
        shapes=get_registry().shapes(),
    )


@router.get("/defaults")
async def defaults() -> dict[str, float | int | None]:
    """Documented sequencer defaults, for clients building option forms."""
    return asdict(SequencerOptions())
