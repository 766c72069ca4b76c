"""API response models."""

from __future__ import annotations

from pydantic import BaseModel, Field

from app.models.requests import ViewModel


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    shapes: list[str] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    error: str
    detail: str = ""


class PinModel(BaseModel):
    index: int
    x: float
    y: float


class PinsResponse(BaseModel):
    shape: str
    pins: list[PinModel] = Field(default_factory=list)


class FieldResponse(BaseModel):
    width: int
    height: int
    view: ViewModel
    total_ink: float = 0.0
    mean_ink: float = 0.0
    max_ink: float = 0.0


class GenerateResponse(BaseModel):
    pins: list[PinModel] = Field(default_factory=list)
    start_pin: int = 0
    sequence: list[int] = Field(default_factory=list)
    requested_lines: int = 0
    lines_drawn: int = 0
    completed_early: bool = False
    termination: str = "completed"
    initial_ink: float = 0.0
    remaining_ink: float = 0.0
    mean_score: float = 0.0
    view: ViewModel | None = None
    timings_ms: dict[str, float] = Field(default_factory=dict)
    processing_time_ms: float = 0.0


# OpenAPI schema for engine errors mapped to 422 by the app-level handler
ERROR_RESPONSES = {422: {"model": ErrorResponse, "description": "Invalid parameter or image"}}
