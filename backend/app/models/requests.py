"""API request models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ViewModel(BaseModel):
    zoom: float = Field(default=1.0, description="Source → output scale factor (> 0)")
    offset_x: float = Field(default=0.0, description="Horizontal pan in output pixels")
    offset_y: float = Field(default=0.0, description="Vertical pan in output pixels")


class SequencerOptionsModel(BaseModel):
    exclusion_window: int | None = Field(
        default=None,
        description="Pins visited just before the current pin that may not be chosen next",
    )
    max_repeats_per_edge: int | None = Field(
        default=None,
        description="Max uses of one pin pair; send null explicitly for no cap",
    )
    ink_weight: float | None = Field(default=None, description="Ink removed per chord pass")
    termination_threshold: float | None = Field(
        default=None,
        description="Best score at or below this stops generation early",
    )


class PinsRequest(BaseModel):
    shape: str = Field(default="circle", description="Boundary shape: circle or square")
    count: int = Field(..., description="Number of pins (>= 2)")
    width: float = Field(..., description="Output surface width")
    height: float = Field(..., description="Output surface height")
    margin: float = Field(default=2.0, description="Inset of pins from the surface edge")


class FieldRequest(BaseModel):
    image: str = Field(..., description="Base64 image (PNG/JPEG/...), data URL prefix allowed")
    width: int = Field(..., description="Output surface width in pixels")
    height: int = Field(..., description="Output surface height in pixels")
    view: ViewModel | None = Field(
        default=None,
        description="Zoom/pan at generation time; omitted = cover-fit the image",
    )


class GenerateRequest(FieldRequest):
    shape: str = Field(default="circle", description="Boundary shape: circle or square")
    pin_count: int = Field(default=200, description="Number of pins (>= 2)")
    line_count: int = Field(default=1000, description="Maximum number of chords")
    start_pin: int = Field(default=0, description="Pin the thread starts from")
    margin: float = Field(default=2.0, description="Inset of pins from the surface edge")
    options: SequencerOptionsModel = Field(
        default_factory=SequencerOptionsModel,
        description="Overrides for sequencer tunables; unset fields keep defaults",
    )
