"""GenerationContext: the single state object flowing through one string-art run.

Inputs are set by the caller; field, pins and result are populated by the
pipeline stages in order. Each context is owned by exactly one run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import numpy as np
from numpy.typing import NDArray

from app.engine.config import SequencerOptions
from app.engine.field import ViewTransform
from app.engine.pins import DEFAULT_PIN_MARGIN, Shape

if TYPE_CHECKING:
    from app.engine.field import DarknessField
    from app.engine.pins import Pin
    from app.engine.sequencer import StringArtResult


@dataclass
class GenerationContext:
    """Shared state for the field → pins → sequence stages."""

    # Decoded source pixels: HxWx3 or HxWx4 uint8
    pixels: NDArray[np.uint8] = field(default_factory=lambda: np.empty((0, 0, 4), dtype=np.uint8))
    # Output surface dimensions
    width: int = 500
    height: int = 500
    # Source → output mapping; None = cover-fit the image
    view: ViewTransform | None = None
    # Pin layout
    shape: Shape = Shape.CIRCLE
    pin_count: int = 200
    margin: float = DEFAULT_PIN_MARGIN
    # Sequencer
    start_pin: int = 0
    line_count: int = 1000
    options: SequencerOptions = field(default_factory=SequencerOptions)

    # --- Stage outputs ---
    darkness: DarknessField | None = None
    pins: list[Pin] = field(default_factory=list)
    result: StringArtResult | None = None

    # --- Run metadata ---
    timings_ms: dict[str, float] = field(default_factory=dict)
    completed_stages: list[str] = field(default_factory=list)

    @property
    def source_width(self) -> int:
        return int(self.pixels.shape[1]) if self.pixels.ndim == 3 else 0

    @property
    def source_height(self) -> int:
        return int(self.pixels.shape[0]) if self.pixels.ndim == 3 else 0

    def summary(self) -> dict[str, Any]:
        """Plain-dict digest for logs and progress events."""
        return {
            "shape": self.shape.value,
            "pin_count": self.pin_count,
            "line_count": self.line_count,
            "surface": [self.width, self.height],
            "source": [self.source_width, self.source_height],
            "stages": list(self.completed_stages),
        }
