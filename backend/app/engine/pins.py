"""Pin layouts: anchor points around a circle or square boundary.

Pin 0 of a circle is the rightmost point; indices increase counterclockwise
in a y-up frame (clockwise as drawn on a y-down canvas). Square pins walk the
top edge left→right, right edge top→bottom, bottom edge right→left and left
edge bottom→top, starting at the top-left corner.
"""

from __future__ import annotations

import enum
import logging
import math
from dataclasses import dataclass

import numpy as np

from app.engine.errors import InvalidParameter
from app.engine.registry import get_registry, layout

logger = logging.getLogger(__name__)

# Pins sit this many output pixels inside the surface so a drawn pin dot
# (radius 2) is fully visible.
DEFAULT_PIN_MARGIN = 2.0

MIN_PIN_COUNT = 2


class Shape(str, enum.Enum):
    CIRCLE = "circle"
    SQUARE = "square"


@dataclass(frozen=True)
class Pin:
    index: int
    x: float
    y: float

    @property
    def position(self) -> tuple[float, float]:
        return (self.x, self.y)


def parse_shape(shape: Shape | str) -> Shape:
    """Accept a Shape or its case-insensitive tag."""
    if isinstance(shape, Shape):
        return shape
    if isinstance(shape, str):
        try:
            return Shape(shape.strip().lower())
        except ValueError:
            pass
    raise InvalidParameter(f"Unknown shape: {shape!r} (expected one of {[s.value for s in Shape]})")


@layout(Shape.CIRCLE, description="Equal angular steps around the inscribed ellipse")
def circle_layout(count: int, width: float, height: float, margin: float) -> list[Pin]:
    rx = width / 2 - margin
    ry = height / 2 - margin
    if rx <= 0 or ry <= 0:
        raise InvalidParameter(f"Margin {margin} leaves no radius inside {width}x{height}")

    cx, cy = width / 2, height / 2
    angles = 2 * np.pi * np.arange(count) / count
    xs = cx + rx * np.cos(angles)
    ys = cy + ry * np.sin(angles)
    return [Pin(index=i, x=float(x), y=float(y)) for i, (x, y) in enumerate(zip(xs, ys))]


@layout(Shape.SQUARE, description="Even spacing along the four edges of the inscribed rectangle")
def square_layout(count: int, width: float, height: float, margin: float) -> list[Pin]:
    left, top = margin, margin
    right, bottom = width - margin, height - margin
    if right <= left or bottom <= top:
        raise InvalidParameter(f"Margin {margin} leaves no extent inside {width}x{height}")

    edges = [
        ((left, top), (right, top)),
        ((right, top), (right, bottom)),
        ((right, bottom), (left, bottom)),
        ((left, bottom), (left, top)),
    ]
    base, remainder = divmod(count, len(edges))

    pins: list[Pin] = []
    for k, ((x0, y0), (x1, y1)) in enumerate(edges):
        n_edge = base + (1 if k < remainder else 0)
        for j in range(n_edge):
            t = j / n_edge
            pins.append(Pin(index=len(pins), x=x0 + t * (x1 - x0), y=y0 + t * (y1 - y0)))
    return pins


def generate_pins(
    shape: Shape | str,
    count: int,
    width: float,
    height: float,
    margin: float = DEFAULT_PIN_MARGIN,
) -> list[Pin]:
    """Lay out ``count`` pins on ``shape`` inside a ``width`` x ``height`` surface.

    Pure and deterministic. Raises InvalidParameter for fewer than two pins,
    a non-positive surface, a negative margin or an unknown shape.
    """
    shape = parse_shape(shape)
    if isinstance(count, bool) or not isinstance(count, (int, np.integer)):
        raise InvalidParameter(f"Pin count must be an integer, got {count!r}")
    if count < MIN_PIN_COUNT:
        raise InvalidParameter(f"Pin count must be >= {MIN_PIN_COUNT}, got {count}")
    if not (math.isfinite(width) and math.isfinite(height)) or width <= 0 or height <= 0:
        raise InvalidParameter(f"Surface must be positive, got {width}x{height}")
    if not math.isfinite(margin) or margin < 0:
        raise InvalidParameter(f"Margin must be >= 0, got {margin}")

    spec = get_registry().get(shape)
    pins = spec.fn(int(count), float(width), float(height), float(margin))
    logger.debug("Laid out %d %s pins on %gx%g", len(pins), shape.value, width, height)
    return pins
