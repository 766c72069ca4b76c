"""Layout registry: every boundary shape is a standalone function registered via decorator.

Usage:
    @layout(Shape.CIRCLE, description="Equal angular steps around an inscribed ellipse")
    def circle_layout(count: int, width: float, height: float, margin: float) -> list[Pin]:
        ...

Adding a new shape = adding one enum member and one decorated function.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from app.engine.errors import InvalidParameter

if TYPE_CHECKING:
    from app.engine.pins import Pin, Shape

logger = logging.getLogger(__name__)

LayoutFn = Callable[[int, float, float, float], "list[Pin]"]


@dataclass
class LayoutSpec:
    shape: "Shape"
    fn: LayoutFn
    description: str = ""


class LayoutRegistry:
    """Registry of pin layouts keyed by shape."""

    def __init__(self) -> None:
        self._layouts: dict["Shape", LayoutSpec] = {}

    def register(self, spec: LayoutSpec) -> None:
        if spec.shape in self._layouts:
            raise ValueError(f"Duplicate layout for shape: {spec.shape.value}")
        self._layouts[spec.shape] = spec
        logger.debug("Registered layout %s", spec.shape.value)

    def get(self, shape: "Shape") -> LayoutSpec:
        try:
            return self._layouts[shape]
        except KeyError:
            raise InvalidParameter(f"No layout registered for shape: {shape!r}") from None

    def shapes(self) -> list[str]:
        return sorted(s.value for s in self._layouts)

    @property
    def count(self) -> int:
        return len(self._layouts)


# Module-level singleton
_registry = LayoutRegistry()


def get_registry() -> LayoutRegistry:
    return _registry


def layout(shape: "Shape", *, description: str = ""):
    """Decorator to register a pin layout function."""

    def decorator(fn: LayoutFn) -> LayoutFn:
        _registry.register(LayoutSpec(shape=shape, fn=fn, description=description))
        return fn

    return decorator
