"""Request size limits from settings, enforced before any engine work."""

from __future__ import annotations

from app.config import Settings
from app.engine.errors import InvalidParameter


def check_surface(width: float, height: float, settings: Settings) -> None:
    if max(width, height) > settings.max_output_size:
        raise InvalidParameter(
            f"Output surface {width}x{height} exceeds limit {settings.max_output_size}"
        )


def check_pin_count(count: int, settings: Settings) -> None:
    if count > settings.max_pin_count:
        raise InvalidParameter(f"Pin count {count} exceeds limit {settings.max_pin_count}")


def check_line_count(count: int, settings: Settings) -> None:
    if count > settings.max_line_count:
        raise InvalidParameter(f"Line count {count} exceeds limit {settings.max_line_count}")
