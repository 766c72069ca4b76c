"""Engine error kinds. Early termination is a result state, not an error."""

from __future__ import annotations


class StringArtError(ValueError):
    """Base class for all engine failures."""

    kind = "string_art_error"


class InvalidParameter(StringArtError):
    """Bad pin count, zoom, shape tag, line count or option value."""

    kind = "invalid_parameter"


class InvalidImage(StringArtError):
    """Empty, zero-dimension or malformed pixel buffer."""

    kind = "invalid_image"
