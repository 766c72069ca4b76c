"""String-art generation engine: pin layouts, darkness fields, greedy chord sequencing."""

from app.engine.config import SequencerOptions
from app.engine.errors import InvalidImage, InvalidParameter, StringArtError
from app.engine.field import DarknessField, ViewTransform, build_darkness_field
from app.engine.pins import Pin, Shape, generate_pins
from app.engine.sequencer import StringArtResult, TerminationReason, generate_sequence

__all__ = [
    "SequencerOptions",
    "StringArtError",
    "InvalidParameter",
    "InvalidImage",
    "DarknessField",
    "ViewTransform",
    "build_darkness_field",
    "Pin",
    "Shape",
    "generate_pins",
    "StringArtResult",
    "TerminationReason",
    "generate_sequence",
]
