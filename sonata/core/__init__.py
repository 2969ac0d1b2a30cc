"""Core types and constants for Sonata."""

from .note import Note, Track, Composition, Instrument
from .errors import (
    SonataError,
    AudioDecodeError,
    NoNotesFoundError,
    DocumentAssemblyError,
    TranscriptionCancelled,
    InvalidCompositionError,
)
from .constants import (
    PITCH_NAMES,
    GRID,
    PITCH_SPLIT,
    DEFAULT_TEMPO,
    DEFAULT_HOP_LENGTH,
)

__all__ = [
    "Note",
    "Track",
    "Composition",
    "Instrument",
    "SonataError",
    "AudioDecodeError",
    "NoNotesFoundError",
    "DocumentAssemblyError",
    "TranscriptionCancelled",
    "InvalidCompositionError",
    "PITCH_NAMES",
    "GRID",
    "PITCH_SPLIT",
    "DEFAULT_TEMPO",
    "DEFAULT_HOP_LENGTH",
]
