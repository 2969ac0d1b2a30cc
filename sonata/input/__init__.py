"""Input layer - Audio decoding and score import."""

from .loader import AudioLoader
from .midi import MidiImporter

__all__ = [
    "AudioLoader",
    "MidiImporter",
]
