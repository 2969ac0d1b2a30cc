"""Transcription layer - Note-level detection from audio.

Converts a single melodic line into discrete notes:
- Frame-wise autocorrelation pitch tracking
- Run-length note segmentation
- Chunked, cancellable scanning with progress reports
"""

from .base import Transcriber, ProgressCallback
from .autocorrelation import (
    AutocorrelationTranscriber,
    TranscriberConfig,
    PitchFrame,
)

__all__ = [
    "Transcriber",
    "ProgressCallback",
    "AutocorrelationTranscriber",
    "TranscriberConfig",
    "PitchFrame",
]
