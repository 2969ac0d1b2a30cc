"""Base classes for transcription."""

from abc import ABC, abstractmethod
from typing import Callable
import numpy as np

from ..core import Composition

# Receives (fraction complete 0-1, estimated seconds remaining)
ProgressCallback = Callable[[float, float], None]


class Transcriber(ABC):
    """Abstract base class for audio transcription."""

    @abstractmethod
    def transcribe(self, audio: np.ndarray, sr: int, **kwargs) -> Composition:
        """
        Transcribe audio to a composition.

        Args:
            audio: Audio array (mono)
            sr: Sample rate

        Returns:
            Transcribed composition
        """
        pass
