"""Monophonic transcription using frame-wise autocorrelation.

The waveform is scanned in overlapping frames. Each frame is gated on RMS
energy, then its period is estimated from the autocorrelation peak inside the
search band. Consecutive frames with the same MIDI pitch are merged into
notes; runs shorter than the minimum note length are dropped as noise.

The scan is chunked: it pauses every ``yield_interval`` frames so an asyncio
caller can hand control back to its event loop, reports progress every
``progress_interval`` frames, and can be cancelled between chunks.

Limitations: a single melodic line is assumed, and times are converted to
beats at a fixed tempo rather than one inferred from the recording.
"""

import asyncio
import threading
import time
import warnings
from dataclasses import dataclass
from typing import Iterator, List, Optional

import numpy as np

from ..core import (
    Composition,
    Instrument,
    NoNotesFoundError,
    Note,
    Track,
    TranscriptionCancelled,
)
from ..core.constants import (
    DEFAULT_ENERGY_THRESHOLD,
    DEFAULT_FRAME_SIZE,
    DEFAULT_HOP_LENGTH,
    DEFAULT_MAX_FREQ,
    DEFAULT_MIN_FREQ,
    DEFAULT_MIN_NOTE_SECONDS,
    DEFAULT_TRANSCRIPTION_TEMPO,
    DEFAULT_VOLUME,
)
from ..processing import Quantizer
from .base import ProgressCallback, Transcriber


@dataclass
class TranscriberConfig:
    """Configuration for autocorrelation transcription.

    Attributes:
        frame_size: Samples per analysis frame (default: 2048)
        hop_length: Samples between frame starts (default: 512)
        energy_threshold: Frames with lower RMS are silent (default: 0.01)
        min_freq: Lowest detectable frequency in Hz (default: 60)
        max_freq: Highest detectable frequency in Hz (default: 2000)
        min_note_duration: Shorter pitch runs are discarded, seconds (default: 0.12)
        tempo: Tempo used to convert seconds to beats (default: 100)
        velocity: Velocity given to every detected note (default: 0.8)
        progress_interval: Frames between progress reports (default: 20)
        yield_interval: Frames between cooperative pauses (default: 200)
    """

    frame_size: int = DEFAULT_FRAME_SIZE
    hop_length: int = DEFAULT_HOP_LENGTH
    energy_threshold: float = DEFAULT_ENERGY_THRESHOLD
    min_freq: float = DEFAULT_MIN_FREQ
    max_freq: float = DEFAULT_MAX_FREQ
    min_note_duration: float = DEFAULT_MIN_NOTE_SECONDS
    tempo: float = DEFAULT_TRANSCRIPTION_TEMPO
    velocity: float = 0.8
    progress_interval: int = 20
    yield_interval: int = 200


@dataclass
class PitchFrame:
    """Pitch estimate for one analysis frame."""

    time: float  # Frame start in seconds
    midi: Optional[int]  # None = silence


class AutocorrelationTranscriber(Transcriber):
    """Transcribes monophonic audio by autocorrelation pitch tracking."""

    def __init__(self, config: Optional[TranscriberConfig] = None):
        """
        Initialize AutocorrelationTranscriber.

        Args:
            config: Optional TranscriberConfig for advanced settings
        """
        self.config = config or TranscriberConfig()
        self.quantizer = Quantizer()

    def detect_pitch(self, frame: np.ndarray, sr: int) -> Optional[float]:
        """
        Estimate the fundamental frequency of one frame.

        Returns:
            Frequency in Hz, or None for silent/unpitched frames
        """
        frame = np.asarray(frame, dtype=np.float64)
        size = len(frame)
        if size == 0:
            return None

        rms = float(np.sqrt(np.mean(frame**2)))
        if rms < self.config.energy_threshold:
            return None

        min_lag = max(1, int(sr // self.config.max_freq))
        max_lag = min(size - 1, int(sr // self.config.min_freq))
        if max_lag < min_lag:
            return None

        # corr[lag] = sum(x[i] * x[i + lag]), via zero-padded FFT
        n_fft = 1 << (2 * size - 1).bit_length()
        spectrum = np.fft.rfft(frame, n_fft)
        corr = np.fft.irfft(spectrum * np.conj(spectrum), n_fft)[:size]

        candidates = corr[min_lag : max_lag + 1]
        best = int(np.argmax(candidates))
        if candidates[best] <= 0:
            return None
        return sr / (min_lag + best)

    def frame_count(self, n_samples: int) -> int:
        cfg = self.config
        if n_samples <= cfg.frame_size:
            return 0
        return len(range(0, n_samples - cfg.frame_size, cfg.hop_length))

    def _scan(
        self,
        audio: np.ndarray,
        sr: int,
        track: List[PitchFrame],
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> Iterator[int]:
        """Fill ``track`` frame by frame, pausing every ``yield_interval`` frames."""
        cfg = self.config
        n_frames = self.frame_count(len(audio))
        total = max(1, n_frames)
        started = time.perf_counter()

        if n_frames == 0:
            warnings.warn("Audio is shorter than one analysis frame")

        self._check_cancelled(cancel_event)
        if on_progress:
            on_progress(0.0, 0.0)

        for index, start in enumerate(range(0, len(audio) - cfg.frame_size, cfg.hop_length), 1):
            frame = audio[start : start + cfg.frame_size]
            freq = self.detect_pitch(frame, sr)
            midi = Note.freq_to_midi(freq) if freq else None
            track.append(PitchFrame(time=start / sr, midi=midi))

            if index % cfg.progress_interval == 0:
                self._check_cancelled(cancel_event)
                if on_progress:
                    progress = min(1.0, index / total)
                    elapsed = time.perf_counter() - started
                    eta = max(0.0, elapsed / progress - elapsed) if progress > 0 else 0.0
                    on_progress(progress, eta)

            if index % cfg.yield_interval == 0:
                yield index
                self._check_cancelled(cancel_event)

        if on_progress:
            on_progress(1.0, 0.0)

    @staticmethod
    def _check_cancelled(cancel_event: Optional[threading.Event]) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise TranscriptionCancelled("Audio transcription was cancelled")

    def pitch_track(self, audio: np.ndarray, sr: int) -> List[PitchFrame]:
        """Per-frame pitch estimates for a whole waveform."""
        track: List[PitchFrame] = []
        for _ in self._scan(audio, sr, track):
            pass
        return track

    def segment_notes(self, track: List[PitchFrame], end_time: float) -> List[Note]:
        """
        Merge runs of equal pitch into notes (times in seconds).

        Args:
            track: Per-frame pitch estimates in time order
            end_time: Time at which the last run ends

        Returns:
            Notes with time/duration in seconds
        """
        notes: List[Note] = []
        current: Optional[int] = None
        start_time = 0.0

        def close(until: float) -> None:
            duration = until - start_time
            if current is not None and duration >= self.config.min_note_duration:
                notes.append(
                    Note(
                        pitch=current,
                        time=start_time,
                        duration=duration,
                        velocity=self.config.velocity,
                    )
                )

        for frame in track:
            if frame.midi == current:
                continue
            close(frame.time)
            current = frame.midi
            start_time = frame.time

        close(end_time)
        return notes

    def transcribe(
        self,
        audio: np.ndarray,
        sr: int,
        title: str = "Audio Import",
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> Composition:
        """
        Transcribe monophonic audio to a composition.

        Args:
            audio: Audio array (mono)
            sr: Sample rate
            title: Title of the resulting composition
            on_progress: Called with (fraction complete, seconds remaining)
            cancel_event: Set it to abort the scan

        Returns:
            Normalized single-voice composition at the configured tempo

        Raises:
            NoNotesFoundError: If no note survives segmentation
            TranscriptionCancelled: If ``cancel_event`` is set during the scan
        """
        track: List[PitchFrame] = []
        for _ in self._scan(audio, sr, track, on_progress, cancel_event):
            pass
        return self._build_composition(track, sr, title)

    async def transcribe_async(
        self,
        audio: np.ndarray,
        sr: int,
        title: str = "Audio Import",
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> Composition:
        """Like :meth:`transcribe`, but yields to the event loop between chunks."""
        track: List[PitchFrame] = []
        for _ in self._scan(audio, sr, track, on_progress, cancel_event):
            await asyncio.sleep(0)
        return self._build_composition(track, sr, title)

    def _build_composition(self, track: List[PitchFrame], sr: int, title: str) -> Composition:
        end_time = (track[-1].time + self.config.hop_length / sr) if track else 0.0
        raw_notes = self.segment_notes(track, end_time)
        if not raw_notes:
            raise NoNotesFoundError("No notes detected in audio")

        beats_per_second = self.config.tempo / 60.0
        notes = [
            Note(
                pitch=n.pitch,
                time=n.time * beats_per_second,
                duration=n.duration * beats_per_second,
                velocity=n.velocity,
            )
            for n in raw_notes
        ]

        composition = Composition(
            title=title,
            composer="Audio Import",
            style="Imported Audio",
            tempo=self.config.tempo,
            tracks=[Track(instrument=Instrument.PIANO, notes=notes, volume=DEFAULT_VOLUME)],
        )
        return self.quantizer.normalize_composition(composition)
