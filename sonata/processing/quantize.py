"""Note quantization - Snap notes to the rhythmic grid and split onto a grand staff."""

import math
from dataclasses import replace
from typing import List, Sequence, Tuple

from ..core import Composition, Instrument, Note, Track
from ..core.constants import (
    DEFAULT_QUANTIZE_RESOLUTION,
    DEFAULT_VELOCITY,
    DEFAULT_VOLUME,
    MAX_VELOCITY,
    MIDI_MAX,
    MIDI_MIN,
    MIN_VELOCITY,
    PITCH_SPLIT,
)


def sort_notes(notes: Sequence[Note]) -> List[Note]:
    """Order notes by start time, then pitch."""
    return sorted(notes, key=lambda n: (n.time, n.pitch))


class Quantizer:
    """Quantize note timings to a rhythmic grid measured in beats."""

    def __init__(
        self,
        quantize_resolution: int = DEFAULT_QUANTIZE_RESOLUTION,
        pitch_split: int = PITCH_SPLIT,
    ):
        """
        Initialize Quantizer.

        Args:
            quantize_resolution: Quantization grid (e.g., 16 for 16th notes)
            pitch_split: Lowest pitch placed on the upper (treble) staff
        """
        self.quantize_resolution = quantize_resolution
        self.pitch_split = pitch_split

    @property
    def grid_duration(self) -> float:
        """Duration of one grid unit in beats."""
        return 4 / self.quantize_resolution

    def normalize_note(self, note: Note) -> Note:
        """Snap one note to the grid and clamp pitch and velocity."""
        time = max(0.0, self._snap_to_grid(note.time))
        duration = max(self.grid_duration, self._snap_to_grid(note.duration))
        velocity = DEFAULT_VELOCITY if note.velocity is None else note.velocity
        velocity = min(MAX_VELOCITY, max(MIN_VELOCITY, velocity))
        pitch = min(MIDI_MAX, max(MIDI_MIN, int(note.pitch)))
        return replace(
            note, pitch=pitch, time=time, duration=duration, velocity=velocity
        )

    def quantize(self, notes: Sequence[Note]) -> List[Note]:
        """
        Quantize note times and durations to grid.

        Args:
            notes: List of notes to quantize

        Returns:
            List of quantized notes
        """
        return [self.normalize_note(n) for n in notes]

    def _snap_to_grid(self, value: float) -> float:
        """Snap a beat position or length to the nearest grid multiple, halves up."""
        grid_units = math.floor(value / self.grid_duration + 0.5)
        return grid_units * self.grid_duration

    def split_grand_staff(self, tracks: Sequence[Track]) -> Tuple[Track, Track]:
        """
        Merge all tracks and split the notes into treble and bass voices.

        Args:
            tracks: Tracks to merge

        Returns:
            Tuple of (upper, lower) tracks, each sorted by (time, pitch)
        """
        instrument = tracks[0].instrument if tracks else Instrument.PIANO
        upper: List[Note] = []
        lower: List[Note] = []

        for track in tracks:
            for note in self.quantize(track.notes):
                if note.pitch < self.pitch_split:
                    lower.append(note)
                else:
                    upper.append(note)

        return (
            Track(instrument=instrument, notes=sort_notes(upper), volume=DEFAULT_VOLUME),
            Track(instrument=instrument, notes=sort_notes(lower), volume=DEFAULT_VOLUME),
        )

    def normalize_composition(self, composition: Composition) -> Composition:
        """
        Put a composition onto a two-voice grand staff.

        Ensembles of more than two tracks with mixed instruments are
        returned unchanged.
        """
        tracks = composition.tracks
        if not tracks:
            return composition.with_tracks([])

        same_instrument = all(t.instrument == tracks[0].instrument for t in tracks)
        if len(tracks) > 2 and not same_instrument:
            return composition

        upper, lower = self.split_grand_staff(tracks)
        return composition.with_tracks([upper, lower])


def normalize_composition(composition: Composition) -> Composition:
    """Normalize a composition with the default 16th-note grid."""
    return Quantizer().normalize_composition(composition)
