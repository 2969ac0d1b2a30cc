"""Note, Track and Composition - the shared data model of Sonata."""

import warnings
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional

import numpy as np

from .constants import DEFAULT_VELOCITY, DEFAULT_VOLUME, PITCH_NAMES
from .errors import InvalidCompositionError

NOTE_REQUIRED_KEYS = ("pitch", "time", "duration")


def _expect_mapping(data: Any, what: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise InvalidCompositionError(f"{what} must be an object, got {type(data).__name__}")
    return data


def _expect_list(data: Any, what: str) -> List[Any]:
    if data is None:
        return []
    if not isinstance(data, list):
        raise InvalidCompositionError(f"{what} must be a list, got {type(data).__name__}")
    return data


@dataclass
class Note:
    """Represents a musical note."""

    pitch: int  # MIDI pitch (0-127)
    time: float  # Start time in beats
    duration: float  # Duration in beats
    velocity: float = DEFAULT_VELOCITY  # Loudness (0-1)
    fingering: Optional[str] = None  # e.g. "_1"
    dynamic: Optional[str] = None  # e.g. "!p!"
    slur_start: bool = False
    slur_end: bool = False

    @property
    def end(self) -> float:
        """Note end time in beats."""
        return self.time + self.duration

    @property
    def pitch_name(self) -> str:
        """Get note name (e.g., 'C4', 'A#3')."""
        octave = (self.pitch // 12) - 1
        return f"{PITCH_NAMES[self.pitch % 12]}{octave}"

    @staticmethod
    def freq_to_midi(freq: float) -> int:
        """Convert frequency (Hz) to MIDI pitch."""
        if freq <= 0:
            return 0
        return int(round(69 + 12 * np.log2(freq / 440.0)))

    @staticmethod
    def midi_to_freq(midi: int) -> float:
        """Convert MIDI pitch to frequency (Hz)."""
        return 440.0 * (2 ** ((midi - 69) / 12.0))

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "pitch": self.pitch,
            "time": self.time,
            "duration": self.duration,
            "velocity": self.velocity,
        }
        if self.fingering:
            data["fingering"] = self.fingering
        if self.dynamic:
            data["dynamic"] = self.dynamic
        if self.slur_start:
            data["slurStart"] = True
        if self.slur_end:
            data["slurEnd"] = True
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Note":
        data = _expect_mapping(data, "Note")
        missing = [key for key in NOTE_REQUIRED_KEYS if data.get(key) is None]
        if missing:
            raise InvalidCompositionError(f"Note is missing {', '.join(missing)}: {data}")

        velocity = data.get("velocity")
        try:
            return cls(
                pitch=int(round(data["pitch"])),
                time=float(data["time"]),
                duration=float(data["duration"]),
                velocity=DEFAULT_VELOCITY if velocity is None else float(velocity),
                fingering=data.get("fingering"),
                dynamic=data.get("dynamic"),
                slur_start=bool(data.get("slurStart", data.get("slur_start", False))),
                slur_end=bool(data.get("slurEnd", data.get("slur_end", False))),
            )
        except (TypeError, ValueError, OverflowError) as e:
            raise InvalidCompositionError(f"Invalid note {data}: {e}") from e


class Instrument(str, Enum):
    """Instruments a track can be scored for."""

    PIANO = "Piano"
    VIOLIN = "Violin"
    CELLO = "Cello"
    FLUTE = "Flute"
    CLARINET = "Clarinet"
    TRUMPET = "Trumpet"
    HARP = "Harp"
    PERCUSSION = "Percussion"

    @classmethod
    def parse(cls, label: Any) -> "Instrument":
        """Resolve a free-form label, falling back to piano."""
        if isinstance(label, cls):
            return label
        text = str(label or "").strip().lower()
        for instrument in cls:
            if instrument.value.lower() == text:
                return instrument
        warnings.warn(f"Unknown instrument '{label}', using Piano")
        return cls.PIANO


@dataclass
class Track:
    """A single instrument line."""

    instrument: Instrument = Instrument.PIANO
    notes: List[Note] = field(default_factory=list)
    volume: float = DEFAULT_VOLUME  # 0-1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "instrument": self.instrument.value,
            "volume": self.volume,
            "notes": [n.to_dict() for n in self.notes],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Track":
        data = _expect_mapping(data, "Track")
        notes = [Note.from_dict(n) for n in _expect_list(data.get("notes"), "Track notes")]
        try:
            volume = float(data.get("volume", DEFAULT_VOLUME))
        except (TypeError, ValueError) as e:
            raise InvalidCompositionError(f"Invalid track volume: {e}") from e
        return cls(instrument=Instrument.parse(data.get("instrument")), notes=notes, volume=volume)


@dataclass
class Composition:
    """A complete piece: metadata plus instrument tracks.

    The ABC notation is not stored; ``notation`` regenerates it from the
    current fields on every read so it can never fall out of sync.
    """

    title: str
    composer: str
    style: str
    tempo: float
    tracks: List[Track] = field(default_factory=list)
    subtitle: Optional[str] = None

    @property
    def notation(self) -> str:
        """ABC notation for this composition."""
        from ..output.abc import ABCEncoder

        return ABCEncoder().encode(self)

    @property
    def all_notes(self) -> List[Note]:
        return [n for t in self.tracks for n in t.notes]

    def with_tracks(self, tracks: List[Track]) -> "Composition":
        """Return a copy of this composition with its tracks replaced."""
        return replace(self, tracks=list(tracks))

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "title": self.title,
            "composer": self.composer,
            "style": self.style,
            "tempo": self.tempo,
            "tracks": [t.to_dict() for t in self.tracks],
        }
        if self.subtitle:
            data["subtitle"] = self.subtitle
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Composition":
        """Build a composition from its JSON shape.

        Any ``abcNotation`` key is ignored; notation is always derived.

        Raises:
            InvalidCompositionError: If the payload or one of its tracks or
                notes has the wrong shape
        """
        data = _expect_mapping(data, "Composition")
        try:
            tempo = float(data.get("tempo") or 120)
        except (TypeError, ValueError) as e:
            raise InvalidCompositionError(f"Invalid tempo: {e}") from e
        return cls(
            title=str(data.get("title") or "Untitled"),
            composer=str(data.get("composer") or ""),
            style=str(data.get("style") or ""),
            tempo=tempo,
            tracks=[Track.from_dict(t) for t in _expect_list(data.get("tracks"), "Composition tracks")],
            subtitle=data.get("subtitle") or None,
        )
