"""MIDI file import."""

import warnings
from pathlib import Path
from typing import Optional, Union

import pretty_midi

from ..core import AudioDecodeError, Composition, Instrument, NoNotesFoundError, Note, Track
from ..core.constants import DEFAULT_TEMPO, DEFAULT_VOLUME
from ..processing import Quantizer


class MidiImporter:
    """Read Standard MIDI Files into compositions."""

    def __init__(self, quantizer: Optional[Quantizer] = None):
        self.quantizer = quantizer or Quantizer()

    def load(self, path: Union[str, Path]) -> Composition:
        """
        Import a MIDI file.

        Args:
            path: Path to a .mid/.midi file

        Returns:
            Normalized Composition, one track per non-empty MIDI instrument

        Raises:
            FileNotFoundError: If the file doesn't exist
            AudioDecodeError: If the file is not a readable MIDI file
            NoNotesFoundError: If the file holds no notes
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"MIDI file not found: {path}")

        try:
            midi = pretty_midi.PrettyMIDI(str(path))
        except Exception as e:
            raise AudioDecodeError(f"Failed to decode MIDI {path.name} ({e})") from e

        composition = self.from_pretty_midi(midi, title=path.stem)
        return self.quantizer.normalize_composition(composition)

    def from_pretty_midi(self, midi: pretty_midi.PrettyMIDI, title: str = "Imported MIDI") -> Composition:
        _, tempi = midi.get_tempo_changes()
        tempo = float(tempi[0]) if len(tempi) else DEFAULT_TEMPO
        beats_per_second = tempo / 60.0

        tracks = []
        for instrument in midi.instruments:
            if not instrument.notes:
                warnings.warn(f"Skipping MIDI instrument '{instrument.name}' with no notes")
                continue
            notes = [
                Note(
                    pitch=n.pitch,
                    time=n.start * beats_per_second,
                    duration=(n.end - n.start) * beats_per_second,
                    velocity=n.velocity / 127.0,
                )
                for n in instrument.notes
            ]
            tracks.append(Track(instrument=Instrument.PIANO, notes=notes, volume=DEFAULT_VOLUME))

        if not tracks:
            raise NoNotesFoundError("No notes found in MIDI.")

        return Composition(
            title=title,
            composer="Imported MIDI",
            style="Imported",
            tempo=round(tempo, 2),
            tracks=tracks,
        )
