"""MIDI export functionality."""

import pretty_midi
from pathlib import Path

from ..core import Composition, Instrument

# General MIDI programs
GM_PROGRAMS = {
    Instrument.PIANO: 0,  # Acoustic Grand Piano
    Instrument.VIOLIN: 40,
    Instrument.CELLO: 42,
    Instrument.FLUTE: 73,
    Instrument.CLARINET: 71,
    Instrument.TRUMPET: 56,
    Instrument.HARP: 46,  # Orchestral Harp
    Instrument.PERCUSSION: 0,
}


class MIDIExporter:
    """Export compositions to MIDI format."""

    def export(self, composition: Composition, output_path: str) -> None:
        """
        Export a composition to a MIDI file.

        Args:
            composition: Composition to export
            output_path: Path to output MIDI file
        """
        midi = self.to_pretty_midi(composition)

        # Ensure output directory exists
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)

        midi.write(str(output_path))

    def to_pretty_midi(self, composition: Composition) -> pretty_midi.PrettyMIDI:
        """Convert a composition to a PrettyMIDI object without saving."""
        tempo = float(composition.tempo)
        seconds_per_beat = 60.0 / tempo
        midi = pretty_midi.PrettyMIDI(initial_tempo=tempo)

        for track in composition.tracks:
            instrument = pretty_midi.Instrument(
                program=GM_PROGRAMS.get(track.instrument, 0),
                is_drum=track.instrument is Instrument.PERCUSSION,
                name=track.instrument.value,
            )

            for note in track.notes:
                instrument.notes.append(
                    pretty_midi.Note(
                        velocity=int(min(127, max(1, round(note.velocity * 127)))),
                        pitch=int(note.pitch),
                        start=note.time * seconds_per_beat,
                        end=note.end * seconds_per_beat,
                    )
                )

            midi.instruments.append(instrument)

        return midi
