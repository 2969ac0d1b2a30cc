"""MusicXML export functionality.

Writes a partwise MusicXML 3.1 score with one part on a two-staff grand
staff. Measures are filled by the same greedy layout as the ABC export, so
both formats place identical measures and rests.
"""

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Optional, Tuple

from ..core import Composition
from ..core.constants import DIVISIONS_PER_QUARTER
from ..processing import Quantizer
from .abc import NotationConfig
from .measures import MeasureEvent, MeasureLayout, VoiceTimeline

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'
DOCTYPE = (
    '<!DOCTYPE score-partwise PUBLIC "-//Recordare//DTD MusicXML 3.1 Partwise//EN" '
    '"http://www.musicxml.org/dtds/partwise.dtd">\n'
)

STEPS = ["C", "C", "D", "D", "E", "F", "F", "G", "G", "A", "A", "B"]
ALTERS = [0, 1, 0, 1, 0, 0, 1, 0, 1, 0, 1, 0]


def midi_to_pitch(midi: int) -> Tuple[str, int, int]:
    """Split a MIDI pitch into (step, alter, octave), spelling with sharps."""
    return STEPS[midi % 12], ALTERS[midi % 12], midi // 12 - 1


def _sub(parent: ET.Element, tag: str, text=None, **attrib) -> ET.Element:
    element = ET.SubElement(parent, tag, attrib)
    if text is not None:
        element.text = str(text)
    return element


class MusicXMLExporter:
    """Export compositions to MusicXML."""

    def __init__(
        self,
        config: Optional[NotationConfig] = None,
        divisions: int = DIVISIONS_PER_QUARTER,
    ):
        """
        Initialize MusicXMLExporter.

        Args:
            config: Layout settings shared with the ABC export
            divisions: Ticks per quarter note
        """
        self.config = config or NotationConfig()
        self.divisions = divisions
        self.quantizer = Quantizer()
        self.layout = MeasureLayout(
            beats_per_measure=self.config.beats_per_measure,
            grid=self.quantizer.grid_duration,
            min_measures=self.config.min_measures,
        )

    @property
    def ticks_per_unit(self) -> int:
        return int(round(self.divisions * self.layout.grid))

    def encode(self, composition: Composition) -> str:
        """
        Render a composition as a MusicXML document.

        Args:
            composition: Composition to render (normalized on the fly)

        Returns:
            MusicXML text
        """
        upper, lower = self.quantizer.split_grand_staff(composition.tracks)
        upper_voice = self.layout.timeline(upper.notes)
        lower_voice = self.layout.timeline(lower.notes)
        total = self.layout.measure_count(upper_voice, lower_voice)

        root = ET.Element("score-partwise", version="3.1")
        work = _sub(root, "work")
        _sub(work, "work-title", composition.title)
        identification = _sub(root, "identification")
        _sub(identification, "creator", composition.composer, type="composer")

        part_list = _sub(root, "part-list")
        score_part = _sub(part_list, "score-part", id="P1")
        _sub(score_part, "part-name", upper.instrument.value)

        part = _sub(root, "part", id="P1")
        for m in range(total):
            measure = _sub(part, "measure", number=str(m + 1))
            if m == 0:
                self._first_measure_attributes(measure, composition.tempo)
            consumed = self._render_measure(measure, upper_voice, m, staff=1)
            backup = _sub(measure, "backup")
            _sub(backup, "duration", consumed)
            self._render_measure(measure, lower_voice, m, staff=2)

        ET.indent(root)
        return XML_DECLARATION + DOCTYPE + ET.tostring(root, encoding="unicode") + "\n"

    def export(self, composition: Composition, output_path: str) -> None:
        """
        Export a composition to a MusicXML file.

        Args:
            composition: Composition to export
            output_path: Path to output MusicXML file
        """
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        Path(output_path).write_text(self.encode(composition), encoding="utf-8")

    def _first_measure_attributes(self, measure: ET.Element, tempo: float) -> None:
        attributes = _sub(measure, "attributes")
        _sub(attributes, "divisions", self.divisions)
        key = _sub(attributes, "key")
        _sub(key, "fifths", 0)
        time = _sub(attributes, "time")
        _sub(time, "beats", self.config.beats_per_measure)
        _sub(time, "beat-type", 4)
        _sub(attributes, "staves", 2)
        treble = _sub(attributes, "clef", number="1")
        _sub(treble, "sign", "G")
        _sub(treble, "line", 2)
        bass = _sub(attributes, "clef", number="2")
        _sub(bass, "sign", "F")
        _sub(bass, "line", 4)

        direction = _sub(measure, "direction", placement="above")
        direction_type = _sub(direction, "direction-type")
        metronome = _sub(direction_type, "metronome")
        _sub(metronome, "beat-unit", "quarter")
        _sub(metronome, "per-minute", int(round(tempo)))

    def _render_measure(
        self, measure: ET.Element, voice: VoiceTimeline, index: int, staff: int
    ) -> int:
        """Append one staff's notes and rests; return the ticks consumed."""
        consumed = 0
        for event in self.layout.fill_measure(voice, index):
            ticks = event.length * self.ticks_per_unit
            self._render_event(measure, event, ticks, staff)
            consumed += ticks
        return consumed

    def _render_event(self, measure: ET.Element, event: MeasureEvent, ticks: int, staff: int) -> None:
        if event.is_rest:
            note = _sub(measure, "note")
            _sub(note, "rest")
            _sub(note, "duration", ticks)
            _sub(note, "voice", staff)
            _sub(note, "staff", staff)
            return

        for idx, n in enumerate(event.notes):
            step, alter, octave = midi_to_pitch(n.pitch)
            note = _sub(measure, "note")
            if idx > 0:
                _sub(note, "chord")
            pitch = _sub(note, "pitch")
            _sub(pitch, "step", step)
            if alter:
                _sub(pitch, "alter", alter)
            _sub(pitch, "octave", octave)
            _sub(note, "duration", ticks)
            _sub(note, "voice", staff)
            _sub(note, "staff", staff)
