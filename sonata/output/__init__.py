"""Output layer - Export to various formats.

This layer handles exporting compositions to:
- ABC notation (grand-staff text)
- MusicXML (for notation software)
- MIDI files
- PDF (from rasterized score pages)
"""

from .measures import MeasureLayout, MeasureEvent
from .abc import ABCEncoder, NotationConfig, midi_to_abc, abc_to_midi
from .musicxml import MusicXMLExporter, midi_to_pitch
from .midi import MIDIExporter
from .pdf import PageImage, PdfObjectWriter, assemble_pdf, write_pdf

__all__ = [
    "MeasureLayout",
    "MeasureEvent",
    "ABCEncoder",
    "NotationConfig",
    "midi_to_abc",
    "abc_to_midi",
    "MusicXMLExporter",
    "midi_to_pitch",
    "MIDIExporter",
    "PageImage",
    "PdfObjectWriter",
    "assemble_pdf",
    "write_pdf",
]
