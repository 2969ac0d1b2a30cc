"""Sonata - Algorithmic composition, notation export and audio transcription.

Architecture Layers:
    1. core/          - Note/Track/Composition model, constants, errors
    2. processing/    - Quantization and grand-staff splitting
    3. generation/    - Stochastic composition from style profiles
    4. input/         - Audio decoding and MIDI import
    5. transcription/ - Monophonic audio-to-notes transcription
    6. output/        - Export (ABC, MusicXML, MIDI, PDF)
"""

__version__ = "0.1.0"

# Core types
from .core import (
    Note,
    Track,
    Composition,
    Instrument,
    SonataError,
    AudioDecodeError,
    NoNotesFoundError,
    DocumentAssemblyError,
    TranscriptionCancelled,
    InvalidCompositionError,
)

# Processing layer
from .processing import Quantizer, normalize_composition

# Generation layer
from .generation import StochasticGenerator, GeneratorConfig, StyleProfile

# Input layer
from .input import AudioLoader, MidiImporter

# Transcription layer
from .transcription import AutocorrelationTranscriber, TranscriberConfig

# Output layer
from .output import (
    ABCEncoder,
    MusicXMLExporter,
    MIDIExporter,
    PageImage,
    assemble_pdf,
    write_pdf,
)

__all__ = [
    # Core
    "Note",
    "Track",
    "Composition",
    "Instrument",
    "SonataError",
    "AudioDecodeError",
    "NoNotesFoundError",
    "DocumentAssemblyError",
    "TranscriptionCancelled",
    "InvalidCompositionError",
    # Processing
    "Quantizer",
    "normalize_composition",
    # Generation
    "StochasticGenerator",
    "GeneratorConfig",
    "StyleProfile",
    # Input
    "AudioLoader",
    "MidiImporter",
    # Transcription
    "AutocorrelationTranscriber",
    "TranscriberConfig",
    # Output
    "ABCEncoder",
    "MusicXMLExporter",
    "MIDIExporter",
    "PageImage",
    "assemble_pdf",
    "write_pdf",
]
