"""Processing layer - Note-level normalization.

This layer prepares notes for the encoders:
- Quantization (snap to a 16th-note grid)
- Pitch and velocity clamping
- Grand-staff splitting (treble/bass at middle C)
"""

from .quantize import Quantizer, normalize_composition, sort_notes

__all__ = [
    "Quantizer",
    "normalize_composition",
    "sort_notes",
]
