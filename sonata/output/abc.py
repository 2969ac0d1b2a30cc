"""ABC notation export.

Renders a composition as a two-voice grand-staff ABC tune:
- Header with title, subtitle, composer, tempo, meter, key and voices
- Four measures per line, upper voice line followed by lower voice line
- M:none after the first system, so the meter is printed once
- %%newpage after every eight lines
"""

import re
from dataclasses import dataclass
from fractions import Fraction
from pathlib import Path
from typing import Optional

from ..core import Composition
from ..core.constants import BEATS_PER_MEASURE, GRID
from ..processing import Quantizer
from .measures import MeasureEvent, MeasureLayout, VoiceTimeline

ABC_NOTE_NAMES = ["C", "^C", "D", "^D", "E", "F", "^F", "G", "^G", "A", "^A", "B"]
ABC_STEPS = {"C": 0, "D": 2, "E": 4, "F": 5, "G": 7, "A": 9, "B": 11}
ABC_SYMBOL = re.compile(r"^(\^?)([A-Ga-g])([,']*)$")

UPPER_VOICE = "RH"
LOWER_VOICE = "LH"


def midi_to_abc(midi: int) -> str:
    """Convert a MIDI pitch to an ABC note symbol (sharps only).

    Middle C (60) is ``C``; the octave above is lowercase, higher octaves add
    apostrophes and lower octaves add commas.
    """
    name = ABC_NOTE_NAMES[midi % 12]
    octave = midi // 12 - 1
    prefix = "^" if name.startswith("^") else ""
    letter = name[-1]

    if octave == 4:
        return prefix + letter
    if octave == 5:
        return prefix + letter.lower()
    if octave >= 6:
        return prefix + letter.lower() + "'" * (octave - 5)
    if octave == 3:
        return prefix + letter + ","
    if octave == 2:
        return prefix + letter + ",,"
    return prefix + letter + ",,,"


def abc_to_midi(symbol: str) -> int:
    """Convert an ABC note symbol produced by :func:`midi_to_abc` back to MIDI."""
    match = ABC_SYMBOL.match(symbol.strip())
    if not match:
        raise ValueError(f"Not an ABC note symbol: {symbol!r}")
    sharp, letter, marks = match.groups()

    if letter.isupper():
        octave = 4 - marks.count(",")
    else:
        octave = 5 + marks.count("'")
    return (octave + 1) * 12 + ABC_STEPS[letter.upper()] + (1 if sharp else 0)


def abc_length(units: int, grid: float = GRID) -> str:
    """Length suffix for a duration of ``units`` grid steps, relative to L:1/8."""
    eighths = Fraction(units) * Fraction(grid).limit_denominator(64) * 2
    if eighths == 1:
        return ""
    if eighths.denominator == 1:
        return str(eighths.numerator)
    if eighths.numerator == 1:
        return f"/{eighths.denominator}"
    return f"{eighths.numerator}/{eighths.denominator}"


@dataclass
class NotationConfig:
    """Layout settings for notation export.

    Attributes:
        bars_per_line: Measures per system (default: 4)
        lines_per_page: Systems per page before a page break (default: 8)
        beats_per_measure: Beats in a measure, 4/4 meter (default: 4)
        key: ABC key field (default: "Am")
    """

    bars_per_line: int = 4
    lines_per_page: int = 8
    beats_per_measure: int = BEATS_PER_MEASURE
    key: str = "Am"

    @property
    def min_measures(self) -> int:
        """Measures in one full page; shorter pieces are padded with rests."""
        return self.bars_per_line * self.lines_per_page


class ABCEncoder:
    """Encode compositions as ABC notation text."""

    def __init__(self, config: Optional[NotationConfig] = None):
        self.config = config or NotationConfig()
        self.quantizer = Quantizer()
        self.layout = MeasureLayout(
            beats_per_measure=self.config.beats_per_measure,
            grid=self.quantizer.grid_duration,
            min_measures=self.config.min_measures,
        )

    def encode(self, composition: Composition) -> str:
        """
        Render a composition as ABC text.

        Args:
            composition: Composition to render (normalized on the fly)

        Returns:
            ABC tune text
        """
        upper, lower = self.quantizer.split_grand_staff(composition.tracks)
        upper_voice = self.layout.timeline(upper.notes)
        lower_voice = self.layout.timeline(lower.notes)
        total = self.layout.measure_count(upper_voice, lower_voice)

        header = self._header(composition, upper.instrument.value)
        return header + self._body(upper_voice, lower_voice, total)

    def export(self, composition: Composition, output_path: str) -> None:
        """Write ABC text to a file."""
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        Path(output_path).write_text(self.encode(composition), encoding="utf-8")

    def _header(self, composition: Composition, instrument_name: str) -> str:
        tempo = int(round(composition.tempo))
        lines = ["X:1", f"T:{composition.title}"]
        if composition.subtitle:
            lines.append(f"T:{composition.subtitle}")
        lines += [
            f"C:{composition.composer}",
            "%%titlefont Playfair-Display 48",
            "%%subtitlefont Playfair-Display 24",
            "%%composerfont Inter 12",
            "%%staffsep 45",
            "%%syssep 45",
            "%%staffnames 1",
            f"%%score {{{UPPER_VOICE} | {LOWER_VOICE}}}",
            "L:1/8",
            f"Q:1/4={tempo}",
            f"M:{self.config.beats_per_measure}/4",
            f"K:{self.config.key}",
            f'V:{UPPER_VOICE} clef=treble name="{instrument_name}"',
            f"V:{LOWER_VOICE} clef=bass",
        ]
        return "\n".join(lines) + "\n"

    def _body(self, upper: VoiceTimeline, lower: VoiceTimeline, total: int) -> str:
        bars_per_line = self.config.bars_per_line
        body = ""

        for m in range(total):
            if m % bars_per_line == 0:
                body += f"[V:{UPPER_VOICE} clef=treble] "
            body += self.render_measure(upper, m) + "| "

            if (m + 1) % bars_per_line == 0 or m == total - 1:
                body += f"\n[V:{LOWER_VOICE} clef=bass] "
                for lm in range(m - m % bars_per_line, m + 1):
                    body += self.render_measure(lower, lm) + "| "
                body += "\n"

                line_index = m // bars_per_line
                if line_index == 0:
                    body += "M:none\n"
                if (line_index + 1) % self.config.lines_per_page == 0 and m < total - 1:
                    body += "%%newpage\n"

        return body

    def render_measure(self, voice: VoiceTimeline, index: int) -> str:
        return "".join(self._token(e) + " " for e in self.layout.fill_measure(voice, index))

    def _token(self, event: MeasureEvent) -> str:
        length = abc_length(event.length, self.layout.grid)
        if event.is_rest:
            return f"z{length}"
        symbols = "".join(midi_to_abc(n.pitch) for n in event.notes)
        if event.is_chord:
            return f"[{symbols}]{length}"
        return f"{symbols}{length}"
