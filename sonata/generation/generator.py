"""Stochastic composition generator.

Builds a two-voice piece from a style label:
- A seed motif from a weighted step/leap walk over the scale
- Motivic development per section (identity, sequence, inversion, new phrase)
- Rubato applied to melody onsets
- A Markov-driven bass line of sustained root/third dyads or silent bars
"""

import datetime
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..core import Composition, Instrument, Note, Track
from ..core.constants import BASS_RANGE, BEATS_PER_MEASURE, TREBLE_RANGE
from ..processing import Quantizer
from .style import (
    MELODIC_MOTION_WEIGHTS,
    RHYTHMIC_CELLS,
    RUBATO_CURVES,
    SCALES,
    StyleProfile,
    get_weighted_next_degree,
    resolve_rubato,
    resolve_style,
    tempo_from_style,
)

STOCK_TITLES = [
    "Prelude in A Minor",
    "Nocturne",
    "Etude No. 5",
    "Fantasia",
    "Concerto Movement",
]

DEFAULT_COMPOSER = "S.O.N.A.T.A. Stochastic Engine"
DYNAMICS = ["!pp!", "!p!", "!mf!"]


@dataclass
class GeneratorConfig:
    """Configuration for the stochastic generator.

    Attributes:
        sections: Number of formal sections (default: 32)
        section_beats: Length of each section in beats (default: 8, two bars)
        motif_beats: Length of the seed motif in beats (default: 8)
        bass_rest_probability: Chance a bass bar is left silent (default: 0.4)
        treble_range: Pitch range for melody notes (default: C4-C6)
        bass_range: Pitch range for bass notes (default: C2-C4)
        bass_transpose: Semitones applied to scale pitches for the bass (default: -24)
    """

    sections: int = 32
    section_beats: float = 8.0
    motif_beats: float = 8.0
    bass_rest_probability: float = 0.4
    treble_range: Tuple[int, int] = TREBLE_RANGE
    bass_range: Tuple[int, int] = BASS_RANGE
    bass_transpose: int = -24


def clamp_pitch(pitch: int, pitch_range: Tuple[int, int]) -> int:
    low, high = pitch_range
    return int(min(high, max(low, pitch)))


def apply_sequence(motif: Sequence[Note], scale: Sequence[int], interval: int) -> List[Note]:
    """Shift every note by `interval` scale degrees, keeping its octave."""
    shifted = []
    for note in motif:
        pitch_in_scale = note.pitch % 12 + scale[0]
        idx = scale.index(pitch_in_scale) if pitch_in_scale in scale else -1
        raw = scale[(idx + interval) % len(scale)]
        pitch = raw + (note.pitch // 12 - scale[0] // 12) * 12
        shifted.append(replace(note, pitch=pitch or note.pitch))
    return shifted


def apply_inversion(motif: Sequence[Note], axis: int) -> List[Note]:
    """Mirror every interval about `axis`."""
    return [replace(n, pitch=axis - (n.pitch - axis)) for n in motif]


class StochasticGenerator:
    """Generate compositions from weighted harmonic and melodic models.

    All random draws come from one ``numpy.random.Generator``; pass ``seed``
    for reproducible output.
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        config: Optional[GeneratorConfig] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        """
        Initialize StochasticGenerator.

        Args:
            seed: Seed for the random source (None = fresh entropy)
            config: Optional GeneratorConfig for advanced settings
            rng: Explicit random source, overrides ``seed``
        """
        self.config = config or GeneratorConfig()
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.quantizer = Quantizer()

    def generate_melody(
        self,
        scale: Sequence[int],
        length: float,
        rhythm: str = "dramatic",
        motion: str = "dramatic",
        pitch_range: Optional[Tuple[int, int]] = None,
    ) -> List[Note]:
        """
        Generate a phrase by a weighted step/leap walk over scale degrees.

        Args:
            scale: Absolute pitches to walk over
            length: Phrase length in beats (the last cell may overrun it)
            rhythm: Rhythmic cell family ("simple", "baroque", "dramatic")
            motion: Key into MELODIC_MOTION_WEIGHTS
            pitch_range: Pitch clamp range

        Returns:
            Notes starting at time 0
        """
        pitch_range = pitch_range or self.config.treble_range
        cells = RHYTHMIC_CELLS.get(rhythm, RHYTHMIC_CELLS["simple"])
        step_probability = MELODIC_MOTION_WEIGHTS.get(motion, MELODIC_MOTION_WEIGHTS["dramatic"])

        notes: List[Note] = []
        current_time = 0.0
        last_index = len(scale) // 2

        while current_time < length:
            cell = cells[int(self.rng.integers(len(cells)))]
            for duration in cell:
                if self.rng.random() < step_probability:
                    direction = 1 if self.rng.random() > 0.5 else -1
                    next_index = min(len(scale) - 1, max(0, last_index + direction))
                else:
                    next_index = int(self.rng.integers(len(scale)))

                notes.append(
                    Note(
                        pitch=clamp_pitch(scale[next_index], pitch_range),
                        time=current_time,
                        duration=duration,
                        velocity=0.65 + self.rng.random() * 0.25,
                    )
                )
                current_time += duration
                last_index = next_index

        return notes

    def compose(
        self,
        style: str,
        title: Optional[str] = None,
        composer: Optional[str] = None,
        instrument: str = "Piano",
        subtitle: Optional[str] = None,
    ) -> Composition:
        """
        Compose a full two-voice piece.

        Args:
            style: Free-form style label (e.g. "Baroque", "Beethoven")
            title: Piece title (random stock title if omitted)
            composer: Name credited as composer
            instrument: Comma-separated instrument labels; the first is used
            subtitle: Optional subtitle

        Returns:
            Normalized Composition with melody and bass tracks
        """
        cfg = self.config
        profile = resolve_style(style)
        motion = profile.value
        rubato = RUBATO_CURVES[resolve_rubato(style)]
        scale = SCALES[profile]
        upper_scale = [p + 12 for p in scale]

        main_instrument = Instrument.parse(instrument.split(",")[0].strip() or "Piano")
        melody = Track(instrument=main_instrument)
        bass = Track(instrument=main_instrument)

        title = title or STOCK_TITLES[int(self.rng.integers(len(STOCK_TITLES)))]
        tempo = tempo_from_style(style, title)

        seed_motif = self.generate_melody(
            upper_scale, cfg.motif_beats, "dramatic", motion, cfg.treble_range
        )
        root_degree = 0  # tonic
        bars_per_section = int(cfg.section_beats // BEATS_PER_MEASURE)

        for section in range(cfg.sections):
            section_start = section * cfg.section_beats

            variant = section % 4
            if variant == 0:
                phrase = list(seed_motif)
            elif variant == 1:
                phrase = apply_sequence(seed_motif, scale, 1)
            elif variant == 2:
                phrase = apply_inversion(seed_motif, scale[4] + 12)
            else:
                phrase = self.generate_melody(
                    upper_scale, cfg.motif_beats, "simple", motion, cfg.treble_range
                )

            melody.notes.extend(self._decorate_phrase(phrase, section_start, rubato))

            for bar in range(bars_per_section):
                root_degree = get_weighted_next_degree(root_degree, profile, self.rng)
                root = clamp_pitch(
                    scale[root_degree % len(scale)] + cfg.bass_transpose, cfg.bass_range
                )
                third = clamp_pitch(
                    scale[(root_degree + 2) % len(scale)] + cfg.bass_transpose, cfg.bass_range
                )
                bar_time = section_start + bar * BEATS_PER_MEASURE

                if self.rng.random() >= cfg.bass_rest_probability:
                    bass.notes.append(
                        self.quantizer.normalize_note(
                            Note(pitch=root, time=bar_time, duration=BEATS_PER_MEASURE, velocity=0.7)
                        )
                    )
                    bass.notes.append(
                        self.quantizer.normalize_note(
                            Note(pitch=third, time=bar_time, duration=BEATS_PER_MEASURE, velocity=0.6)
                        )
                    )

        if composer:
            credited = f"{composer} ({datetime.date.today().year})"
        else:
            credited = DEFAULT_COMPOSER

        composition = Composition(
            title=title,
            composer=credited,
            style=style,
            tempo=tempo,
            tracks=[melody, bass],
            subtitle=subtitle,
        )
        return self.quantizer.normalize_composition(composition)

    def _decorate_phrase(self, phrase: Sequence[Note], section_start: float, rubato) -> List[Note]:
        """Place a phrase in time with rubato, fingering, dynamics and slurs."""
        notes = []
        for idx, note in enumerate(phrase):
            offset = rubato(idx / len(phrase))
            placed = self.quantizer.normalize_note(
                replace(note, time=note.time + section_start + offset)
            )
            placed.pitch = clamp_pitch(placed.pitch, self.config.treble_range)
            placed.fingering = f"_{int(self.rng.integers(1, 6))}"
            if idx == 0:
                placed.dynamic = DYNAMICS[int(self.rng.integers(len(DYNAMICS)))]
            placed.slur_start = idx % 3 == 0
            placed.slur_end = idx % 3 == 2
            notes.append(placed)
        return notes


def compose(style: str, title: Optional[str] = None, seed: Optional[int] = None, **kwargs) -> Composition:
    """Compose with a one-off generator."""
    return StochasticGenerator(seed=seed).compose(style, title=title, **kwargs)
