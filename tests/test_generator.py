"""Tests for style profiles and the stochastic generator."""

import datetime

import numpy as np
import pytest

from sonata.core import Instrument, Note
from sonata.generation import (
    BACH_HARMONIC_WEIGHTS,
    BEETHOVEN_HARMONIC_WEIGHTS,
    GeneratorConfig,
    SCALES,
    StochasticGenerator,
    StyleProfile,
    apply_inversion,
    apply_sequence,
    get_weighted_next_degree,
    resolve_rubato,
    resolve_style,
    tempo_from_style,
)
from sonata.generation.style import RUBATO_CURVES, hash_string, tempo_range


class TestStyleProfiles:
    @pytest.mark.parametrize(
        "style, expected",
        [
            ("Bach", StyleProfile.BACH),
            ("late BAROQUE", StyleProfile.BACH),
            ("Beethoven", StyleProfile.BEETHOVEN),
            ("Jazz", StyleProfile.BEETHOVEN),
            ("", StyleProfile.BEETHOVEN),
            (None, StyleProfile.BEETHOVEN),
        ],
    )
    def test_resolve_style_is_total(self, style, expected):
        assert resolve_style(style) is expected

    def test_resolve_rubato(self):
        assert resolve_rubato("Baroque") == "baroque"
        assert resolve_rubato("Chopin") == "romantic"
        assert resolve_rubato("Romantic era") == "romantic"
        assert resolve_rubato("Beethoven") == "expressive"

    def test_rubato_curves(self):
        assert RUBATO_CURVES["expressive"](0.5) == pytest.approx(0.05)
        assert RUBATO_CURVES["expressive"](0.0) == 0.0
        assert RUBATO_CURVES["romantic"](0.5) == 0.0
        assert RUBATO_CURVES["romantic"](0.9) == pytest.approx(0.01)
        assert RUBATO_CURVES["baroque"](0.9) == 0.0

    @pytest.mark.parametrize("table", [BACH_HARMONIC_WEIGHTS, BEETHOVEN_HARMONIC_WEIGHTS])
    def test_harmonic_rows_sum_to_one(self, table):
        assert table.shape == (7, 7)
        np.testing.assert_allclose(table.sum(axis=1), np.ones(7))

    @pytest.mark.parametrize("profile", list(StyleProfile))
    def test_next_degree_in_range(self, profile):
        rng = np.random.default_rng(0)
        for current in list(range(-10, 20)) * 20:
            assert 0 <= get_weighted_next_degree(current, profile, rng) <= 6

    def test_dominant_resolves_to_tonic_most_often(self):
        rng = np.random.default_rng(7)
        draws = [get_weighted_next_degree(4, StyleProfile.BEETHOVEN, rng) for _ in range(2000)]
        assert draws.count(0) / len(draws) > 0.8


class TestTempo:
    def test_hash_string(self):
        assert hash_string("") == 0
        assert hash_string("abc") == 96354

    def test_hash_string_wraps_to_32_bits(self):
        assert 0 <= hash_string("a considerably longer string that overflows") < 2**31 + 1

    def test_tempo_deterministic(self):
        assert tempo_from_style("Bach", "Invention") == tempo_from_style("Bach", "Invention")

    @pytest.mark.parametrize("style", ["Bach", "Chopin", "Jazz", "Beethoven", "unknown"])
    def test_tempo_within_style_range(self, style):
        low, high = tempo_range(style)
        for title in ["Prelude", "Nocturne", "Fantasia", "", "Etude No. 5"]:
            assert low <= tempo_from_style(style, title) <= high

    def test_tempo_ranges(self):
        assert tempo_range("Baroque") == (72, 96)
        assert tempo_range("Romantic") == (60, 84)
        assert tempo_range("Jazz") == (90, 120)
        assert tempo_range("Classical") == (84, 120)


class TestMotifTransforms:
    def test_sequence_shifts_by_scale_degree(self):
        scale = SCALES[StyleProfile.BACH]
        motif = [Note(pitch=72, time=0, duration=1), Note(pitch=76, time=1, duration=1)]

        shifted = apply_sequence(motif, scale, 1)

        # C5 -> D5, E5 -> F5
        assert [n.pitch for n in shifted] == [74, 77]
        assert [n.time for n in shifted] == [0, 1]

    def test_inversion(self):
        motif = [Note(pitch=p, time=0, duration=1) for p in (79, 81, 77)]
        assert [n.pitch for n in apply_inversion(motif, 79)] == [79, 77, 81]


class TestStochasticGenerator:
    def test_seeded_output_is_reproducible(self):
        first = StochasticGenerator(seed=42).compose("Baroque", title="Invention")
        second = StochasticGenerator(seed=42).compose("Baroque", title="Invention")

        assert first.tracks == second.tracks
        assert first.notation == second.notation

    def test_injected_rng(self):
        first = StochasticGenerator(rng=np.random.default_rng(3)).compose("Beethoven", title="X")
        second = StochasticGenerator(rng=np.random.default_rng(3)).compose("Beethoven", title="X")
        assert first.tracks == second.tracks

    def test_generate_melody(self):
        generator = StochasticGenerator(seed=1)
        scale = [p + 12 for p in SCALES[StyleProfile.BACH]]

        notes = generator.generate_melody(scale, 8, "baroque", "bach", (60, 84))

        assert notes[0].time == 0
        # The last cell may run past the requested length, never start past it
        assert notes[-1].end >= 8
        assert notes[-1].end < 8 + 1.0
        assert all(n.pitch in scale for n in notes)
        assert all(0.65 <= n.velocity <= 0.9 for n in notes)
        for prev, note in zip(notes, notes[1:]):
            assert note.time == pytest.approx(prev.end)

    def test_composition_shape(self):
        composition = StochasticGenerator(seed=5).compose("Beethoven", title="Sonata")
        upper, lower = composition.tracks

        assert composition.title == "Sonata"
        assert composition.composer == "S.O.N.A.T.A. Stochastic Engine"
        assert 84 <= composition.tempo <= 120
        assert all(60 <= n.pitch <= 84 for n in upper.notes)
        assert all(36 <= n.pitch < 60 for n in lower.notes)
        # 32 sections of 8 beats
        assert max(n.end for n in lower.notes) <= 256
        assert upper.notes[0].dynamic in ("!pp!", "!p!", "!mf!")

    def test_melody_decoration(self):
        composition = StochasticGenerator(seed=11).compose("Bach", title="Gigue")
        upper = composition.tracks[0]

        assert all(n.fingering in {"_1", "_2", "_3", "_4", "_5"} for n in upper.notes)
        assert any(n.slur_start for n in upper.notes)
        assert any(n.slur_end for n in upper.notes)

    def test_bass_without_rests(self):
        config = GeneratorConfig(bass_rest_probability=0.0)
        composition = StochasticGenerator(seed=9, config=config).compose("Bach", title="Chorale")
        lower = composition.tracks[1]

        # Two dyads per section, 32 sections
        assert len(lower.notes) == 128
        assert all(n.duration == 4 for n in lower.notes)
        assert sorted({n.time for n in lower.notes}) == [4.0 * bar for bar in range(64)]

    def test_bass_all_rests(self):
        config = GeneratorConfig(bass_rest_probability=1.0)
        composition = StochasticGenerator(seed=9, config=config).compose("Bach", title="Chorale")
        assert composition.tracks[1].notes == []
        assert "[V:LH clef=bass] z8 | z8 | z8 | z8 | " in composition.notation

    def test_composer_credit_and_instrument(self):
        composition = StochasticGenerator(seed=2).compose(
            "Chopin", title="Nocturne", composer="Ada", instrument="Violin, Cello", subtitle="Op. 9"
        )

        assert composition.composer == f"Ada ({datetime.date.today().year})"
        assert composition.subtitle == "Op. 9"
        assert all(t.instrument is Instrument.VIOLIN for t in composition.tracks)
        assert 'V:RH clef=treble name="Violin"' in composition.notation

    def test_random_stock_title(self):
        from sonata.generation.generator import STOCK_TITLES

        composition = StochasticGenerator(seed=4).compose("anything at all")
        assert composition.title in STOCK_TITLES
