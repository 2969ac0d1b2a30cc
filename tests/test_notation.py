"""Tests for ABC notation export and the shared measure layout."""

import pytest

from sonata.core import Note
from sonata.output import ABCEncoder, MeasureLayout, NotationConfig, abc_to_midi, midi_to_abc
from sonata.output.abc import abc_length


def body_lines(abc: str, voice: str):
    return [line for line in abc.splitlines() if line.startswith(f"[V:{voice}")]


class TestPitchSymbols:
    @pytest.mark.parametrize(
        "midi, symbol",
        [
            (60, "C"),
            (61, "^C"),
            (71, "B"),
            (72, "c"),
            (81, "a"),
            (84, "c'"),
            (96, "c''"),
            (59, "B,"),
            (48, "C,"),
            (36, "C,,"),
            (24, "C,,,"),
        ],
    )
    def test_midi_to_abc(self, midi, symbol):
        assert midi_to_abc(midi) == symbol

    def test_middle_c_round_trip(self):
        assert abc_to_midi(midi_to_abc(60)) == 60

    def test_inverse_from_octave_one(self):
        for midi in range(24, 128):
            assert abc_to_midi(midi_to_abc(midi)) == midi

    def test_invalid_symbol(self):
        with pytest.raises(ValueError):
            abc_to_midi("H2")


class TestLengths:
    @pytest.mark.parametrize(
        "units, suffix",
        [(1, "/2"), (2, ""), (3, "3/2"), (4, "2"), (6, "3"), (8, "4"), (16, "8")],
    )
    def test_abc_length(self, units, suffix):
        assert abc_length(units) == suffix


class TestMeasureLayout:
    def test_measure_count_has_a_floor(self):
        layout = MeasureLayout(min_measures=32)
        voice = layout.timeline([Note(pitch=60, time=0, duration=1)])
        assert layout.measure_count(voice) == 32

    def test_measure_count_grows_with_content(self):
        layout = MeasureLayout(min_measures=1)
        voice = layout.timeline([Note(pitch=60, time=16, duration=0.25)])
        assert layout.measure_count(voice) == 5

    def test_half_units_round_up(self):
        layout = MeasureLayout()
        assert [layout.time_units(b) for b in (0.125, 0.375, 0.625)] == [1, 2, 3]
        assert layout.duration_units(0.125) == 1
        assert layout.duration_units(0.625) == 3

    def test_fill_rest_until_next_onset(self):
        layout = MeasureLayout()
        voice = layout.timeline([Note(pitch=60, time=1, duration=1)])

        events = layout.fill_measure(voice, 0)

        assert [(e.start, e.length, e.is_rest) for e in events] == [
            (0, 4, True),
            (4, 4, False),
            (8, 8, True),
        ]

    def test_longest_note_wins(self, chord_composition):
        layout = MeasureLayout()
        voice = layout.timeline(chord_composition.tracks[0].notes)

        first = layout.fill_measure(voice, 0)[0]

        assert first.is_chord
        assert first.length == 8


class TestABCEncoder:
    def test_header(self, chord_composition):
        chord_composition.subtitle = "A Study"
        abc = ABCEncoder().encode(chord_composition)
        lines = abc.splitlines()

        assert lines[:4] == ["X:1", "T:Test Piece", "T:A Study", "C:Tester"]
        assert "%%score {RH | LH}" in lines
        assert "%%staffnames 1" in lines
        for field in ["L:1/8", "Q:1/4=90", "M:4/4", "K:Am"]:
            assert field in lines
        assert 'V:RH clef=treble name="Piano"' in lines
        assert "V:LH clef=bass" in lines

    def test_no_subtitle_line_without_subtitle(self, chord_composition):
        abc = ABCEncoder().encode(chord_composition)
        assert [line for line in abc.splitlines() if line.startswith("T:")] == ["T:Test Piece"]

    def test_chord_is_one_token(self, chord_composition):
        abc = ABCEncoder().encode(chord_composition)
        upper = body_lines(abc, "RH")
        lower = body_lines(abc, "LH")

        assert upper[0] == "[V:RH clef=treble] [CE]4 z4 | z8 | z8 | z8 | "
        assert lower[0] == "[V:LH clef=bass] z8 | z8 | z8 | z8 | "

    def test_short_piece_padded_to_one_page(self, chord_composition):
        abc = ABCEncoder().encode(chord_composition)

        assert len(body_lines(abc, "RH")) == 8
        assert len(body_lines(abc, "LH")) == 8
        assert "%%newpage" not in abc

    def test_meter_printed_once(self, make_composition):
        composition = make_composition([Note(pitch=72, time=156, duration=4)])
        lines = ABCEncoder().encode(composition).splitlines()

        assert lines.count("M:none") == 1
        first_lh = next(i for i, line in enumerate(lines) if line.startswith("[V:LH"))
        assert lines[first_lh + 1] == "M:none"
        assert lines[first_lh + 2].startswith("[V:RH")

    def test_page_break_after_eight_lines(self, make_composition):
        # Ends exactly at the end of measure 40
        composition = make_composition([Note(pitch=72, time=156, duration=4)])
        abc = ABCEncoder().encode(composition)
        lines = abc.splitlines()

        assert abc.count("%%newpage") == 1
        assert len(body_lines(abc, "RH")) == 10
        newpage = lines.index("%%newpage")
        assert lines[newpage - 2].startswith("[V:RH")
        assert lines[newpage + 1].startswith("[V:RH")
        assert body_lines(abc, "RH")[-1].endswith("c8 | ")

    def test_partial_last_line(self, make_composition):
        # 34 measures: the last line holds two
        composition = make_composition([Note(pitch=40, time=132, duration=1)])
        abc = ABCEncoder().encode(composition)

        assert body_lines(abc, "RH")[-1] == "[V:RH clef=treble] z8 | z8 | "
        assert body_lines(abc, "LH")[-1] == "[V:LH clef=bass] z8 | E,,2 z6 | "

    def test_same_measure_count_in_both_voices(self, random_notes, make_composition):
        abc = ABCEncoder().encode(make_composition(random_notes))
        upper = sum(line.count("| ") for line in body_lines(abc, "RH"))
        lower = sum(line.count("| ") for line in body_lines(abc, "LH"))
        assert upper == lower

    def test_custom_layout(self, chord_composition):
        config = NotationConfig(bars_per_line=2, lines_per_page=2)
        abc = ABCEncoder(config).encode(chord_composition)

        assert len(body_lines(abc, "RH")) == 2
        assert body_lines(abc, "RH")[0].count("| ") == 2

    def test_export(self, chord_composition, tmp_path):
        path = tmp_path / "out" / "piece.abc"
        ABCEncoder().export(chord_composition, str(path))
        assert path.read_text(encoding="utf-8") == chord_composition.notation
