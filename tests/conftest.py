"""Shared fixtures for Sonata tests."""

import numpy as np
import pytest

from sonata.core import Composition, Instrument, Note, Track


def generate_sine_wave(freq: float, duration: float, sr: int = 22050, amplitude: float = 0.5) -> np.ndarray:
    """Generate a sine wave at given frequency."""
    t = np.arange(int(sr * duration)) / sr
    return (np.sin(2 * np.pi * freq * t) * amplitude).astype(np.float32)


def generate_silence(duration: float, sr: int = 22050) -> np.ndarray:
    return np.zeros(int(sr * duration), dtype=np.float32)


def _make_composition(notes, title="Test Piece", tempo=90, instrument=Instrument.PIANO):
    return Composition(
        title=title,
        composer="Tester",
        style="Classical",
        tempo=tempo,
        tracks=[Track(instrument=instrument, notes=list(notes))],
    )


@pytest.fixture
def sample_rate():
    return 22050


@pytest.fixture
def sine():
    return generate_sine_wave


@pytest.fixture
def silence():
    return generate_silence


@pytest.fixture
def a4_then_silence(sample_rate):
    """One second of A4 (440 Hz) followed by one second of silence."""
    return np.concatenate(
        [generate_sine_wave(440.0, 1.0, sample_rate), generate_silence(1.0, sample_rate)]
    )


@pytest.fixture
def make_composition():
    """Factory for single-track compositions."""
    return _make_composition


@pytest.fixture
def chord_composition():
    """C4 for one beat and E4 for two beats, both starting at beat 0."""
    return _make_composition(
        [
            Note(pitch=60, time=0.0, duration=1.0),
            Note(pitch=64, time=0.0, duration=2.0),
        ]
    )


@pytest.fixture
def random_notes():
    """Unquantized notes spread over both staves."""
    rng = np.random.default_rng(1234)
    return [
        Note(
            pitch=int(rng.integers(30, 90)),
            time=float(rng.uniform(0, 40)),
            duration=float(rng.uniform(0.05, 3.0)),
            velocity=float(rng.uniform(-0.2, 1.3)),
        )
        for _ in range(200)
    ]
