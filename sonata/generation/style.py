"""Style profiles - Weighted harmonic and melodic models for the generator.

Each profile bundles:
- A 7x7 Markov transition table over scale degrees (I..vii)
- A melodic step/leap probability
- A diatonic scale (8 absolute pitches, tonic to octave)
- A tempo range

Profiles are resolved from free-form style strings; resolution is total and
falls back to the classical profile.
"""

from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np


class StyleProfile(Enum):
    """Weighting profiles understood by the generator."""

    BACH = "bach"
    BEETHOVEN = "beethoven"


# Chorale-like transitions: I -> IV/V, ii -> V, V -> I, vii -> I
BACH_HARMONIC_WEIGHTS = np.array(
    [
        [0.1, 0.05, 0.05, 0.3, 0.4, 0.1, 0.0],  # I
        [0.0, 0.1, 0.0, 0.0, 0.8, 0.1, 0.0],  # ii
        [0.0, 0.0, 0.1, 0.4, 0.0, 0.5, 0.0],  # iii
        [0.3, 0.1, 0.0, 0.1, 0.5, 0.0, 0.0],  # IV
        [0.8, 0.0, 0.0, 0.0, 0.1, 0.1, 0.0],  # V (deceptive to vi)
        [0.0, 0.6, 0.0, 0.1, 0.3, 0.0, 0.0],  # vi
        [0.9, 0.0, 0.0, 0.0, 0.0, 0.1, 0.0],  # vii
    ]
)

# Classical: stronger V-I cadences
BEETHOVEN_HARMONIC_WEIGHTS = np.array(
    [
        [0.1, 0.0, 0.0, 0.3, 0.5, 0.1, 0.0],  # I
        [0.0, 0.1, 0.0, 0.0, 0.9, 0.0, 0.0],  # ii
        [0.0, 0.0, 0.1, 0.3, 0.0, 0.6, 0.0],  # iii
        [0.2, 0.1, 0.0, 0.1, 0.6, 0.0, 0.0],  # IV
        [0.9, 0.0, 0.0, 0.0, 0.05, 0.05, 0.0],  # V
        [0.0, 0.5, 0.0, 0.2, 0.3, 0.0, 0.0],  # vi
        [0.95, 0.0, 0.0, 0.0, 0.0, 0.05, 0.0],  # vii
    ]
)

HARMONIC_WEIGHTS: Dict[StyleProfile, np.ndarray] = {
    StyleProfile.BACH: BACH_HARMONIC_WEIGHTS,
    StyleProfile.BEETHOVEN: BEETHOVEN_HARMONIC_WEIGHTS,
}

# Probability of a stepwise move; the rest are leaps
MELODIC_MOTION_WEIGHTS: Dict[str, float] = {
    "bach": 0.85,
    "beethoven": 0.92,
    "dramatic": 0.6,
}

SCALES: Dict[StyleProfile, List[int]] = {
    StyleProfile.BACH: [60, 62, 64, 65, 67, 69, 71, 72],
    StyleProfile.BEETHOVEN: [60, 62, 63, 65, 67, 68, 70, 72],
}

RHYTHMIC_CELLS: Dict[str, List[List[float]]] = {
    "simple": [[1.0], [0.5, 0.5], [0.25, 0.25, 0.5]],
    "baroque": [[0.5, 0.25, 0.25], [0.25, 0.25, 0.25, 0.25], [0.75, 0.25]],
    "dramatic": [[0.5, 0.5, 1.0], [1.5, 0.5], [0.333, 0.333, 0.334]],
}


def _expressive(x: float) -> float:
    # Parabolic push-pull, peaking mid-phrase
    return 0.05 * (4 * x * (1 - x))


def _romantic(x: float) -> float:
    return 0.1 * (x - 0.8) if x > 0.8 else 0.0


def _baroque(x: float) -> float:
    return 0.05 * (x - 0.9) if x > 0.9 else 0.0


# Phrase position (0..1) -> start-time offset in beats
RUBATO_CURVES: Dict[str, Callable[[float], float]] = {
    "expressive": _expressive,
    "romantic": _romantic,
    "baroque": _baroque,
}


def resolve_style(style: Optional[str]) -> StyleProfile:
    """Map a free-form style label to a profile. Never fails."""
    key = (style or "").lower()
    if "bach" in key or "baroque" in key:
        return StyleProfile.BACH
    return StyleProfile.BEETHOVEN


def resolve_rubato(style: Optional[str]) -> str:
    """Pick the rubato curve name for a style label."""
    key = (style or "").lower()
    if resolve_style(key) is StyleProfile.BACH:
        return "baroque"
    if "chopin" in key or "romantic" in key:
        return "romantic"
    return "expressive"


def tempo_range(style: Optional[str]) -> Tuple[int, int]:
    key = (style or "").lower()
    if "bach" in key or "baroque" in key:
        return 72, 96
    if "chopin" in key or "romantic" in key:
        return 60, 84
    if "jazz" in key:
        return 90, 120
    return 84, 120


def hash_string(value: str) -> int:
    """31-multiplier string hash with signed 32-bit wraparound, made non-negative."""
    h = 0
    for char in value:
        h = (h * 31 + ord(char)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return abs(h)


def tempo_from_style(style: Optional[str], title: Optional[str] = None) -> int:
    """Derive a tempo (BPM) from style and title.

    The same (style, title) pair always gives the same tempo.
    """
    key = (style or "").lower()
    low, high = tempo_range(key)
    h = hash_string(f"{key}|{title or ''}")
    return low + h % (high - low + 1)


def get_weighted_next_degree(
    current_degree: int,
    profile: StyleProfile,
    rng: np.random.Generator,
) -> int:
    """
    Draw the next harmonic root degree from the profile's Markov table.

    Args:
        current_degree: Current scale degree (any integer; reduced mod 7)
        profile: Style profile selecting the transition table
        rng: Random source

    Returns:
        Next scale degree in [0, 6]
    """
    table = HARMONIC_WEIGHTS.get(profile, BEETHOVEN_HARMONIC_WEIGHTS)
    weights = table[abs(int(current_degree)) % 7]

    r = rng.random() * float(weights.sum())
    for i, w in enumerate(weights):
        r -= w
        if r < 0:
            return i
    return 0
