"""Generation layer - Algorithmic composition.

This layer produces compositions from a style label:
- Style profiles (Markov harmony tables, motion weights, rubato curves)
- Stochastic melody and bass generation with motivic development
"""

from .style import (
    StyleProfile,
    BACH_HARMONIC_WEIGHTS,
    BEETHOVEN_HARMONIC_WEIGHTS,
    HARMONIC_WEIGHTS,
    MELODIC_MOTION_WEIGHTS,
    RUBATO_CURVES,
    SCALES,
    get_weighted_next_degree,
    resolve_rubato,
    resolve_style,
    tempo_from_style,
)
from .generator import (
    StochasticGenerator,
    GeneratorConfig,
    apply_inversion,
    apply_sequence,
    compose,
)

__all__ = [
    "StyleProfile",
    "BACH_HARMONIC_WEIGHTS",
    "BEETHOVEN_HARMONIC_WEIGHTS",
    "HARMONIC_WEIGHTS",
    "MELODIC_MOTION_WEIGHTS",
    "RUBATO_CURVES",
    "SCALES",
    "get_weighted_next_degree",
    "resolve_rubato",
    "resolve_style",
    "tempo_from_style",
    "StochasticGenerator",
    "GeneratorConfig",
    "apply_inversion",
    "apply_sequence",
    "compose",
]
