"""
Probability Engine: turns two ratings into a per-set win probability.
Day-to-day form is modelled as bounded uniform noise on each rating; the set
probability is a logistic curve on the adjusted rating difference.
"""
from __future__ import annotations

from dataclasses import dataclass

from squash_league.config import SimulationConfig
from .rng import SeededRNG


def logistic_win_probability(rating_diff: float, scale: float) -> float:
    """p = 1 / (1 + 10^(-diff/scale))."""
    return 1.0 / (1.0 + 10.0 ** (-rating_diff / scale))


@dataclass(frozen=True)
class MatchForm:
    """Adjusted ratings for one match."""
    rating1: float
    rating2: float

    @property
    def gap(self) -> float:
        return abs(self.rating1 - self.rating2)


class ProbabilityEngine:
    """Form sampling, set probability and match format choice."""

    def __init__(self, config: SimulationConfig | None = None) -> None:
        self.config = config or SimulationConfig()

    def sample_form(self, rating1: float, rating2: float, rng: SeededRNG) -> MatchForm:
        noise = self.config.form_noise
        return MatchForm(
            rating1=rating1 + rng.uniform(-noise, noise),
            rating2=rating2 + rng.uniform(-noise, noise),
        )

    def set_win_probability(self, form: MatchForm) -> float:
        return logistic_win_probability(form.rating1 - form.rating2, self.config.logistic_scale)

    def choose_best_of(self, is_cup: bool, rng: SeededRNG) -> int:
        if is_cup:
            return self.config.cup_best_of
        return 3 if rng.chance(self.config.league_best_of_3_probability) else 5
