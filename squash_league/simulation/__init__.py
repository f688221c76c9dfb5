"""
Squash match simulation: seeded, rating-driven, set-by-set.
"""
from .schemas import MatchOutcome, SetOutcome, sets_to_win_match
from .rng import SeededRNG
from .probability_engine import MatchForm, ProbabilityEngine, logistic_win_probability
from .set_simulator import SetSimulator, loser_score_range
from .match_simulator import MatchPreconditionError, MatchSimulator

__all__ = [
    "MatchOutcome",
    "SetOutcome",
    "sets_to_win_match",
    "SeededRNG",
    "MatchForm",
    "ProbabilityEngine",
    "logistic_win_probability",
    "SetSimulator",
    "loser_score_range",
    "MatchPreconditionError",
    "MatchSimulator",
]
