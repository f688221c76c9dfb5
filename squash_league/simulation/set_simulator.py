"""
Set Simulator: decides a set winner from the set probability, then
synthesizes a plausible PAR-11 score. Close ratings produce close scores;
a loser score of 10 means 10-all and the set is extended.
"""
from __future__ import annotations

from squash_league.config import SimulationConfig
from .probability_engine import MatchForm
from .rng import SeededRNG
from .schemas import SetOutcome


def loser_score_range(gap: float, config: SimulationConfig) -> tuple[int, int]:
    """Inclusive range the loser's points are drawn from, by adjusted rating gap."""
    if gap < config.close_gap:
        return config.close_loser_range
    if gap < config.medium_gap:
        return config.medium_loser_range
    return config.wide_loser_range


class SetSimulator:
    """Samples one set; the caller counts sets and stops at the match target."""

    def __init__(self, rng: SeededRNG, config: SimulationConfig | None = None) -> None:
        self.rng = rng
        self.config = config or SimulationConfig()

    def sample_score(self, gap: float) -> tuple[int, int, bool]:
        """Returns (winner_points, loser_points, extended)."""
        cfg = self.config
        lo, hi = loser_score_range(gap, cfg)
        loser = self.rng.randint(lo, hi)
        threshold = cfg.points_to_win_set - 1
        if loser >= threshold:
            # Tie at the threshold: play on until someone leads by win_by
            extra = self.rng.randint(0, cfg.deuce_max_extra)
            loser = threshold + extra
            return loser + cfg.win_by, loser, True
        return cfg.points_to_win_set, loser, False

    def sample_set(self, p_player1: float, form: MatchForm) -> SetOutcome:
        player1_won = self.rng.random() < p_player1
        winner_pts, loser_pts, extended = self.sample_score(form.gap)
        if player1_won:
            return SetOutcome(True, winner_pts, loser_pts, extended)
        return SetOutcome(False, loser_pts, winner_pts, extended)
