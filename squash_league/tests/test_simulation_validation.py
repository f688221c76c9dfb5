"""
Validation test for the match simulator: run many matches, aggregate
statistics, and check them against what a rating-driven model must show.

- A much stronger player (80 vs 20) wins well over 90% of matches.
- Equal ratings give roughly even results.
- Points per set stay in the PAR-11 range; deuce sets occur between close players.
"""
from __future__ import annotations

import os
import sys
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path

import pytest

# Run from project root: python -m pytest squash_league/tests/test_simulation_validation.py -v
_root = Path(__file__).resolve().parent.parent.parent
if str(_root) not in sys.path:
    sys.path.insert(0, str(_root))

from squash_league.models import MatchKind
from squash_league.simulation import MatchSimulator, SeededRNG

# Number of matches per scenario (override with env SIM_VALIDATION_MATCHES).
DEFAULT_VALIDATION_MATCHES = int(os.environ.get("SIM_VALIDATION_MATCHES", "1000"))
STRONG_WIN_RATE_MIN = 0.9
EVEN_WIN_RATE_TOLERANCE = 0.06
EXPECTED_AVG_POINTS_PER_SET_MIN = 12
EXPECTED_AVG_POINTS_PER_SET_MAX = 24


@dataclass
class AggregatedStats:
    """Aggregate statistics from many simulated matches."""
    total_matches: int = 0
    player1_wins: int = 0
    total_sets: int = 0
    total_points: int = 0
    extended_sets: int = 0
    formats: dict[int, int] = field(default_factory=lambda: defaultdict(int))
    set_scores: list[tuple[int, int]] = field(default_factory=list)  # (sets_1, sets_2) per match

    @property
    def player1_win_pct(self) -> float:
        return self.player1_wins / self.total_matches if self.total_matches else 0.0

    @property
    def avg_points_per_set(self) -> float:
        return self.total_points / self.total_sets if self.total_sets else 0.0

    def set_score_distribution(self) -> dict[tuple[int, int], float]:
        if not self.set_scores:
            return {}
        counts: dict[tuple[int, int], int] = defaultdict(int)
        for s in self.set_scores:
            counts[s] += 1
        n = len(self.set_scores)
        return {k: v / n for k, v in counts.items()}


def run_matches_and_aggregate(
    n_matches: int,
    rating1: float,
    rating2: float,
    kind: MatchKind = MatchKind.LEAGUE,
    seed: int = 12345,
) -> AggregatedStats:
    sim = MatchSimulator(SeededRNG(seed))
    agg = AggregatedStats()
    for _ in range(n_matches):
        out = sim.compute_outcome(rating1, rating2, kind)
        agg.total_matches += 1
        agg.player1_wins += int(out.player1_won)
        agg.total_sets += len(out.sets)
        agg.total_points += out.points_player1 + out.points_player2
        agg.extended_sets += sum(1 for s in out.sets if s.extended)
        agg.formats[out.best_of] += 1
        agg.set_scores.append((out.sets_player1, out.sets_player2))
    return agg


class TestSimulationValidation:
    """Run many matches and check aggregate behaviour."""

    @pytest.fixture(scope="class")
    def agg_mismatch(self):
        return run_matches_and_aggregate(DEFAULT_VALIDATION_MATCHES, 80, 20, seed=2024)

    @pytest.fixture(scope="class")
    def agg_equal(self):
        return run_matches_and_aggregate(DEFAULT_VALIDATION_MATCHES, 50, 50, seed=4202)

    @pytest.fixture(scope="class")
    def agg_cup(self):
        return run_matches_and_aggregate(DEFAULT_VALIDATION_MATCHES // 2, 60, 55, MatchKind.CUP_FINAL, seed=77)

    def test_strong_player_dominates(self, agg_mismatch):
        """80 vs 20: the stronger player wins more than 90% of matches."""
        pct = agg_mismatch.player1_win_pct
        assert pct > STRONG_WIN_RATE_MIN, f"80 vs 20 win rate {pct:.2%} should exceed {STRONG_WIN_RATE_MIN:.0%}"

    def test_equal_ratings_are_even(self, agg_equal):
        pct = agg_equal.player1_win_pct
        assert abs(pct - 0.5) < EVEN_WIN_RATE_TOLERANCE, f"Equal-rating win rate {pct:.2%} not near 50%"

    def test_average_points_per_set_in_range(self, agg_equal, agg_mismatch):
        for agg in (agg_equal, agg_mismatch):
            avg = agg.avg_points_per_set
            assert EXPECTED_AVG_POINTS_PER_SET_MIN <= avg <= EXPECTED_AVG_POINTS_PER_SET_MAX, (
                f"Avg points per set {avg:.1f} outside [{EXPECTED_AVG_POINTS_PER_SET_MIN}, {EXPECTED_AVG_POINTS_PER_SET_MAX}]"
            )
        assert agg_equal.avg_points_per_set > agg_mismatch.avg_points_per_set

    def test_deuce_only_between_close_players(self, agg_equal, agg_mismatch):
        assert agg_equal.extended_sets > 0
        assert agg_mismatch.extended_sets == 0

    def test_league_format_mix(self, agg_equal):
        assert set(agg_equal.formats) == {3, 5}
        assert agg_equal.formats[3] > agg_equal.formats[5]

    def test_cup_set_score_distribution(self, agg_cup):
        """Cup is best-of-5: every result is 3-x or x-3."""
        dist = agg_cup.set_score_distribution()
        assert set(agg_cup.formats) == {5}
        for (s1, s2), pct in dist.items():
            assert 0 <= pct <= 1
            assert (s1 == 3) != (s2 == 3)

    def test_validation_report(self, agg_equal, agg_mismatch):
        """Print a short report of simulated stats (for manual check)."""
        print("\n--- Simulation validation report ---")
        print(f"  Matches per scenario: {agg_equal.total_matches}")
        print(f"  80 vs 20 win %: {agg_mismatch.player1_win_pct:.1%}")
        print(f"  50 vs 50 win %: {agg_equal.player1_win_pct:.1%}")
        print(f"  Avg points per set (equal): {agg_equal.avg_points_per_set:.2f}")
        print(f"  Deuce sets (equal): {agg_equal.extended_sets}/{agg_equal.total_sets}")
        print(f"  Set scores (equal): {dict((k, f'{v:.1%}') for k, v in sorted(agg_equal.set_score_distribution().items()))}")
        print("------------------------------------")
