"""
Outcome types for the match simulator.
A MatchOutcome is computed purely from ratings and an RNG; applying it to
players and fixtures is a separate step.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SetOutcome:
    """One simulated set, scored from the side of player 1."""
    player1_won: bool
    player1_points: int
    player2_points: int
    extended: bool = False  # went past 10-all


@dataclass(frozen=True)
class MatchOutcome:
    """Result of compute_outcome: format, form ratings and the set sequence."""
    best_of: int
    form_rating1: float
    form_rating2: float
    set_win_probability: float  # for player 1
    sets: tuple[SetOutcome, ...]

    @property
    def sets_player1(self) -> int:
        return sum(1 for s in self.sets if s.player1_won)

    @property
    def sets_player2(self) -> int:
        return sum(1 for s in self.sets if not s.player1_won)

    @property
    def player1_won(self) -> bool:
        return self.sets_player1 > self.sets_player2

    @property
    def points_player1(self) -> int:
        return sum(s.player1_points for s in self.sets)

    @property
    def points_player2(self) -> int:
        return sum(s.player2_points for s in self.sets)


def sets_to_win_match(best_of: int) -> int:
    return (best_of // 2) + 1
