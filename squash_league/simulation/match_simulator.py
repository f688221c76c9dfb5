"""
Match Simulator: plays a match set by set from two ratings.

compute_outcome is pure given the injected RNG; apply_outcome mutates both
players' season, career and head-to-head counters and returns the completed
Match. simulate / play_fixture run both steps.
"""
from __future__ import annotations

import math
from typing import Any

from squash_league.config import SimulationConfig
from squash_league.models import Match, MatchKind, Player, SetScore
from .probability_engine import ProbabilityEngine
from .rng import SeededRNG
from .schemas import MatchOutcome, SetOutcome, sets_to_win_match
from .set_simulator import SetSimulator


class MatchPreconditionError(ValueError):
    """Malformed match input: same player twice, missing or non-numeric rating."""


def _require_rating(player: Any) -> float:
    rating = getattr(player, "rating", None)
    if isinstance(rating, bool) or not isinstance(rating, (int, float)) or math.isnan(rating):
        raise MatchPreconditionError(f"Player {getattr(player, 'id', '?')} has no usable rating: {rating!r}")
    return float(rating)


def _check_pair(player1: Player, player2: Player) -> None:
    if player1 is player2 or player1.id == player2.id:
        raise MatchPreconditionError(f"Player {player1.id} cannot play themselves")
    _require_rating(player1)
    _require_rating(player2)


class MatchSimulator:
    """Rating-driven squash match model."""

    def __init__(
        self,
        rng: SeededRNG | None = None,
        config: SimulationConfig | None = None,
        prob_engine: ProbabilityEngine | None = None,
    ) -> None:
        self.config = config or SimulationConfig()
        self.rng = rng or SeededRNG()
        self.prob_engine = prob_engine or ProbabilityEngine(self.config)
        self.set_sim = SetSimulator(self.rng, self.config)

    # ---------- Outcome (no mutation) ----------

    def compute_outcome(self, rating1: float, rating2: float, kind: MatchKind) -> MatchOutcome:
        form = self.prob_engine.sample_form(rating1, rating2, self.rng)
        p1 = self.prob_engine.set_win_probability(form)
        best_of = self.prob_engine.choose_best_of(kind.is_cup, self.rng)
        needed = sets_to_win_match(best_of)
        sets: list[SetOutcome] = []
        won1 = won2 = 0
        while won1 < needed and won2 < needed:
            s = self.set_sim.sample_set(p1, form)
            sets.append(s)
            if s.player1_won:
                won1 += 1
            else:
                won2 += 1
        return MatchOutcome(
            best_of=best_of,
            form_rating1=form.rating1,
            form_rating2=form.rating2,
            set_win_probability=p1,
            sets=tuple(sets),
        )

    # ---------- Apply (mutation) ----------

    def apply_outcome(self, fixture: Match, outcome: MatchOutcome, player1: Player, player2: Player) -> Match:
        """
        Write the outcome into both players and return the completed fixture.
        player1/player2 must be the live players for fixture.player1/fixture.player2.
        """
        if fixture.player1.id != player1.id or fixture.player2.id != player2.id:
            raise MatchPreconditionError(
                f"Players {player1.id}/{player2.id} do not match fixture {fixture.id}"
            )
        sets1, sets2 = outcome.sets_player1, outcome.sets_player2
        pts1, pts2 = outcome.points_player1, outcome.points_player2
        _apply_side(player1, player2, outcome.player1_won, sets1, sets2, pts1, pts2)
        _apply_side(player2, player1, not outcome.player1_won, sets2, sets1, pts2, pts1)

        return fixture.completed_with(
            best_of=outcome.best_of,
            set_winners=[player1.id if s.player1_won else player2.id for s in outcome.sets],
            set_scores=[SetScore(s.player1_points, s.player2_points) for s in outcome.sets],
            player1=player1.snapshot(),
            player2=player2.snapshot(),
        )

    # ---------- Entry points ----------

    def play_fixture(self, fixture: Match, player1: Player, player2: Player) -> Match:
        """Simulate a scheduled fixture against the live players resolved for it."""
        _check_pair(player1, player2)
        if fixture.completed:
            raise MatchPreconditionError(f"Match {fixture.id} is already completed")
        outcome = self.compute_outcome(player1.rating, player2.rating, fixture.kind)
        return self.apply_outcome(fixture, outcome, player1, player2)

    def simulate(
        self,
        player1: Player,
        player2: Player,
        kind: MatchKind,
        season_number: int,
        round_number: int,
        division: int | None = None,
    ) -> Match:
        """Simulate an ad-hoc match; the fixture is created from the players' current state."""
        _check_pair(player1, player2)
        fixture = Match.scheduled(
            player1.snapshot(),
            player2.snapshot(),
            division=division if division is not None else player1.division,
            kind=kind,
            season=season_number,
            round=round_number,
        )
        return self.play_fixture(fixture, player1, player2)


def _apply_side(
    player: Player,
    opponent: Player,
    won: bool,
    sets_for: int,
    sets_against: int,
    points_for: int,
    points_against: int,
) -> None:
    player.games_played += 1
    player.career_games_played += 1
    if won:
        player.games_won += 1
        player.career_games_won += 1
    else:
        player.games_lost += 1
    player.sets_won += sets_for
    player.sets_lost += sets_against
    player.points_scored += points_for
    player.points_conceded += points_against

    h2h = player.record_against(opponent)
    if won:
        h2h.wins += 1
    else:
        h2h.losses += 1
    h2h.sets_won += sets_for
    h2h.sets_lost += sets_against
    h2h.points_for += points_for
    h2h.points_against += points_against
