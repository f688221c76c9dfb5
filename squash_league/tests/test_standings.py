"""
Tests for league table rows and the ranking key chain.
"""
from __future__ import annotations

import random
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from squash_league.models import Match, MatchKind, Player, Season, SetScore, StandingsRow
from squash_league.services.standings import build_rows, head_to_head_wins, rank, rank_division, rank_players


def _player(pid: str, rating: float = 50.0, division: int = 1) -> Player:
    return Player(
        id=pid,
        name=f"Player {pid}",
        nationality="Udran",
        age=25,
        rating=rating,
        development_rate=0.5,
        peak_age=28,
        career_length=9,
        division=division,
    )


def _result(winner: Player, loser: Player, loser_sets: int = 0, kind: MatchKind = MatchKind.LEAGUE, loser_pts: int = 5) -> Match:
    """Best-of-3 win for winner; loser takes loser_sets (0 or 1) sets."""
    fixture = Match.scheduled(winner.snapshot(), loser.snapshot(), winner.division, kind, 1, 1)
    winners = [loser.id] * loser_sets + [winner.id, winner.id]
    scores = [SetScore(loser_pts, 11)] * loser_sets + [SetScore(11, loser_pts), SetScore(11, loser_pts)]
    return fixture.completed_with(best_of=3, set_winners=winners, set_scores=scores)


def _row(pid: str, points: int = 0, sets_won: int = 0, sets_lost: int = 0, scored: int = 0, rating: float = 50.0) -> StandingsRow:
    return StandingsRow(
        player_id=pid,
        name=pid,
        nationality="Udran",
        rating=rating,
        division=1,
        league_points=points,
        sets_won=sets_won,
        sets_lost=sets_lost,
        points_scored=scored,
    )


def _ids(rows) -> list[str]:
    return [r.player_id for r in rows]


def test_build_rows_counts_completed_league_matches_only():
    a, b = _player("a"), _player("b")
    pending = Match.scheduled(a.snapshot(), b.snapshot(), 1, MatchKind.LEAGUE, 1, 2)
    matches = [_result(a, b, loser_sets=1), _result(b, a, kind=MatchKind.CUP_FINAL), pending]
    rows = {r.player_id: r for r in build_rows([a, b], matches)}
    assert rows["a"].played == 1 and rows["a"].won == 1 and rows["a"].league_points == 1
    assert rows["b"].played == 1 and rows["b"].lost == 1 and rows["b"].league_points == 0
    assert rows["a"].sets_won == 2 and rows["a"].sets_lost == 1
    assert rows["a"].points_scored == 27 and rows["a"].points_conceded == 21
    assert rows["b"].set_difference == -1


def test_build_rows_uses_given_league_points():
    a, b = _player("a"), _player("b")
    rows = {r.player_id: r for r in build_rows([a, b], [_result(a, b)], {"a": 4, "b": 2})}
    assert rows["a"].league_points == 4 and rows["b"].league_points == 2


def test_league_points_first():
    rows = [_row("a", points=1, sets_won=9), _row("b", points=3), _row("c", points=2, scored=200)]
    assert _ids(rank(rows)) == ["b", "c", "a"]


def test_set_difference_breaks_point_ties():
    rows = [_row("a", points=2, sets_won=4, sets_lost=3), _row("b", points=2, sets_won=5, sets_lost=2)]
    assert _ids(rank(rows)) == ["b", "a"]


def test_points_scored_breaks_set_ties():
    rows = [_row("a", points=2, sets_won=4, scored=80), _row("b", points=2, sets_won=4, scored=95)]
    assert _ids(rank(rows)) == ["b", "a"]


def test_head_to_head_breaks_two_way_tie():
    a, b = _player("a", rating=40), _player("b", rating=70)
    rows = [_row("a", points=2, rating=40), _row("b", points=2, rating=70)]
    # a beat b, so a ranks first despite the lower rating
    assert _ids(rank(rows, [_result(a, b)])) == ["a", "b"]
    assert _ids(rank(rows)) == ["b", "a"]


def test_head_to_head_only_counts_tied_group():
    a, b, c = _player("a"), _player("b"), _player("c")
    rows = [_row("a", points=2, rating=40), _row("b", points=2, rating=60), _row("c", points=5)]
    # a's wins over c are outside the tied group and must not lift a above b
    matches = [_result(a, c), _result(a, c), _result(b, a)]
    assert _ids(rank(rows, matches)) == ["c", "b", "a"]


def test_cyclic_head_to_head_falls_to_rating_then_id():
    a, b, c = _player("a"), _player("b"), _player("c")
    matches = [_result(a, b), _result(b, c), _result(c, a)]
    rows = [_row("a", points=1, rating=50), _row("b", points=1, rating=60), _row("c", points=1, rating=50)]
    assert _ids(rank(rows, matches)) == ["b", "a", "c"]


def test_rank_is_idempotent():
    rows = [_row("a", 2, 3, 1, 40), _row("b", 2, 3, 1, 40), _row("c", 4), _row("d", 0, rating=70)]
    once = rank(rows)
    assert rank(once) == once
    assert rank(list(reversed(rows))) == once


def test_rank_is_a_total_order_under_forced_ties():
    """Small value ranges force ties on every key; any input order gives the same table."""
    rnd = random.Random(99)
    players = [_player(f"p{i}", rating=rnd.choice([40, 50])) for i in range(6)]
    matches = []
    for _ in range(15):
        w, l = rnd.sample(players, 2)
        matches.append(_result(w, l))
    for trial in range(30):
        rows = [
            _row(p.id, points=rnd.randint(0, 1), sets_won=rnd.randint(0, 1), scored=rnd.choice([20, 22]), rating=p.rating)
            for p in players
        ]
        expected = rank(rows, matches)
        for _ in range(10):
            shuffled = rows[:]
            rnd.shuffle(shuffled)
            assert rank(shuffled, matches) == expected
        assert len(set(_ids(expected))) == len(rows)


def test_head_to_head_wins_ignores_cup():
    a, b = _player("a"), _player("b")
    wins = head_to_head_wins([_result(a, b), _result(a, b), _result(b, a, kind=MatchKind.CUP_SEMIFINAL)])
    assert wins == {("a", "b"): 2}


def test_rank_division_uses_season_league_points():
    a, b, c = _player("a", 50, 2), _player("b", 50, 2), _player("x", 90, 1)
    season = Season(number=1)
    season.matches = [_result(a, b), _result(a, b), _result(b, a)]
    season.league_points = {"a": 2, "b": 1, "x": 0}
    table = rank_division([a, b, c], season, 2)
    assert _ids(table) == ["a", "b"]
    assert [p.id for p in rank_players([a, b, c], season, 2)] == ["a", "b"]
