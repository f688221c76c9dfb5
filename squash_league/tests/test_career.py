"""
Tests for career progression at season close and between-season roster moves.
"""
from __future__ import annotations

from pathlib import Path

import pytest

import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from squash_league.config import CareerConfig
from squash_league.models import CupResult, CupSummary, Player, PlayerRegistry, SeasonArchive, StandingsRow
from squash_league.services.career import (
    apply_promotion_relegation,
    close_season_for_player,
    decline_probability,
    develop,
    replace_retirees,
    retire,
)
from squash_league.simulation import SeededRNG


def _player(pid: str, division: int = 1, rating: float = 50.0, **kw) -> Player:
    attrs = dict(
        id=pid,
        name=f"Player {pid}",
        nationality="Virelia",
        age=22,
        rating=rating,
        development_rate=1.0,
        peak_age=28,
        career_length=9,
        division=division,
    )
    attrs.update(kw)
    return Player(**attrs)


def _row(p: Player, points: int = 0) -> StandingsRow:
    return StandingsRow(
        player_id=p.id, name=p.name, nationality=p.nationality, rating=p.rating,
        division=p.division, league_points=points,
    )


def _league() -> tuple[PlayerRegistry, SeasonArchive]:
    """Ten players; archive orders each division by id, cup is d1a > d1b, d1c 3rd, d1d 4th."""
    div1 = [_player(f"d1{c}", 1) for c in "abcde"]
    div2 = [_player(f"d2{c}", 2) for c in "abcde"]
    archive = SeasonArchive(
        season=1,
        standings={1: tuple(_row(p, 8 - i) for i, p in enumerate(div1)), 2: tuple(_row(p, 8 - i) for i, p in enumerate(div2))},
        cup=CupSummary(
            winner=div1[0].snapshot(), runner_up=div1[1].snapshot(),
            third=div1[2].snapshot(), fourth=div1[3].snapshot(),
        ),
    )
    return PlayerRegistry(div1 + div2), archive


# ---- Development ----


def test_decline_probability_schedule():
    cfg = CareerConfig()
    assert decline_probability(6, cfg) == 0.0
    assert decline_probability(7, cfg) == pytest.approx(0.3)
    assert decline_probability(8, cfg) == pytest.approx(0.5)
    assert decline_probability(11, cfg) == 1.0


def test_growth_before_peak_in_range():
    cfg = CareerConfig()
    for seed in range(50):
        p = _player("a", rating=50.0, age=22)
        delta = develop(p, SeededRNG(seed), cfg)
        assert 1.0 <= delta <= 2.5
        assert not p.is_declined
        assert p.career_high_rating == p.rating


def test_growth_slows_after_peak():
    cfg = CareerConfig()
    for seed in range(50):
        p = _player("a", rating=50.0, age=29, seasons_played=3)
        delta = develop(p, SeededRNG(seed), cfg)
        assert 0.4 <= delta <= 1.0


def test_growth_diminishes_with_rating():
    cfg = CareerConfig()
    low = develop(_player("a", rating=30.0), SeededRNG(1), cfg)
    high = develop(_player("b", rating=90.0), SeededRNG(1), cfg)
    assert high < low


def test_rating_ceiling():
    p = _player("a", rating=99.8)
    develop(p, SeededRNG(2), CareerConfig())
    assert p.rating == 100.0


def test_certain_decline_with_floor():
    cfg = CareerConfig()
    p = _player("a", rating=40.0, age=31, seasons_played=11)
    delta = develop(p, SeededRNG(3), cfg)
    assert p.is_declined
    assert -2.5 <= delta <= -1.0
    old = _player("b", rating=15.5, age=31, seasons_played=11)
    develop(old, SeededRNG(3), cfg)
    assert old.rating == 15.0


def test_no_decline_before_peak_age():
    p = _player("a", age=24, peak_age=28, seasons_played=12)
    develop(p, SeededRNG(4), CareerConfig())
    assert not p.is_declined


# ---- Season close ----


def test_close_season_records_and_honours():
    registry, archive = _league()
    champion = registry.require("d1a")
    rec = close_season_for_player(champion, archive, SeededRNG(5))
    assert champion.seasons_played == 1 and champion.age == 23
    assert rec.season == 1 and rec.division == 1 and rec.position == 1
    assert rec.cup_result is CupResult.CHAMPION
    assert rec.league_points == 8
    assert rec.end_rating == round(champion.rating, 2)
    assert champion.championships_won == 1 and champion.podiums == 1
    assert champion.cups_won == 1 and champion.cups_played == 1 and champion.cup_podiums == 1
    assert champion.season_history == [rec]


def test_cup_labels_for_each_finisher():
    registry, archive = _league()
    rng = SeededRNG(6)
    labels = {pid: close_season_for_player(registry.require(pid), archive, rng).cup_result for pid in registry.ids()}
    assert labels["d1b"] is CupResult.RUNNER_UP
    assert labels["d1c"] is CupResult.THIRD_PLACE
    assert labels["d1d"] is CupResult.SEMIFINALIST
    assert labels["d1e"] is CupResult.DID_NOT_QUALIFY
    fourth = registry.require("d1d")
    assert fourth.cups_played == 1 and fourth.cup_podiums == 0
    assert registry.require("d1e").cups_played == 0


def test_overall_position_for_division_two():
    registry, archive = _league()
    p = registry.require("d2a")
    rec = close_season_for_player(p, archive, SeededRNG(7))
    assert rec.position == 6
    assert p.championships_won == 0 and p.podiums == 0


def test_retirement_by_career_length_only():
    registry, archive = _league()
    veteran = registry.require("d1a")
    veteran.seasons_played, veteran.career_length = 8, 9
    close_season_for_player(veteran, archive, SeededRNG(8))
    assert veteran.is_retired
    young = registry.require("d1b")
    young.rating = 15.0
    close_season_for_player(young, archive, SeededRNG(8))
    assert not young.is_retired


# ---- Roster moves ----


def test_promotion_and_relegation():
    registry, archive = _league()
    relegated, promoted = apply_promotion_relegation(registry, archive)
    assert relegated.id == "d1e" and relegated.division == 2
    assert promoted.id == "d2a" and promoted.division == 1
    assert len(registry.in_division(1)) == len(registry.in_division(2)) == 5


def test_promotion_resolves_by_name_when_id_changed():
    registry, archive = _league()
    moved = registry.remove("d2a")
    moved.id = "renumbered"
    registry.add(moved)
    _, promoted = apply_promotion_relegation(registry, archive)
    assert promoted is moved and moved.division == 1


def test_rebalance_after_division_one_retirement():
    registry, archive = _league()
    registry.require("d1b").is_retired = True
    retired = retire(registry, registry.all())
    assert [p.id for p in retired] == ["d1b"]
    replace_retirees(registry, 1, [_player("new", 2, rating=30)])
    apply_promotion_relegation(registry, archive)
    div1 = {p.id for p in registry.in_division(1)}
    # d1e relegated, d2a promoted, d2b pulled up to fill the retiree's place
    assert div1 == {"d1a", "d1c", "d1d", "d2a", "d2b"}
    assert registry.require("new").division == 2
    assert len(registry.in_division(2)) == 5


def test_replace_retirees_one_for_one():
    registry, _ = _league()
    registry.remove("d1a")
    added = replace_retirees(registry, 1, [_player("r1", 1)])
    assert [p.id for p in added] == ["r1"]
    assert added[0].division == 2
    assert len(registry) == 10


def test_replace_retirees_truncates_and_warns(caplog):
    registry, _ = _league()
    registry.remove("d1a")
    with caplog.at_level("WARNING"):
        added = replace_retirees(registry, 1, [_player("r1", 2), _player("r2", 2)])
    assert [p.id for p in added] == ["r1"]
    assert len(registry) == 10
    assert "ROSTER_REPLACEMENT_MISMATCH" in caplog.text
