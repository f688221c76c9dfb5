"""
Deterministic fixture generation for divisions and the cup.

League: double round-robin by the circle method. With five players a virtual
BYE is added, so each leg has five rounds of two matches and one player rests
each round. The second leg replays the first with home/away reversed, which
means no pairing repeats in adjacent rounds and both divisions share the same
round numbering.

Cup: seeds 1v4 and 2v3 in the semifinals; third-place match and final are
generated once both semifinals are complete.
"""
from __future__ import annotations

import logging
from typing import Iterable, Union

from squash_league.config import CUP_SIZE, PLAYERS_PER_DIVISION
from squash_league.models import Match, MatchKind, Player, PlayerSnapshot

logger = logging.getLogger(__name__)

# Sentinel for a bye when the number of players is odd
BYE = "BYE"
CUP_DIVISION = 1

Entrant = Union[Player, PlayerSnapshot]


class ScheduleError(ValueError):
    """Cup fixtures requested with the wrong entrants."""


def _snap(entrant: Entrant) -> PlayerSnapshot:
    return entrant.snapshot() if isinstance(entrant, Player) else entrant


def round_robin_pairings(player_ids: list[str]) -> list[tuple[int, str, str]]:
    """
    Single round-robin as (round_number, home_id, away_id), byes dropped.
    Slot 0 is fixed and the others rotate one place per round.
    Same id ordering => same fixtures.
    """
    if len(player_ids) < 2:
        return []
    ids = list(player_ids)
    if len(ids) % 2 == 1:
        ids.append(BYE)
    n = len(ids)
    order = list(range(n))
    result: list[tuple[int, str, str]] = []
    for rnd in range(n - 1):
        for i in range(n // 2):
            home, away = ids[order[i]], ids[order[n - 1 - i]]
            if BYE in (home, away):
                continue
            # Alternate orientation so nobody is "home" every round
            if rnd % 2 == 1:
                home, away = away, home
            result.append((rnd + 1, home, away))
        order = [order[0], order[-1], *order[1:-1]]
    return result


def double_round_robin(player_ids: list[str]) -> list[tuple[int, str, str]]:
    """Both legs; the second leg reverses home/away and continues the round count."""
    first_leg = round_robin_pairings(player_ids)
    if not first_leg:
        return []
    leg_rounds = max(r for r, _, _ in first_leg)
    second_leg = [(r + leg_rounds, away, home) for r, home, away in first_leg]
    return first_leg + second_leg


def generate_league_schedule(division_players: list[Player], division: int, season: int) -> list[Match]:
    """
    Twenty league fixtures for a five-player division, rounds 1-10, two per round.
    A roster of the wrong size yields no fixtures; the caller detects the gap.
    """
    ids = [p.id for p in division_players]
    if len(ids) != PLAYERS_PER_DIVISION or len(set(ids)) != len(ids):
        logger.error(
            "SCHEDULE_ROSTER_SIZE_INVALID division=%s season=%s size=%s unique=%s",
            division, season, len(ids), len(set(ids)),
        )
        return []
    snapshots = {p.id: p.snapshot() for p in division_players}
    fixtures = [
        Match.scheduled(
            snapshots[home],
            snapshots[away],
            division=division,
            kind=MatchKind.LEAGUE,
            season=season,
            round=rnd,
        )
        for rnd, home, away in double_round_robin(ids)
    ]
    logger.debug("SCHEDULE_LEAGUE division=%s season=%s fixtures=%s", division, season, len(fixtures))
    return fixtures


def generate_cup_bracket(top_four: list[Entrant], season: int) -> list[Match]:
    """Semifinals, round 1: seed 1 v seed 4, seed 2 v seed 3."""
    seeds = [_snap(e) for e in top_four]
    if len(seeds) != CUP_SIZE:
        raise ScheduleError(f"Cup needs exactly {CUP_SIZE} entrants, got {len(seeds)}")
    if len({s.id for s in seeds}) != CUP_SIZE:
        raise ScheduleError("Cup entrants must be distinct players")
    first, second, third, fourth = seeds
    return [
        Match.scheduled(first, fourth, CUP_DIVISION, MatchKind.CUP_SEMIFINAL, season, 1),
        Match.scheduled(second, third, CUP_DIVISION, MatchKind.CUP_SEMIFINAL, season, 1),
    ]


def generate_cup_finals(
    semi_winners: list[Entrant],
    semi_losers: list[Entrant],
    season: int,
    semifinal_round: int = 1,
) -> list[Match]:
    """Third-place match (losers) at semifinal_round + 1, final (winners) at + 2."""
    winners = [_snap(e) for e in semi_winners]
    losers = [_snap(e) for e in semi_losers]
    if len(winners) != 2 or len(losers) != 2:
        raise ScheduleError("Cup finals need two semifinal winners and two losers")
    if len({p.id for p in winners + losers}) != 4:
        raise ScheduleError("Cup finalists must be four distinct players")
    return [
        Match.scheduled(
            losers[0], losers[1], CUP_DIVISION, MatchKind.CUP_THIRD_PLACE, season, semifinal_round + 1
        ),
        Match.scheduled(
            winners[0], winners[1], CUP_DIVISION, MatchKind.CUP_FINAL, season, semifinal_round + 2
        ),
    ]


def interleave(div1_matches: Iterable[Match], div2_matches: Iterable[Match], cup_matches: Iterable[Match]) -> list[Match]:
    """
    Authoritative play order: league rounds ascending (division 2 before
    division 1 within a round), then the cup with its rounds renumbered to
    follow the last league round.
    """
    div1 = list(div1_matches)
    div2 = list(div2_matches)
    cup = list(cup_matches)
    league_rounds = sorted({m.round for m in div1 + div2})
    ordered: list[Match] = []
    for rnd in league_rounds:
        ordered.extend(m for m in div2 if m.round == rnd)
        ordered.extend(m for m in div1 if m.round == rnd)
    last_league_round = league_rounds[-1] if league_rounds else 0
    if cup:
        first_cup_round = min(m.round for m in cup)
        for m in sorted(cup, key=lambda m: m.round):
            ordered.append(m.with_round(last_league_round + m.round - first_cup_round + 1))
    return ordered

