"""
Standings: league table rows and the canonical ranking.

Keys, each applied only when every earlier key ties exactly:
  1. league points (one per league win), descending
  2. set difference, descending
  3. points scored, descending
  4. head-to-head among the tied players this season, descending
  5. rating, descending
  6. player id, ascending

Key 4 is evaluated inside each group of players tied on keys 1-3: a player's
wins minus losses against the other members of that group. For a two-way tie
that is exactly their pairwise record, and because it is a per-player number
the resulting order is always a total order.
"""
from __future__ import annotations

from typing import Iterable, Mapping

from squash_league.models import Match, MatchKind, Player, Season, StandingsRow


def build_rows(
    players: Iterable[Player],
    matches: Iterable[Match],
    league_points: Mapping[str, int] | None = None,
) -> list[StandingsRow]:
    """Table rows from the completed league matches among players."""
    players = list(players)
    ids = {p.id for p in players}
    tally: dict[str, dict[str, int]] = {
        pid: {"played": 0, "won": 0, "lost": 0, "sets_won": 0, "sets_lost": 0, "points_scored": 0, "points_conceded": 0}
        for pid in ids
    }
    for m in matches:
        if m.kind is not MatchKind.LEAGUE or not m.completed:
            continue
        a, b = m.participant_ids
        for me, opp in ((a, b), (b, a)):
            if me not in ids:
                continue
            t = tally[me]
            t["played"] += 1
            if m.winner_id == me:
                t["won"] += 1
            else:
                t["lost"] += 1
            t["sets_won"] += m.sets_won_by(me)
            t["sets_lost"] += m.sets_won_by(opp)
            t["points_scored"] += m.points_for(me)
            t["points_conceded"] += m.points_for(opp)

    rows = []
    for p in players:
        t = tally[p.id]
        points = league_points.get(p.id, 0) if league_points is not None else t["won"]
        rows.append(
            StandingsRow(
                player_id=p.id,
                name=p.name,
                nationality=p.nationality,
                rating=p.rating,
                division=p.division,
                league_points=points,
                **t,
            )
        )
    return rows


def head_to_head_wins(matches: Iterable[Match]) -> dict[tuple[str, str], int]:
    """(winner_id, loser_id) -> number of completed league wins."""
    wins: dict[tuple[str, str], int] = {}
    for m in matches:
        if m.kind is MatchKind.LEAGUE and m.completed and m.winner_id is not None:
            key = (m.winner_id, m.loser_id)
            wins[key] = wins.get(key, 0) + 1
    return wins


def _primary_key(row: StandingsRow) -> tuple[int, int, int]:
    return (-row.league_points, -row.set_difference, -row.points_scored)


def _group_differential(player_id: str, group: list[str], wins: Mapping[tuple[str, str], int]) -> int:
    total = 0
    for other in group:
        if other == player_id:
            continue
        total += wins.get((player_id, other), 0) - wins.get((other, player_id), 0)
    return total


def rank(rows: Iterable[StandingsRow], matches: Iterable[Match] = ()) -> list[StandingsRow]:
    """Order rows by the canonical key chain. Pure; calling twice gives the same order."""
    wins = head_to_head_wins(matches)
    ordered = sorted(rows, key=_primary_key)
    result: list[StandingsRow] = []
    i = 0
    while i < len(ordered):
        j = i + 1
        while j < len(ordered) and _primary_key(ordered[j]) == _primary_key(ordered[i]):
            j += 1
        group = ordered[i:j]
        if len(group) > 1:
            group_ids = [r.player_id for r in group]
            group.sort(
                key=lambda r: (-_group_differential(r.player_id, group_ids, wins), -r.rating, r.player_id)
            )
        result.extend(group)
        i = j
    return result


def rank_division(players: Iterable[Player], season: Season, division: int) -> list[StandingsRow]:
    """Ranked table for one division of a season."""
    members = [p for p in players if p.division == division]
    league = season.league_matches(division)
    return rank(build_rows(members, league, season.league_points), league)


def rank_players(players: Iterable[Player], season: Season, division: int) -> list[Player]:
    """Same order as rank_division, as live players."""
    by_id = {p.id: p for p in players}
    return [by_id[row.player_id] for row in rank_division(by_id.values(), season, division)]
