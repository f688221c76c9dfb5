"""
Data models for the squash league engine.
Domain objects only: no persistence, scheduling or simulation logic.

Players live once in an id-indexed PlayerRegistry. Matches, cup brackets and
season archives hold PlayerSnapshot copies taken when they were created, never
live Player references.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, ClassVar, Iterable, Iterator
from uuid import uuid4


def new_id() -> str:
    return uuid4().hex


# ---------- Match kind ----------
class MatchKind(str, Enum):
    LEAGUE = "league"
    CUP_SEMIFINAL = "cup-semifinal"
    CUP_THIRD_PLACE = "cup-third-place"
    CUP_FINAL = "cup-final"

    @property
    def is_cup(self) -> bool:
        return self is not MatchKind.LEAGUE


# ---------- Cup result label ----------
class CupResult(str, Enum):
    CHAMPION = "Champion"
    RUNNER_UP = "Runner-Up"
    THIRD_PLACE = "3rd Place"
    SEMIFINALIST = "Semifinalist"  # lost the third-place match
    DID_NOT_QUALIFY = "Did Not Qualify"

    @property
    def is_podium(self) -> bool:
        return self in (CupResult.CHAMPION, CupResult.RUNNER_UP, CupResult.THIRD_PLACE)


# ---------- Season phase (state machine) ----------
class SeasonPhase(str, Enum):
    """Season lifecycle: scheduling → league → cup → closing → transitioning → scheduling."""
    SCHEDULING = "scheduling"
    LEAGUE = "league"
    CUP = "cup"
    CLOSING = "closing"
    TRANSITIONING = "transitioning"  # waiting for retirements to be acknowledged


class PlayerResolutionError(LookupError):
    """A player id could not be resolved against the live registry."""


# ---------- Head-to-head ----------
@dataclass
class HeadToHeadRecord:
    """One player's career record against a single opponent."""
    opponent_id: str
    opponent_name: str
    opponent_nationality: str
    wins: int = 0
    losses: int = 0
    sets_won: int = 0
    sets_lost: int = 0
    points_for: int = 0
    points_against: int = 0

    @property
    def differential(self) -> int:
        return self.wins - self.losses

    def to_dict(self) -> dict[str, Any]:
        return {
            "opponent_id": self.opponent_id,
            "opponent_name": self.opponent_name,
            "opponent_nationality": self.opponent_nationality,
            "wins": self.wins,
            "losses": self.losses,
            "sets_won": self.sets_won,
            "sets_lost": self.sets_lost,
            "points_for": self.points_for,
            "points_against": self.points_against,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> HeadToHeadRecord:
        return cls(
            opponent_id=d["opponent_id"],
            opponent_name=d.get("opponent_name", ""),
            opponent_nationality=d.get("opponent_nationality", ""),
            wins=d.get("wins", 0),
            losses=d.get("losses", 0),
            sets_won=d.get("sets_won", 0),
            sets_lost=d.get("sets_lost", 0),
            points_for=d.get("points_for", 0),
            points_against=d.get("points_against", 0),
        )


# ---------- Season record ----------
@dataclass
class SeasonRecord:
    """One completed season in a player's career."""
    season: int
    division: int
    position: int  # overall: division 1 ranks 1-5, division 2 ranks 6-10
    cup_result: CupResult
    end_rating: float
    league_points: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "season": self.season,
            "division": self.division,
            "position": self.position,
            "cup_result": self.cup_result.value,
            "end_rating": self.end_rating,
            "league_points": self.league_points,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> SeasonRecord:
        return cls(
            season=d["season"],
            division=d["division"],
            position=d["position"],
            cup_result=CupResult(d.get("cup_result", CupResult.DID_NOT_QUALIFY.value)),
            end_rating=d["end_rating"],
            league_points=d.get("league_points", 0),
        )


# ---------- Player snapshot ----------
@dataclass(frozen=True)
class PlayerSnapshot:
    """Display copy of a player taken at a point in time. Not a live handle."""
    id: str
    name: str
    nationality: str
    rating: float
    division: int
    age: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "nationality": self.nationality,
            "rating": self.rating,
            "division": self.division,
            "age": self.age,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> PlayerSnapshot:
        return cls(
            id=d["id"],
            name=d["name"],
            nationality=d["nationality"],
            rating=d["rating"],
            division=d["division"],
            age=d.get("age", 0),
        )


# ---------- Player ----------
@dataclass
class Player:
    """
    A league player. Identity (id, name, nationality) is stable for a career;
    everything else is mutated by the match simulator and career progression.
    """
    name: str
    nationality: str
    age: int
    rating: float
    development_rate: float
    peak_age: int
    career_length: int
    division: int = 2
    id: str = field(default_factory=new_id)
    seasons_played: int = 0
    is_retired: bool = False
    is_declined: bool = False
    # Season-scoped counters
    games_played: int = 0
    games_won: int = 0
    games_lost: int = 0
    sets_won: int = 0
    sets_lost: int = 0
    points_scored: int = 0
    points_conceded: int = 0
    # Career-scoped counters
    championships_won: int = 0
    podiums: int = 0
    cups_won: int = 0
    cups_played: int = 0
    cup_podiums: int = 0
    career_high_rating: float = 0.0
    career_games_played: int = 0
    career_games_won: int = 0
    season_history: list[SeasonRecord] = field(default_factory=list)
    head_to_head: dict[str, HeadToHeadRecord] = field(default_factory=dict)

    SEASON_COUNTERS: ClassVar[tuple[str, ...]] = (
        "games_played",
        "games_won",
        "games_lost",
        "sets_won",
        "sets_lost",
        "points_scored",
        "points_conceded",
    )

    def __post_init__(self) -> None:
        if self.career_high_rating < self.rating:
            self.career_high_rating = self.rating

    @property
    def set_difference(self) -> int:
        return self.sets_won - self.sets_lost

    def reset_season_counters(self) -> None:
        for name in self.SEASON_COUNTERS:
            setattr(self, name, 0)

    def record_against(self, opponent: Player | PlayerSnapshot) -> HeadToHeadRecord:
        """Head-to-head entry for opponent, created on first meeting."""
        rec = self.head_to_head.get(opponent.id)
        if rec is None:
            rec = HeadToHeadRecord(
                opponent_id=opponent.id,
                opponent_name=opponent.name,
                opponent_nationality=opponent.nationality,
            )
            self.head_to_head[opponent.id] = rec
        return rec

    def snapshot(self) -> PlayerSnapshot:
        return PlayerSnapshot(
            id=self.id,
            name=self.name,
            nationality=self.nationality,
            rating=self.rating,
            division=self.division,
            age=self.age,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "nationality": self.nationality,
            "age": self.age,
            "rating": self.rating,
            "development_rate": self.development_rate,
            "peak_age": self.peak_age,
            "career_length": self.career_length,
            "seasons_played": self.seasons_played,
            "division": self.division,
            "is_retired": self.is_retired,
            "is_declined": self.is_declined,
            "games_played": self.games_played,
            "games_won": self.games_won,
            "games_lost": self.games_lost,
            "sets_won": self.sets_won,
            "sets_lost": self.sets_lost,
            "points_scored": self.points_scored,
            "points_conceded": self.points_conceded,
            "championships_won": self.championships_won,
            "podiums": self.podiums,
            "cups_won": self.cups_won,
            "cups_played": self.cups_played,
            "cup_podiums": self.cup_podiums,
            "career_high_rating": self.career_high_rating,
            "career_games_played": self.career_games_played,
            "career_games_won": self.career_games_won,
            "season_history": [r.to_dict() for r in self.season_history],
            "head_to_head": {k: v.to_dict() for k, v in self.head_to_head.items()},
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Player:
        return cls(
            id=d["id"],
            name=d["name"],
            nationality=d["nationality"],
            age=d["age"],
            rating=d["rating"],
            development_rate=d["development_rate"],
            peak_age=d["peak_age"],
            career_length=d["career_length"],
            seasons_played=d.get("seasons_played", 0),
            division=d["division"],
            is_retired=d.get("is_retired", False),
            is_declined=d.get("is_declined", False),
            games_played=d.get("games_played", 0),
            games_won=d.get("games_won", 0),
            games_lost=d.get("games_lost", 0),
            sets_won=d.get("sets_won", 0),
            sets_lost=d.get("sets_lost", 0),
            points_scored=d.get("points_scored", 0),
            points_conceded=d.get("points_conceded", 0),
            championships_won=d.get("championships_won", 0),
            podiums=d.get("podiums", 0),
            cups_won=d.get("cups_won", 0),
            cups_played=d.get("cups_played", 0),
            cup_podiums=d.get("cup_podiums", 0),
            career_high_rating=d.get("career_high_rating", d["rating"]),
            career_games_played=d.get("career_games_played", 0),
            career_games_won=d.get("career_games_won", 0),
            season_history=[SeasonRecord.from_dict(r) for r in d.get("season_history", [])],
            head_to_head={
                k: HeadToHeadRecord.from_dict(v) for k, v in d.get("head_to_head", {}).items()
            },
        )


# ---------- Player registry ----------
class PlayerRegistry:
    """
    Authoritative id -> Player store for active players.
    Insertion order is preserved so iteration is deterministic.
    """

    def __init__(self, players: Iterable[Player] = ()) -> None:
        self._players: dict[str, Player] = {}
        for p in players:
            self.add(p)

    def add(self, player: Player) -> None:
        if player.id in self._players:
            raise ValueError(f"Duplicate player id: {player.id}")
        self._players[player.id] = player

    def get(self, player_id: str) -> Player | None:
        return self._players.get(player_id)

    def require(self, player_id: str) -> Player:
        player = self._players.get(player_id)
        if player is None:
            raise PlayerResolutionError(f"Player not found in registry: {player_id}")
        return player

    def remove(self, player_id: str) -> Player:
        return self._players.pop(player_id)

    def find_by_identity(self, name: str, nationality: str) -> Player | None:
        for p in self._players.values():
            if p.name == name and p.nationality == nationality:
                return p
        return None

    def in_division(self, division: int) -> list[Player]:
        return [p for p in self._players.values() if p.division == division]

    def all(self) -> list[Player]:
        return list(self._players.values())

    def ids(self) -> list[str]:
        return list(self._players)

    def __len__(self) -> int:
        return len(self._players)

    def __iter__(self) -> Iterator[Player]:
        return iter(list(self._players.values()))

    def __contains__(self, player_id: object) -> bool:
        return player_id in self._players


# ---------- Set score ----------
@dataclass(frozen=True)
class SetScore:
    """Rally points in one set, from player1's and player2's side."""
    player1: int
    player2: int

    def to_dict(self) -> dict[str, Any]:
        return {"player1": self.player1, "player2": self.player2}

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> SetScore:
        return cls(player1=d["player1"], player2=d["player2"])


# ---------- Match ----------
@dataclass(frozen=True)
class Match:
    """
    A scheduled or completed match. Frozen: completing or renumbering returns
    a new instance, and a completed match cannot be completed again.
    """
    id: str
    player1: PlayerSnapshot
    player2: PlayerSnapshot
    division: int
    kind: MatchKind
    season: int
    round: int
    best_of: int | None = None
    completed: bool = False
    winner_id: str | None = None
    set_winners: tuple[str, ...] = ()
    set_scores: tuple[SetScore, ...] = ()

    @classmethod
    def scheduled(
        cls,
        player1: PlayerSnapshot,
        player2: PlayerSnapshot,
        division: int,
        kind: MatchKind,
        season: int,
        round: int,
    ) -> Match:
        return cls(
            id=new_id(),
            player1=player1,
            player2=player2,
            division=division,
            kind=kind,
            season=season,
            round=round,
        )

    @property
    def participant_ids(self) -> tuple[str, str]:
        return (self.player1.id, self.player2.id)

    @property
    def loser_id(self) -> str | None:
        if self.winner_id is None:
            return None
        return self.player2.id if self.winner_id == self.player1.id else self.player1.id

    def sets_won_by(self, player_id: str) -> int:
        return sum(1 for w in self.set_winners if w == player_id)

    def points_for(self, player_id: str) -> int:
        if player_id == self.player1.id:
            return sum(s.player1 for s in self.set_scores)
        if player_id == self.player2.id:
            return sum(s.player2 for s in self.set_scores)
        return 0

    def with_round(self, round: int) -> Match:
        if self.completed:
            raise ValueError(f"Match {self.id} is completed and cannot be renumbered")
        return replace(self, round=round)

    def completed_with(
        self,
        *,
        best_of: int,
        set_winners: Iterable[str],
        set_scores: Iterable[SetScore],
        player1: PlayerSnapshot | None = None,
        player2: PlayerSnapshot | None = None,
    ) -> Match:
        """Return the completed copy of this fixture. Validates the set sequence."""
        if self.completed:
            raise ValueError(f"Match {self.id} is already completed")
        winners = tuple(set_winners)
        scores = tuple(set_scores)
        if len(winners) != len(scores):
            raise ValueError("set_winners and set_scores must have the same length")
        needed = best_of // 2 + 1
        won_1 = sum(1 for w in winners if w == self.player1.id)
        won_2 = sum(1 for w in winners if w == self.player2.id)
        if won_1 + won_2 != len(winners):
            raise ValueError(f"Set winner outside match {self.id}")
        if max(won_1, won_2) != needed or min(won_1, won_2) >= needed:
            raise ValueError(f"Set tally {won_1}-{won_2} is not a finished best-of-{best_of}")
        winner_id = self.player1.id if won_1 > won_2 else self.player2.id
        return replace(
            self,
            player1=player1 or self.player1,
            player2=player2 or self.player2,
            best_of=best_of,
            completed=True,
            winner_id=winner_id,
            set_winners=winners,
            set_scores=scores,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "player1": self.player1.to_dict(),
            "player2": self.player2.to_dict(),
            "division": self.division,
            "kind": self.kind.value,
            "season": self.season,
            "round": self.round,
            "best_of": self.best_of,
            "completed": self.completed,
            "winner_id": self.winner_id,
            "set_winners": list(self.set_winners),
            "set_scores": [s.to_dict() for s in self.set_scores],
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Match:
        return cls(
            id=d["id"],
            player1=PlayerSnapshot.from_dict(d["player1"]),
            player2=PlayerSnapshot.from_dict(d["player2"]),
            division=d["division"],
            kind=MatchKind(d["kind"]),
            season=d["season"],
            round=d["round"],
            best_of=d.get("best_of"),
            completed=d.get("completed", False),
            winner_id=d.get("winner_id"),
            set_winners=tuple(d.get("set_winners", [])),
            set_scores=tuple(SetScore.from_dict(s) for s in d.get("set_scores", [])),
        )


# ---------- Season ----------
@dataclass
class Season:
    """
    One season: the ordered play list plus progress counters.
    current_match_index only increases; cup matches always follow the league.
    """
    number: int
    matches: list[Match] = field(default_factory=list)
    current_match_index: int = 0
    current_round: int = 1
    max_round: int = 0
    cup_participants: list[PlayerSnapshot] = field(default_factory=list)
    league_points: dict[str, int] = field(default_factory=dict)
    league_phase_complete: bool = False
    completed: bool = False

    def next_match(self) -> Match | None:
        if self.current_match_index >= len(self.matches):
            return None
        return self.matches[self.current_match_index]

    def league_matches(self, division: int | None = None) -> list[Match]:
        return [
            m for m in self.matches
            if m.kind is MatchKind.LEAGUE and (division is None or m.division == division)
        ]

    def cup_matches(self) -> list[Match]:
        return [m for m in self.matches if m.kind.is_cup]

    def matches_of_kind(self, kind: MatchKind) -> list[Match]:
        return [m for m in self.matches if m.kind is kind]

    @property
    def remaining(self) -> int:
        return len(self.matches) - self.current_match_index

    @property
    def is_fully_played(self) -> bool:
        return bool(self.matches) and all(m.completed for m in self.matches)

    def refresh_league_phase(self) -> bool:
        league = self.league_matches()
        self.league_phase_complete = bool(league) and all(m.completed for m in league)
        return self.league_phase_complete

    def to_dict(self) -> dict[str, Any]:
        return {
            "number": self.number,
            "matches": [m.to_dict() for m in self.matches],
            "current_match_index": self.current_match_index,
            "current_round": self.current_round,
            "max_round": self.max_round,
            "cup_participants": [p.to_dict() for p in self.cup_participants],
            "league_points": dict(self.league_points),
            "league_phase_complete": self.league_phase_complete,
            "completed": self.completed,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Season:
        return cls(
            number=d["number"],
            matches=[Match.from_dict(m) for m in d.get("matches", [])],
            current_match_index=d.get("current_match_index", 0),
            current_round=d.get("current_round", 1),
            max_round=d.get("max_round", 0),
            cup_participants=[PlayerSnapshot.from_dict(p) for p in d.get("cup_participants", [])],
            league_points=dict(d.get("league_points", {})),
            league_phase_complete=d.get("league_phase_complete", False),
            completed=d.get("completed", False),
        )


# ---------- Standings row ----------
@dataclass(frozen=True)
class StandingsRow:
    """A player's league-table line for one season. Carries its own identity copy."""
    player_id: str
    name: str
    nationality: str
    rating: float
    division: int
    league_points: int = 0
    played: int = 0
    won: int = 0
    lost: int = 0
    sets_won: int = 0
    sets_lost: int = 0
    points_scored: int = 0
    points_conceded: int = 0

    @property
    def set_difference(self) -> int:
        return self.sets_won - self.sets_lost

    def to_dict(self) -> dict[str, Any]:
        return {
            "player_id": self.player_id,
            "name": self.name,
            "nationality": self.nationality,
            "rating": self.rating,
            "division": self.division,
            "league_points": self.league_points,
            "played": self.played,
            "won": self.won,
            "lost": self.lost,
            "sets_won": self.sets_won,
            "sets_lost": self.sets_lost,
            "points_scored": self.points_scored,
            "points_conceded": self.points_conceded,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> StandingsRow:
        return cls(**{k: d[k] for k in cls.__dataclass_fields__ if k in d})


# ---------- Cup summary ----------
@dataclass(frozen=True)
class CupSummary:
    winner: PlayerSnapshot | None = None
    runner_up: PlayerSnapshot | None = None
    third: PlayerSnapshot | None = None
    fourth: PlayerSnapshot | None = None

    def result_for(self, player_id: str) -> CupResult:
        if self.winner is not None and self.winner.id == player_id:
            return CupResult.CHAMPION
        if self.runner_up is not None and self.runner_up.id == player_id:
            return CupResult.RUNNER_UP
        if self.third is not None and self.third.id == player_id:
            return CupResult.THIRD_PLACE
        if self.fourth is not None and self.fourth.id == player_id:
            return CupResult.SEMIFINALIST
        return CupResult.DID_NOT_QUALIFY

    def to_dict(self) -> dict[str, Any]:
        return {
            slot: (getattr(self, slot).to_dict() if getattr(self, slot) is not None else None)
            for slot in ("winner", "runner_up", "third", "fourth")
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> CupSummary:
        return cls(**{
            slot: (PlayerSnapshot.from_dict(d[slot]) if d.get(slot) else None)
            for slot in ("winner", "runner_up", "third", "fourth")
        })


# ---------- Season archive ----------
@dataclass(frozen=True)
class SeasonArchive:
    """
    Immutable end-of-season snapshot. Later seasons read promotion, relegation
    and cup eligibility from here rather than from the live registry.
    """
    season: int
    standings: dict[int, tuple[StandingsRow, ...]]
    cup: CupSummary
    retired: tuple[PlayerSnapshot, ...] = ()
    replacements: tuple[PlayerSnapshot, ...] = ()

    def division_order(self, division: int) -> tuple[StandingsRow, ...]:
        return self.standings.get(division, ())

    def overall_position(self, player_id: str) -> int | None:
        offset = 0
        for division in sorted(self.standings):
            for i, row in enumerate(self.standings[division]):
                if row.player_id == player_id:
                    return offset + i + 1
            offset += len(self.standings[division])
        return None

    def row_for(self, player_id: str) -> StandingsRow | None:
        for rows in self.standings.values():
            for row in rows:
                if row.player_id == player_id:
                    return row
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "season": self.season,
            "standings": {str(div): [r.to_dict() for r in rows] for div, rows in self.standings.items()},
            "cup": self.cup.to_dict(),
            "retired": [p.to_dict() for p in self.retired],
            "replacements": [p.to_dict() for p in self.replacements],
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> SeasonArchive:
        return cls(
            season=d["season"],
            standings={
                int(div): tuple(StandingsRow.from_dict(r) for r in rows)
                for div, rows in d.get("standings", {}).items()
            },
            cup=CupSummary.from_dict(d.get("cup", {})),
            retired=tuple(PlayerSnapshot.from_dict(p) for p in d.get("retired", [])),
            replacements=tuple(PlayerSnapshot.from_dict(p) for p in d.get("replacements", [])),
        )


# ---------- Retirement notice ----------
@dataclass(frozen=True)
class RetirementNotice:
    """Retiree -> replacement pairs surfaced between seasons until acknowledged."""
    season: int
    retired: tuple[PlayerSnapshot, ...]
    replacements: tuple[PlayerSnapshot, ...]

    def pairs(self) -> list[tuple[PlayerSnapshot, PlayerSnapshot | None]]:
        out: list[tuple[PlayerSnapshot, PlayerSnapshot | None]] = []
        for i, retiree in enumerate(self.retired):
            out.append((retiree, self.replacements[i] if i < len(self.replacements) else None))
        return out

    def to_dict(self) -> dict[str, Any]:
        return {
            "season": self.season,
            "retired": [p.to_dict() for p in self.retired],
            "replacements": [p.to_dict() for p in self.replacements],
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> RetirementNotice:
        return cls(
            season=d["season"],
            retired=tuple(PlayerSnapshot.from_dict(p) for p in d.get("retired", [])),
            replacements=tuple(PlayerSnapshot.from_dict(p) for p in d.get("replacements", [])),
        )


# ---------- League snapshot (persistence value) ----------
@dataclass
class LeagueSnapshot:
    """
    Everything needed to resume a league. Built from value copies.
    rng_state is the engine's generator state (version 2 on); version 1
    payloads without it resume from the seed instead.
    """
    players: list[Player]
    current_season: Season | None
    season_history: list[Season] = field(default_factory=list)
    archive: list[SeasonArchive] = field(default_factory=list)
    retired_players: list[Player] = field(default_factory=list)
    pending_retirements: RetirementNotice | None = None
    phase: SeasonPhase = SeasonPhase.LEAGUE
    rng_state: list[Any] | None = None

    SAVE_VERSION: ClassVar[int] = 2

    def to_dict(self) -> dict[str, Any]:
        return {
            "save_version": self.SAVE_VERSION,
            "players": [p.to_dict() for p in self.players],
            "current_season": self.current_season.to_dict() if self.current_season else None,
            "season_history": [s.to_dict() for s in self.season_history],
            "archive": [a.to_dict() for a in self.archive],
            "retired_players": [p.to_dict() for p in self.retired_players],
            "pending_retirements": (
                self.pending_retirements.to_dict() if self.pending_retirements else None
            ),
            "phase": self.phase.value,
            "rng_state": self.rng_state,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> LeagueSnapshot:
        version = d.get("save_version", 1)
        if not isinstance(version, int) or version > cls.SAVE_VERSION:
            raise ValueError(f"Unsupported league snapshot version: {version}")
        season = d.get("current_season")
        pending = d.get("pending_retirements")
        rng_state = d.get("rng_state")
        if rng_state is not None and (not isinstance(rng_state, list) or len(rng_state) != 3):
            raise ValueError("rng_state must be a [version, internal_state, gauss_next] list")
        return cls(
            players=[Player.from_dict(p) for p in d.get("players", [])],
            current_season=Season.from_dict(season) if season else None,
            season_history=[Season.from_dict(s) for s in d.get("season_history", [])],
            archive=[SeasonArchive.from_dict(a) for a in d.get("archive", [])],
            retired_players=[Player.from_dict(p) for p in d.get("retired_players", [])],
            pending_retirements=RetirementNotice.from_dict(pending) if pending else None,
            phase=SeasonPhase(d.get("phase", SeasonPhase.LEAGUE.value)),
            rng_state=rng_state,
        )
