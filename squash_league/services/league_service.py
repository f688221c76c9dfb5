"""
League engine: owns the player registry, the current season and the archive,
and drives the season state machine.

scheduling -> league -> cup -> closing -> (transitioning ->) scheduling

Every command resolves players through the registry by id. Matches, cup
brackets and archives only ever hold snapshots.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import replace
from typing import Iterator

from squash_league.config import (
    CUP_SIZE,
    DIVISIONS,
    LEAGUE_SIZE,
    PLAYERS_PER_DIVISION,
    CareerConfig,
    RosterConfig,
    SimulationConfig,
)
from squash_league.models import (
    CupSummary,
    LeagueSnapshot,
    Match,
    MatchKind,
    Player,
    PlayerRegistry,
    PlayerResolutionError,
    PlayerSnapshot,
    RetirementNotice,
    Season,
    SeasonArchive,
    SeasonPhase,
    StandingsRow,
)
from squash_league.persistence.repositories import SnapshotLoadError, SnapshotSaveError, SnapshotStore
from squash_league.services.career import (
    apply_promotion_relegation,
    close_season_for_player,
    replace_retirees,
    resolve_archived,
    retire,
)
from squash_league.services.roster import RosterGenerator, assign_divisions_by_rating
from squash_league.services.scheduling import (
    generate_cup_bracket,
    generate_cup_finals,
    generate_league_schedule,
    interleave,
)
from squash_league.services.standings import rank_division
from squash_league.simulation import MatchSimulator, SeededRNG

logger = logging.getLogger(__name__)

# ---------- Exceptions ----------


class LeagueTransitionError(ValueError):
    """Command issued in a phase that does not allow it."""


class SeasonSequenceError(ValueError):
    """Matches must be played in order; nothing left to play, or matches still pending."""


class RosterIntegrityError(RuntimeError):
    """Roster shape broken: wrong league size, unbalanced divisions, no fixtures."""


# ---------- Valid transitions ----------

_VALID_TRANSITIONS: dict[SeasonPhase, set[SeasonPhase]] = {
    SeasonPhase.SCHEDULING: {SeasonPhase.LEAGUE},
    SeasonPhase.LEAGUE: {SeasonPhase.CUP},
    SeasonPhase.CUP: {SeasonPhase.CLOSING},
    SeasonPhase.CLOSING: {SeasonPhase.TRANSITIONING, SeasonPhase.SCHEDULING},
    SeasonPhase.TRANSITIONING: {SeasonPhase.SCHEDULING},
}


def _rating_order(p: Player) -> tuple[float, str]:
    return (-p.rating, p.id)


# ---------- LeagueEngine ----------


class LeagueEngine:
    """
    Two-division league with an end-of-season cup.
    Persistence is delegated to an optional SnapshotStore; every command
    saves on success. Save failures are logged and kept in last_save_error.
    """

    def __init__(
        self,
        seed: int | None = None,
        store: SnapshotStore | None = None,
        sim_config: SimulationConfig | None = None,
        career_config: CareerConfig | None = None,
        roster_config: RosterConfig | None = None,
    ) -> None:
        self._store = store
        self._sim_config = sim_config or SimulationConfig()
        self._career_config = career_config or CareerConfig()
        self._roster_config = roster_config or RosterConfig()
        self._seed_components(seed)
        self._registry = PlayerRegistry()
        self._current_season: Season | None = None
        self._season_history: list[Season] = []
        self._archive: list[SeasonArchive] = []
        self._retired: list[Player] = []
        self._pending: RetirementNotice | None = None
        self._phase = SeasonPhase.SCHEDULING
        self.last_save_error: str | None = None

    def _seed_components(self, seed: int | None) -> None:
        self.rng = SeededRNG(seed)
        self._simulator = MatchSimulator(self.rng, self._sim_config)
        self._roster = RosterGenerator(self.rng, self._roster_config)

    # ---------- Construction ----------

    @classmethod
    def new_league(cls, seed: int | None = None, store: SnapshotStore | None = None, **kwargs) -> LeagueEngine:
        engine = cls(seed=seed, store=store, **kwargs)
        engine.reset_league(seed)
        return engine

    @classmethod
    def load_or_create(cls, store: SnapshotStore, seed: int | None = None, **kwargs) -> LeagueEngine:
        """Resume from the store; on absence or load failure start a fresh league."""
        engine = cls(seed=seed, store=store, **kwargs)
        try:
            snapshot = store.load_snapshot()
        except SnapshotLoadError as exc:
            logger.warning("SNAPSHOT_LOAD_FAILED error=%s; starting new league", exc)
            snapshot = None
        if snapshot is None:
            engine.reset_league(seed)
        else:
            engine.restore(snapshot)
            logger.info(
                "LEAGUE_RESUMED season=%s phase=%s",
                engine.current_season.number if engine.current_season else None,
                engine.phase.value,
            )
        return engine

    def restore(self, snapshot: LeagueSnapshot) -> None:
        registry = PlayerRegistry(snapshot.players)
        if len(registry) != LEAGUE_SIZE:
            raise RosterIntegrityError(f"Snapshot has {len(registry)} active players, expected {LEAGUE_SIZE}")
        self._registry = registry
        self._current_season = snapshot.current_season
        self._season_history = list(snapshot.season_history)
        self._archive = list(snapshot.archive)
        self._retired = list(snapshot.retired_players)
        self._pending = snapshot.pending_retirements
        self._phase = snapshot.phase
        self._roster.names.reserve(p.name for p in registry)
        self._roster.names.reserve(p.name for p in self._retired)
        self._roster.reserve_ids(p.id for p in registry)
        self._roster.reserve_ids(p.id for p in self._retired)
        if snapshot.rng_state is not None:
            self.rng.setstate(snapshot.rng_state)
        else:
            logger.info("SNAPSHOT_NO_RNG_STATE continuing from seed=%s", self.rng.seed)

    # ---------- Read-only accessors ----------

    @property
    def players(self) -> list[Player]:
        return self._registry.all()

    @property
    def current_season(self) -> Season | None:
        return self._current_season

    @property
    def season_history(self) -> list[Season]:
        return list(self._season_history)

    @property
    def archive(self) -> list[SeasonArchive]:
        return list(self._archive)

    @property
    def retired_players(self) -> list[Player]:
        return list(self._retired)

    @property
    def pending_retirements(self) -> RetirementNotice | None:
        return self._pending

    @property
    def phase(self) -> SeasonPhase:
        return self._phase

    def find_player(self, player_id: str) -> Player:
        """Active or retired player by id."""
        player = self._registry.get(player_id)
        if player is not None:
            return player
        for p in self._retired:
            if p.id == player_id:
                return p
        raise PlayerResolutionError(f"Unknown player: {player_id}")

    def standings(self) -> dict[int, list[StandingsRow]]:
        """Live ranked tables for the current season."""
        season = self._require_season()
        if season.completed and self._archive and self._archive[-1].season == season.number:
            last = self._archive[-1]
            return {div: list(last.division_order(div)) for div in DIVISIONS}
        return {div: rank_division(self._registry.all(), season, div) for div in DIVISIONS}

    def snapshot(self) -> LeagueSnapshot:
        """Serializable value copy of the whole league."""
        return LeagueSnapshot.from_dict(self._build_snapshot().to_dict())

    # ---------- Guards ----------

    def _transition(self, new_phase: SeasonPhase) -> None:
        allowed = _VALID_TRANSITIONS.get(self._phase, set())
        if new_phase not in allowed:
            raise LeagueTransitionError(
                f"Invalid transition: {self._phase.value} -> {new_phase.value}. "
                f"Allowed from {self._phase.value}: {sorted(p.value for p in allowed)}"
            )
        logger.debug("PHASE_TRANSITION from=%s to=%s", self._phase.value, new_phase.value)
        self._phase = new_phase

    def _require_season(self) -> Season:
        if self._current_season is None:
            raise LeagueTransitionError("No season scheduled; reset the league first")
        return self._current_season

    def _assert_phase(self, *phases: SeasonPhase, action: str) -> None:
        if self._phase not in phases:
            raise LeagueTransitionError(
                f"Cannot {action}: phase is {self._phase.value}, needs {' or '.join(p.value for p in phases)}"
            )

    def _assert_roster(self) -> None:
        if len(self._registry) != LEAGUE_SIZE:
            raise RosterIntegrityError(f"League has {len(self._registry)} active players, expected {LEAGUE_SIZE}")
        for div in DIVISIONS:
            size = len(self._registry.in_division(div))
            if size != PLAYERS_PER_DIVISION:
                raise RosterIntegrityError(f"Division {div} has {size} players, expected {PLAYERS_PER_DIVISION}")

    # ---------- Scheduling ----------

    def _cup_entrants(self, season_number: int) -> list[Player]:
        """
        Previous archive's division-1 top four, resolved to active players.
        Missing entrants (retired, first season) are backfilled from division 1
        by rating, then from anyone active.
        """
        chosen: list[Player] = []
        seen: set[str] = set()

        def take(p: Player | None) -> None:
            if p is not None and p.id not in seen and len(chosen) < CUP_SIZE:
                chosen.append(p)
                seen.add(p.id)

        if self._archive:
            for row in self._archive[-1].division_order(DIVISIONS[0])[:CUP_SIZE]:
                take(resolve_archived(self._registry, row.player_id, row.name, row.nationality))
        from_archive = len(chosen)
        for p in sorted(self._registry.in_division(DIVISIONS[0]), key=_rating_order):
            take(p)
        for p in sorted(self._registry.all(), key=_rating_order):
            take(p)
        if self._archive and from_archive < CUP_SIZE:
            logger.warning(
                "CUP_ENTRANTS_BACKFILLED season=%s from_archive=%s", season_number, from_archive
            )
        return chosen

    def _schedule_season(self, number: int) -> Season:
        if number == 1:
            assign_divisions_by_rating(self._registry.all())
        self._assert_roster()
        for p in self._registry:
            p.reset_season_counters()

        league: dict[int, list[Match]] = {}
        for div in DIVISIONS:
            fixtures = generate_league_schedule(self._registry.in_division(div), div, number)
            if not fixtures:
                raise RosterIntegrityError(f"No league fixtures generated for division {div}, season {number}")
            league[div] = fixtures
        entrants = self._cup_entrants(number)
        cup = generate_cup_bracket(entrants, number)
        matches = interleave(league[DIVISIONS[0]], league[DIVISIONS[1]], cup)

        season = Season(
            number=number,
            matches=matches,
            current_round=matches[0].round,
            max_round=max(m.round for m in matches),
            cup_participants=[p.snapshot() for p in entrants],
            league_points={p.id: 0 for p in self._registry},
        )
        self._current_season = season
        self._transition(SeasonPhase.LEAGUE)
        logger.info(
            "SEASON_SCHEDULED season=%s matches=%s cup=%s",
            number, len(matches), ",".join(p.id for p in entrants),
        )
        return season

    # ---------- Match play ----------

    def _play_next(self) -> Match:
        season = self._require_season()
        self._assert_phase(SeasonPhase.LEAGUE, SeasonPhase.CUP, SeasonPhase.CLOSING, action="simulate a match")
        fixture = season.next_match()
        if fixture is None:
            raise SeasonSequenceError(f"Season {season.number} has no matches left to play")
        player1 = self._registry.require(fixture.player1.id)
        player2 = self._registry.require(fixture.player2.id)

        played = self._simulator.play_fixture(fixture, player1, player2)
        season.matches[season.current_match_index] = played
        season.current_match_index += 1
        if played.kind is MatchKind.LEAGUE:
            season.league_points[played.winner_id] = season.league_points.get(played.winner_id, 0) + 1
        if played.kind is MatchKind.CUP_SEMIFINAL:
            self._maybe_schedule_cup_finals(season)

        upcoming = season.next_match()
        season.current_round = upcoming.round if upcoming is not None else played.round
        season.max_round = max(m.round for m in season.matches)
        self._refresh_phase(season)
        logger.debug(
            "MATCH_PLAYED season=%s round=%s kind=%s winner=%s",
            season.number, played.round, played.kind.value, played.winner_id,
        )
        return played

    def _maybe_schedule_cup_finals(self, season: Season) -> None:
        semis = season.matches_of_kind(MatchKind.CUP_SEMIFINAL)
        if len(semis) != 2 or not all(m.completed for m in semis):
            return
        if season.matches_of_kind(MatchKind.CUP_FINAL) or season.matches_of_kind(MatchKind.CUP_THIRD_PLACE):
            return
        winners = [self._registry.require(m.winner_id) for m in semis]
        losers = [self._registry.require(m.loser_id) for m in semis]
        finals = generate_cup_finals(winners, losers, season.number, semifinal_round=max(m.round for m in semis))
        season.matches.extend(finals)
        logger.info("CUP_FINALS_SCHEDULED season=%s", season.number)

    def _refresh_phase(self, season: Season) -> None:
        season.refresh_league_phase()
        if season.league_phase_complete and self._phase is SeasonPhase.LEAGUE:
            self._transition(SeasonPhase.CUP)
        if season.is_fully_played and self._phase is SeasonPhase.CUP:
            self._transition(SeasonPhase.CLOSING)

    def simulate_next_match(self) -> Match:
        """Play the next scheduled match and return it completed."""
        played = self._play_next()
        self._save()
        return played

    def simulate_remaining(self) -> list[Match]:
        """Play every remaining match of the current season."""
        self._require_season()
        self._assert_phase(SeasonPhase.LEAGUE, SeasonPhase.CUP, SeasonPhase.CLOSING, action="simulate the season")
        played = []
        while self._phase is not SeasonPhase.CLOSING:
            played.append(self._play_next())
        self._save()
        return played

    # ---------- Season close ----------

    def _cup_summary(self, season: Season) -> CupSummary:
        def sides(kind: MatchKind) -> tuple[PlayerSnapshot | None, PlayerSnapshot | None]:
            matches = season.matches_of_kind(kind)
            if not matches or not matches[0].completed:
                return None, None
            m = matches[0]
            winner = m.player1 if m.winner_id == m.player1.id else m.player2
            loser = m.player2 if winner is m.player1 else m.player1
            return winner, loser

        champion, runner_up = sides(MatchKind.CUP_FINAL)
        third, fourth = sides(MatchKind.CUP_THIRD_PLACE)
        return CupSummary(winner=champion, runner_up=runner_up, third=third, fourth=fourth)

    @contextmanager
    def _rollback_on_error(self, action: str) -> Iterator[None]:
        """Put the league back to its pre-command state if the command fails partway."""
        checkpoint = self._build_snapshot().to_dict()
        try:
            yield
        except Exception:
            logger.error("COMMAND_ROLLED_BACK action=%s phase=%s", action, checkpoint["phase"])
            self._seed_components(self.rng.seed)
            self.restore(LeagueSnapshot.from_dict(checkpoint))
            raise

    def end_season(self) -> SeasonArchive:
        """
        Archive the finished season, progress careers, replace retirees and
        apply promotion/relegation. Schedules the next season unless
        retirements need acknowledging first. A failure at any step leaves
        the league as it was before the call.
        """
        season = self._require_season()
        if self._phase in (SeasonPhase.LEAGUE, SeasonPhase.CUP):
            raise SeasonSequenceError(
                f"Season {season.number} still has {season.remaining} matches to play"
            )
        self._assert_phase(SeasonPhase.CLOSING, action="end the season")
        if not season.is_fully_played:
            raise SeasonSequenceError(f"Season {season.number} has incomplete matches")

        with self._rollback_on_error("end_season"):
            archive = self._close_season(season)
        self._save()
        return archive

    def _close_season(self, season: Season) -> SeasonArchive:
        standings = {
            div: tuple(rank_division(self._registry.all(), season, div)) for div in DIVISIONS
        }
        for div, rows in standings.items():
            if len(rows) != PLAYERS_PER_DIVISION:
                raise RosterIntegrityError(f"Division {div} closed with {len(rows)} ranked players")
        archive = SeasonArchive(season=season.number, standings=standings, cup=self._cup_summary(season))

        for p in self._registry:
            close_season_for_player(p, archive, self.rng, self._career_config)
        retirees = retire(self._registry, self._registry.all())
        self._retired.extend(retirees)
        replacements = replace_retirees(
            self._registry, len(retirees), self._roster.generate_replacements(len(retirees))
        )
        apply_promotion_relegation(self._registry, archive)
        self._assert_roster()

        archive = replace(
            archive,
            retired=tuple(p.snapshot() for p in retirees),
            replacements=tuple(p.snapshot() for p in replacements),
        )
        self._archive.append(archive)
        season.completed = True
        self._season_history.append(season)
        logger.info(
            "SEASON_CLOSED season=%s champion=%s cup_winner=%s retired=%s",
            season.number,
            standings[DIVISIONS[0]][0].player_id,
            archive.cup.winner.id if archive.cup.winner else None,
            len(retirees),
        )

        if retirees:
            self._pending = RetirementNotice(
                season=season.number, retired=archive.retired, replacements=archive.replacements
            )
            self._transition(SeasonPhase.TRANSITIONING)
        else:
            self._transition(SeasonPhase.SCHEDULING)
            self._schedule_season(season.number + 1)
        return archive

    def acknowledge_retirements(self) -> Season:
        """Clear the retirement notice and schedule the next season."""
        self._assert_phase(SeasonPhase.TRANSITIONING, action="acknowledge retirements")
        season = self._require_season()
        with self._rollback_on_error("acknowledge_retirements"):
            self._pending = None
            self._transition(SeasonPhase.SCHEDULING)
            next_season = self._schedule_season(season.number + 1)
        self._save()
        return next_season

    def reset_league(self, seed: int | None = None) -> Season:
        """Discard everything and start season 1 with ten new players."""
        self._seed_components(seed)
        self._registry = PlayerRegistry(self._roster.generate_initial_players())
        self._season_history = []
        self._archive = []
        self._retired = []
        self._pending = None
        self._phase = SeasonPhase.SCHEDULING
        season = self._schedule_season(1)
        logger.info("LEAGUE_RESET seed=%s", seed)
        self._save()
        return season

    # ---------- Persistence ----------

    def _build_snapshot(self) -> LeagueSnapshot:
        return LeagueSnapshot(
            players=self._registry.all(),
            current_season=self._current_season,
            season_history=self._season_history,
            archive=self._archive,
            retired_players=self._retired,
            pending_retirements=self._pending,
            phase=self._phase,
            rng_state=self.rng.getstate(),
        )

    def _save(self) -> None:
        if self._store is None:
            return
        try:
            self._store.save_snapshot(self._build_snapshot())
        except SnapshotSaveError as exc:
            logger.error("SNAPSHOT_SAVE_FAILED error=%s", exc)
            self.last_save_error = str(exc)
        else:
            self.last_save_error = None
