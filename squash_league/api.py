"""
REST API for the squash league engine.
Thin wrappers around LeagueEngine; one engine per process, guarded by a lock.

Run: uvicorn squash_league.api:app --reload
"""
from __future__ import annotations

import threading
from contextlib import asynccontextmanager, contextmanager
from typing import Any, AsyncGenerator, Generator

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from squash_league.config import DIVISIONS, Settings, configure_logging
from squash_league.models import PlayerResolutionError
from squash_league.persistence import SqliteSnapshotStore
from squash_league.services.league_service import (
    LeagueEngine,
    LeagueTransitionError,
    RosterIntegrityError,
    SeasonSequenceError,
)
from squash_league.services.scheduling import ScheduleError
from squash_league.simulation import MatchPreconditionError

_engine: LeagueEngine | None = None
_engine_lock = threading.Lock()


def set_engine(engine: LeagueEngine | None) -> None:
    """Install the engine the endpoints use. Tests inject one backed by tmp_path."""
    global _engine
    _engine = engine


def get_engine() -> LeagueEngine:
    global _engine
    if _engine is None:
        settings = Settings.from_env()
        _engine = LeagueEngine.load_or_create(SqliteSnapshotStore(settings.db_path), seed=settings.seed)
    return _engine


@contextmanager
def locked_engine() -> Generator[LeagueEngine, None, None]:
    """Yield the engine under the lock, mapping engine errors to HTTP errors."""
    with _engine_lock:
        engine = get_engine()
        try:
            yield engine
        except (LeagueTransitionError, SeasonSequenceError) as e:
            raise HTTPException(status_code=409, detail=str(e))
        except (RosterIntegrityError, ScheduleError, MatchPreconditionError, PlayerResolutionError) as e:
            raise HTTPException(status_code=500, detail=str(e))


# ---------- Lifespan ----------
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    configure_logging(Settings.from_env().log_level)
    yield


# ---------- FastAPI app ----------
app = FastAPI(
    title="Squash League API",
    description="Two-division squash league simulation with an end-of-season cup",
    version="0.1.0",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------- Request models ----------


class SimulateNextRequest(BaseModel):
    count: int = Field(default=1, ge=1, le=100, description="Matches to play, stopping early at season end")


class ResetLeagueRequest(BaseModel):
    seed: int | None = Field(default=None, description="RNG seed for a reproducible league")


# ---------- Serialization helpers ----------


def _season_summary(engine: LeagueEngine) -> dict[str, Any]:
    season = engine.current_season
    body: dict[str, Any] = {
        "phase": engine.phase.value,
        "last_save_error": engine.last_save_error,
        "season": season.to_dict() if season else None,
    }
    if season is not None:
        nxt = season.next_match()
        body["next_match"] = nxt.to_dict() if nxt else None
        body["remaining"] = season.remaining
    return body


def _standings_body(engine: LeagueEngine) -> dict[str, Any]:
    tables = engine.standings()
    return {
        "season": engine.current_season.number if engine.current_season else None,
        "divisions": {str(div): [r.to_dict() for r in tables[div]] for div in DIVISIONS},
    }


# ---------- Read endpoints ----------


@app.get("/players")
def get_players(division: int | None = Query(None, ge=1, le=2)) -> dict[str, Any]:
    with locked_engine() as engine:
        players = engine.players
        if division is not None:
            players = [p for p in players if p.division == division]
        players = sorted(players, key=lambda p: (p.division, -p.rating, p.id))
        return {"players": [p.to_dict() for p in players]}


@app.get("/players/{player_id}")
def get_player(player_id: str) -> dict[str, Any]:
    with locked_engine() as engine:
        try:
            player = engine.find_player(player_id)
        except PlayerResolutionError:
            raise HTTPException(status_code=404, detail="Player not found")
        return player.to_dict()


@app.get("/season")
def get_season() -> dict[str, Any]:
    with locked_engine() as engine:
        return _season_summary(engine)


@app.get("/standings")
def get_standings() -> dict[str, Any]:
    with locked_engine() as engine:
        return _standings_body(engine)


@app.get("/archive")
def get_archive() -> dict[str, Any]:
    with locked_engine() as engine:
        return {"archive": [a.to_dict() for a in engine.archive]}


@app.get("/retired")
def get_retired() -> dict[str, Any]:
    with locked_engine() as engine:
        pending = engine.pending_retirements
        return {
            "retired": [p.to_dict() for p in engine.retired_players],
            "pending": pending.to_dict() if pending else None,
        }


# ---------- Commands ----------


@app.post("/season/simulate-next")
def simulate_next(req: SimulateNextRequest | None = None) -> dict[str, Any]:
    count = req.count if req is not None else 1
    with locked_engine() as engine:
        played = [engine.simulate_next_match()]
        while len(played) < count and engine.current_season.next_match() is not None:
            played.append(engine.simulate_next_match())
        return {"played": [m.to_dict() for m in played], **_season_summary(engine)}


@app.post("/season/simulate-remaining")
def simulate_remaining() -> dict[str, Any]:
    with locked_engine() as engine:
        played = engine.simulate_remaining()
        return {"played": len(played), **_season_summary(engine)}


@app.post("/season/end")
def end_season() -> dict[str, Any]:
    with locked_engine() as engine:
        archive = engine.end_season()
        pending = engine.pending_retirements
        return {
            "archive": archive.to_dict(),
            "pending_retirements": pending.to_dict() if pending else None,
            **_season_summary(engine),
        }


@app.post("/retirements/acknowledge")
def acknowledge_retirements() -> dict[str, Any]:
    with locked_engine() as engine:
        engine.acknowledge_retirements()
        return _season_summary(engine)


@app.post("/league/reset")
def reset_league(req: ResetLeagueRequest | None = None) -> dict[str, Any]:
    with locked_engine() as engine:
        engine.reset_league(req.seed if req is not None else None)
        return _season_summary(engine)
