"""
API integration tests.
Uses TestClient to avoid starting a server.
Requires: pip install httpx (for TestClient)
"""
from __future__ import annotations

from pathlib import Path

import pytest

try:
    from fastapi.testclient import TestClient
    HAS_HTTPX = True
except (ImportError, RuntimeError):
    HAS_HTTPX = False

# Ensure project root on path
import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

pytestmark = pytest.mark.skipif(not HAS_HTTPX, reason="httpx required for TestClient")

from squash_league.api import app, set_engine
from squash_league.persistence import SqliteSnapshotStore
from squash_league.services.league_service import LeagueEngine


@pytest.fixture(autouse=True)
def engine(tmp_path):
    """Fresh seeded engine backed by a temporary DB for each test."""
    eng = LeagueEngine.new_league(seed=77, store=SqliteSnapshotStore(tmp_path / "test.db"))
    set_engine(eng)
    yield eng
    set_engine(None)


@pytest.fixture
def client():
    return TestClient(app)


def test_get_players(client):
    """GET /players returns all ten players sorted by division."""
    resp = client.get("/players")
    assert resp.status_code == 200
    players = resp.json()["players"]
    assert len(players) == 10
    assert [p["division"] for p in players] == [1] * 5 + [2] * 5
    p = players[0]
    for key in ("id", "name", "nationality", "age", "rating", "seasons_played", "season_history"):
        assert key in p


def test_get_players_filter_division(client):
    """GET /players?division=2 filters correctly."""
    resp = client.get("/players?division=2")
    assert resp.status_code == 200
    assert {p["division"] for p in resp.json()["players"]} == {2}
    assert client.get("/players?division=3").status_code == 422


def test_get_player(client, engine):
    pid = engine.players[0].id
    resp = client.get(f"/players/{pid}")
    assert resp.status_code == 200
    assert resp.json()["id"] == pid


def test_get_player_not_found(client):
    assert client.get("/players/nope").status_code == 404


def test_get_season(client):
    resp = client.get("/season")
    assert resp.status_code == 200
    data = resp.json()
    assert data["phase"] == "league"
    assert data["season"]["number"] == 1
    assert data["remaining"] == 42
    assert data["next_match"]["kind"] == "league"
    assert data["last_save_error"] is None


def test_simulate_next(client):
    resp = client.post("/season/simulate-next")
    assert resp.status_code == 200
    data = resp.json()
    assert len(data["played"]) == 1
    assert data["played"][0]["completed"] is True
    assert data["remaining"] == 41


def test_simulate_next_count(client):
    resp = client.post("/season/simulate-next", json={"count": 5})
    assert resp.status_code == 200
    assert len(resp.json()["played"]) == 5
    assert client.post("/season/simulate-next", json={"count": 0}).status_code == 422


def test_standings_after_matches(client):
    client.post("/season/simulate-next", json={"count": 10})
    resp = client.get("/standings")
    assert resp.status_code == 200
    data = resp.json()
    assert data["season"] == 1
    assert [len(data["divisions"][d]) for d in ("1", "2")] == [5, 5]
    total = sum(r["league_points"] for d in ("1", "2") for r in data["divisions"][d])
    assert total == 10


def test_end_season_too_early_conflicts(client):
    resp = client.post("/season/end")
    assert resp.status_code == 409


def test_acknowledge_without_retirements_conflicts(client):
    assert client.post("/retirements/acknowledge").status_code == 409


def test_full_season_flow(client, engine):
    """Play a season over HTTP, close it, and land in season two."""
    for p in engine.players:
        p.career_length = 99
    resp = client.post("/season/simulate-remaining")
    assert resp.status_code == 200
    assert resp.json()["played"] == 44
    assert resp.json()["phase"] == "closing"
    assert client.post("/season/simulate-next").status_code == 409

    resp = client.post("/season/end")
    assert resp.status_code == 200
    data = resp.json()
    assert data["archive"]["season"] == 1
    assert data["pending_retirements"] is None
    assert data["phase"] == "league"
    assert data["season"]["number"] == 2

    archive = client.get("/archive").json()["archive"]
    assert [a["season"] for a in archive] == [1]


def test_retirement_flow(client, engine):
    engine.players[0].career_length = 1
    client.post("/season/simulate-remaining")
    data = client.post("/season/end").json()
    assert data["phase"] == "transitioning"
    assert len(data["pending_retirements"]["retired"]) == 1

    retired = client.get("/retired").json()
    assert len(retired["retired"]) == 1
    assert retired["pending"]["replacements"][0]["division"] == 2

    resp = client.post("/retirements/acknowledge")
    assert resp.status_code == 200
    assert resp.json()["season"]["number"] == 2
    assert client.get("/retired").json()["pending"] is None


def test_reset_league(client):
    client.post("/season/simulate-next", json={"count": 3})
    resp = client.post("/league/reset", json={"seed": 5})
    assert resp.status_code == 200
    assert resp.json()["remaining"] == 42
    assert resp.json()["season"]["number"] == 1
