"""
Snapshot stores for the league engine.
No business logic; only read/write of serialized LeagueSnapshot values.
"""
from __future__ import annotations

import json
import logging
import os
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol

from squash_league.models import LeagueSnapshot

from .db import get_connection, init_db

logger = logging.getLogger(__name__)


class SnapshotLoadError(RuntimeError):
    """Stored snapshot exists but cannot be read back (corrupt, unknown version)."""


class SnapshotSaveError(RuntimeError):
    """Snapshot could not be written."""


class SnapshotStore(Protocol):
    def save_snapshot(self, snapshot: LeagueSnapshot) -> None: ...

    def load_snapshot(self) -> LeagueSnapshot | None: ...


def _decode(payload: str, source: str) -> LeagueSnapshot:
    try:
        data: Any = json.loads(payload)
        if not isinstance(data, dict):
            raise ValueError("payload is not an object")
        return LeagueSnapshot.from_dict(data)
    except (ValueError, KeyError, TypeError) as exc:
        raise SnapshotLoadError(f"Cannot load league snapshot from {source}: {exc}") from exc


# ---------- SqliteSnapshotStore ----------


class SqliteSnapshotStore:
    """Single-row JSON payload table. league_id selects the row."""

    def __init__(self, db_path: str | Path | None = None, league_id: int = 1) -> None:
        self.db_path = db_path
        self.league_id = league_id
        self._initialized = False

    def _connect(self) -> sqlite3.Connection:
        if not self._initialized:
            init_db(self.db_path)
            self._initialized = True
        return get_connection(self.db_path)

    def save_snapshot(self, snapshot: LeagueSnapshot) -> None:
        data = snapshot.to_dict()
        season = data["current_season"]["number"] if data["current_season"] else None
        now = datetime.now(timezone.utc).isoformat()
        try:
            conn = self._connect()
            try:
                conn.execute(
                    """
                    INSERT INTO league_snapshots (id, save_version, season_number, phase, payload, saved_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    ON CONFLICT(id) DO UPDATE SET
                        save_version = excluded.save_version,
                        season_number = excluded.season_number,
                        phase = excluded.phase,
                        payload = excluded.payload,
                        saved_at = excluded.saved_at
                    """,
                    (self.league_id, data["save_version"], season, data["phase"], json.dumps(data), now),
                )
                conn.commit()
            finally:
                conn.close()
        except (sqlite3.Error, OSError) as exc:
            raise SnapshotSaveError(f"Cannot save league snapshot: {exc}") from exc
        logger.debug("SNAPSHOT_SAVED store=sqlite league=%s season=%s", self.league_id, season)

    def load_snapshot(self) -> LeagueSnapshot | None:
        try:
            conn = self._connect()
            try:
                row = conn.execute(
                    "SELECT payload FROM league_snapshots WHERE id = ?", (self.league_id,)
                ).fetchone()
            finally:
                conn.close()
        except (sqlite3.Error, OSError) as exc:
            raise SnapshotLoadError(f"Cannot read league snapshot: {exc}") from exc
        if row is None:
            return None
        return _decode(row["payload"], f"sqlite row {self.league_id}")

    def clear(self) -> None:
        conn = self._connect()
        try:
            conn.execute("DELETE FROM league_snapshots WHERE id = ?", (self.league_id,))
            conn.commit()
        finally:
            conn.close()


# ---------- JsonSnapshotStore ----------


class JsonSnapshotStore:
    """
    One JSON file. The previous file is kept as <name>.bak; if the main file
    is unreadable the backup is tried before giving up.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    @property
    def backup_path(self) -> Path:
        return self.path.with_name(self.path.name + ".bak")

    def save_snapshot(self, snapshot: LeagueSnapshot) -> None:
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(snapshot.to_dict()), encoding="utf-8")
            if self.path.exists():
                os.replace(self.path, self.backup_path)
            os.replace(tmp, self.path)
        except OSError as exc:
            raise SnapshotSaveError(f"Cannot save league snapshot to {self.path}: {exc}") from exc
        logger.debug("SNAPSHOT_SAVED store=json path=%s", self.path)

    def load_snapshot(self) -> LeagueSnapshot | None:
        if not self.path.exists():
            if self.backup_path.exists():
                return self._load(self.backup_path)
            return None
        try:
            return self._load(self.path)
        except SnapshotLoadError:
            if not self.backup_path.exists():
                raise
            logger.warning("SNAPSHOT_MAIN_UNREADABLE path=%s using=%s", self.path, self.backup_path)
            return self._load(self.backup_path)

    def _load(self, path: Path) -> LeagueSnapshot:
        try:
            payload = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise SnapshotLoadError(f"Cannot read {path}: {exc}") from exc
        return _decode(payload, str(path))
