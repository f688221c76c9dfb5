"""
SQLite schema for league snapshots.
Migration-friendly: each table created with IF NOT EXISTS.
"""
from __future__ import annotations


def league_snapshots_schema() -> str:
    """One row per league (id 1 for the default league). payload is LeagueSnapshot JSON."""
    return """
    CREATE TABLE IF NOT EXISTS league_snapshots (
        id INTEGER PRIMARY KEY,
        save_version INTEGER NOT NULL,
        season_number INTEGER,
        phase TEXT NOT NULL,
        payload TEXT NOT NULL,
        saved_at TEXT NOT NULL
    );
    """


def all_schema_sql() -> str:
    return league_snapshots_schema()
