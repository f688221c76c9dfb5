"""
Persistence layer for league snapshots.
No business logic, no simulation; only read/write interfaces.
"""
from .db import get_connection, init_db, set_db_path, get_db_path
from .repositories import (
    JsonSnapshotStore,
    SnapshotLoadError,
    SnapshotSaveError,
    SnapshotStore,
    SqliteSnapshotStore,
)

__all__ = [
    "get_connection",
    "init_db",
    "set_db_path",
    "get_db_path",
    "JsonSnapshotStore",
    "SnapshotLoadError",
    "SnapshotSaveError",
    "SnapshotStore",
    "SqliteSnapshotStore",
]
