"""
Service layer: scheduling, standings, careers and the league engine.
Simulation lives in squash_league.simulation; league_service orchestrates persistence.
"""
from .league_service import (
    LeagueEngine,
    LeagueTransitionError,
    RosterIntegrityError,
    SeasonSequenceError,
)
from .scheduling import ScheduleError

__all__ = [
    "LeagueEngine",
    "LeagueTransitionError",
    "RosterIntegrityError",
    "SeasonSequenceError",
    "ScheduleError",
]
