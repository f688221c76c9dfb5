"""
Static league configuration and environment-driven runtime settings.
Engine tunables live in SimulationConfig / CareerConfig so tests can override them.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

# ---------- League shape ----------
DIVISIONS: tuple[int, int] = (1, 2)
PLAYERS_PER_DIVISION = 5
LEAGUE_SIZE = PLAYERS_PER_DIVISION * len(DIVISIONS)
CUP_SIZE = 4
LEAGUE_MATCHES_PER_ROUND = 2  # per division

# Nationality is an opaque label; these are the fictional federations the league draws from.
NATIONALITIES: tuple[str, ...] = (
    "Norvalla",
    "Baltovia",
    "Jamora",
    "Estora",
    "Luxoria",
    "Kavalin",
    "Tursenia",
    "Virelia",
    "Udran",
    "Mequaria",
    "Darnoth",
)


@dataclass(frozen=True)
class SimulationConfig:
    """Match model parameters."""
    form_noise: float = 4.0
    # Logistic scale: a gap of k rating points gives ~91% set win probability
    logistic_scale: float = 40.0
    league_best_of_3_probability: float = 0.6
    cup_best_of: int = 5
    points_to_win_set: int = 11
    win_by: int = 2
    close_gap: float = 10.0
    medium_gap: float = 25.0
    close_loser_range: tuple[int, int] = (6, 10)
    medium_loser_range: tuple[int, int] = (3, 9)
    wide_loser_range: tuple[int, int] = (0, 7)
    deuce_max_extra: int = 4


@dataclass(frozen=True)
class CareerConfig:
    """Aging, development and retirement parameters."""
    decline_min_seasons: int = 7
    decline_base_probability: float = 0.3
    decline_step: float = 0.2
    decline_range: tuple[float, float] = (1.0, 2.5)
    rating_floor: float = 15.0
    rating_ceiling: float = 100.0
    growth_range: tuple[float, float] = (1.0, 2.5)
    pre_peak_growth: float = 1.0
    post_peak_growth: float = 0.4
    diminishing_pivot: float = 50.0
    diminishing_min: float = 0.1


@dataclass(frozen=True)
class RosterConfig:
    """Ranges used when generating new players."""
    age_range: tuple[int, int] = (18, 23)
    rating_range: tuple[int, int] = (20, 50)
    initial_top_rating_range: tuple[int, int] = (45, 75)
    development_rate_range: tuple[float, float] = (0.2, 1.0)
    career_length_range: tuple[int, int] = (8, 10)
    peak_age_range: tuple[int, int] = (26, 30)


# ---------- Runtime settings ----------


def _default_db_path() -> Path:
    return Path(__file__).resolve().parent.parent / "data" / "league.db"


@dataclass(frozen=True)
class Settings:
    """Host settings read from the environment."""
    db_path: Path
    seed: int | None
    log_level: str

    @classmethod
    def from_env(cls) -> Settings:
        raw_seed = os.environ.get("SQUASH_LEAGUE_SEED", "").strip()
        db = os.environ.get("SQUASH_LEAGUE_DB", "").strip()
        return cls(
            db_path=Path(db) if db else _default_db_path(),
            seed=int(raw_seed) if raw_seed else None,
            log_level=os.environ.get("SQUASH_LEAGUE_LOG_LEVEL", "INFO").strip().upper() or "INFO",
        )


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for the CLI and API hosts."""
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {level}")
    logging.basicConfig(
        level=numeric,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        force=True,
    )
