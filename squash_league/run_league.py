"""
Run the league from the terminal: play whole seasons, print each division
table and the cup result, acknowledge retirements automatically.
State is saved to SQLite after every command, so runs resume where they stopped.
"""
from __future__ import annotations

import argparse
import logging
from pathlib import Path

from squash_league.config import DIVISIONS, Settings, configure_logging
from squash_league.models import SeasonArchive, SeasonPhase
from squash_league.persistence import SqliteSnapshotStore
from squash_league.services.league_service import LeagueEngine

logger = logging.getLogger(__name__)


def _print_archive(archive: SeasonArchive) -> None:
    print()
    print("=" * 60)
    print(f"  SEASON {archive.season}")
    print("=" * 60)
    for div in DIVISIONS:
        print(f"  Division {div}")
        for i, row in enumerate(archive.division_order(div), start=1):
            print(
                f"   {i}. {row.name:<22} {row.nationality:<10} "
                f"pts {row.league_points:>2}  sets {row.set_difference:+3d}  rating {row.rating:5.1f}"
            )
    cup = archive.cup
    if cup.winner is not None:
        print(f"  Cup: {cup.winner.name} def. {cup.runner_up.name}; 3rd {cup.third.name}")
    for retiree, replacement in zip(archive.retired, archive.replacements):
        print(f"  Retired: {retiree.name} -> replaced by {replacement.name}")


def run(seasons: int = 1, seed: int | None = None, db_path: Path | None = None, fresh: bool = False) -> LeagueEngine:
    settings = Settings.from_env()
    store = SqliteSnapshotStore(db_path or settings.db_path)
    seed = seed if seed is not None else settings.seed
    if fresh:
        engine = LeagueEngine.new_league(seed=seed, store=store)
    else:
        engine = LeagueEngine.load_or_create(store, seed=seed)
    for _ in range(seasons):
        if engine.phase is SeasonPhase.TRANSITIONING:
            engine.acknowledge_retirements()
        engine.simulate_remaining()
        _print_archive(engine.end_season())
        if engine.last_save_error:
            logger.warning("League state not saved: %s", engine.last_save_error)
    return engine


def main():
    parser = argparse.ArgumentParser(description="Simulate squash league seasons.")
    parser.add_argument("--seasons", type=int, default=1, help="Seasons to play")
    parser.add_argument("--seed", type=int, default=None, help="RNG seed for reproducibility")
    parser.add_argument("--db", type=Path, default=None, help="SQLite file for league state")
    parser.add_argument("--fresh", action="store_true", help="Discard saved state and start a new league")
    parser.add_argument("--log-level", default=None, help="Logging level (default from SQUASH_LEAGUE_LOG_LEVEL)")
    args = parser.parse_args()
    configure_logging(args.log_level or Settings.from_env().log_level)
    run(seasons=args.seasons, seed=args.seed, db_path=args.db, fresh=args.fresh)


if __name__ == "__main__":
    main()
