#!/usr/bin/env python3
"""
Season slice: New league → Play matches → Persist → Resume → Close season.
Run from project root: python3 scripts/season_slice.py
"""
from __future__ import annotations

import sys
from pathlib import Path

# Ensure project root on path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from squash_league.config import DIVISIONS, configure_logging
from squash_league.models import SeasonPhase
from squash_league.persistence import JsonSnapshotStore
from squash_league.services.league_service import LeagueEngine


def main() -> None:
    configure_logging("WARNING")
    # Use data/season_slice.json for demo (distinct from league.db)
    path = PROJECT_ROOT / "data" / "season_slice.json"
    seed = 99999

    # 1. Fresh league
    engine = LeagueEngine.new_league(seed=seed, store=JsonSnapshotStore(path))
    season = engine.current_season
    print(f"Scheduled season {season.number}: {len(season.matches)} matches")
    for p in sorted(engine.players, key=lambda p: (p.division, -p.rating)):
        print(f"  D{p.division} {p.name:<22} {p.nationality:<10} rating {p.rating:5.1f}")

    # 2. Play a few matches
    for _ in range(6):
        m = engine.simulate_next_match()
        sets = " ".join(f"{s.player1}-{s.player2}" for s in m.set_scores)
        print(f"  R{m.round} {m.player1.name} v {m.player2.name}: {sets}")

    # 3. Resume from disk and finish the season
    resumed = LeagueEngine.load_or_create(JsonSnapshotStore(path), seed=seed)
    assert resumed.current_season.current_match_index == 6
    print(f"Resumed at match {resumed.current_season.current_match_index}, phase {resumed.phase.value}")
    resumed.simulate_remaining()
    archive = resumed.end_season()

    # 4. Results
    for div in DIVISIONS:
        print(f"Division {div}:")
        for i, row in enumerate(archive.division_order(div), start=1):
            print(f"  {i}. {row.name:<22} pts {row.league_points}  sets {row.set_difference:+d}")
    cup = archive.cup
    print(f"Cup: {cup.winner.name} def. {cup.runner_up.name}")
    if resumed.phase is SeasonPhase.TRANSITIONING:
        for retiree, replacement in resumed.pending_retirements.pairs():
            print(f"Retired: {retiree.name} -> {replacement.name if replacement else '-'}")
        resumed.acknowledge_retirements()
    print(f"Next season {resumed.current_season.number} scheduled")

    print("\nSeason slice complete.")


if __name__ == "__main__":
    main()
