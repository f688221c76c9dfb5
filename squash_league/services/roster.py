"""
Roster generation: new players for the opening season and as replacements
for retirees. Names are unique among the names the generator has handed out
or been told about.
"""
from __future__ import annotations

from typing import Iterable

from squash_league.config import LEAGUE_SIZE, NATIONALITIES, PLAYERS_PER_DIVISION, RosterConfig
from squash_league.models import Player
from squash_league.simulation.rng import SeededRNG

FIRST_NAMES = [
    "Alex", "Jamie", "Taylor", "Jordan", "Casey", "Riley", "Morgan", "Avery",
    "Blake", "Cameron", "Drew", "Emery", "Finley", "Harper", "Hayden", "Kennedy",
    "Logan", "Peyton", "Quinn", "Reese", "River", "Sage", "Skylar", "Phoenix",
    "Rowan", "Elliott", "Dakota", "Marlowe", "Indigo", "Kai", "Nova", "Atlas",
]

LAST_NAMES = [
    "Anderson", "Thompson", "Martinez", "Wilson", "Garcia", "Johnson", "Brown",
    "Davis", "Miller", "Rodriguez", "Lee", "Clark", "Lewis", "Walker", "Hall",
    "Allen", "Young", "King", "Wright", "Lopez", "Scott", "Green", "Adams",
    "Baker", "Nelson", "Carter", "Mitchell", "Perez", "Roberts", "Turner",
    "Phillips", "Campbell", "Parker", "Evans", "Edwards", "Collins", "Stewart",
]


class NameGenerator:
    def __init__(self, rng: SeededRNG) -> None:
        self._rng = rng
        self._used: set[str] = set()

    def reserve(self, names: Iterable[str]) -> None:
        self._used.update(names)

    def next_name(self) -> str:
        for _ in range(len(FIRST_NAMES) * len(LAST_NAMES)):
            name = f"{self._rng.choice(FIRST_NAMES)} {self._rng.choice(LAST_NAMES)}"
            if name not in self._used:
                self._used.add(name)
                return name

        suffix = 2
        base = f"{self._rng.choice(FIRST_NAMES)} {self._rng.choice(LAST_NAMES)}"
        while f"{base} {suffix}" in self._used:
            suffix += 1
        name = f"{base} {suffix}"
        self._used.add(name)
        return name


class RosterGenerator:
    """
    Creates players with attributes drawn from RosterConfig ranges.
    Ids are drawn from the seeded stream and never repeat an id the generator
    has issued or been told about, retired players included.
    """

    def __init__(self, rng: SeededRNG, config: RosterConfig | None = None) -> None:
        self.rng = rng
        self.config = config or RosterConfig()
        self.names = NameGenerator(rng)
        self._used_ids: set[str] = set()

    def reserve_ids(self, ids: Iterable[str]) -> None:
        self._used_ids.update(ids)

    def _next_id(self) -> str:
        player_id = self.rng.token_hex()
        while player_id in self._used_ids:
            player_id = self.rng.token_hex()
        self._used_ids.add(player_id)
        return player_id

    def generate_player(self, division: int = 2, rating_range: tuple[int, int] | None = None) -> Player:
        cfg = self.config
        lo, hi = rating_range or cfg.rating_range
        return Player(
            id=self._next_id(),
            name=self.names.next_name(),
            nationality=self.rng.choice(NATIONALITIES),
            age=self.rng.randint(*cfg.age_range),
            rating=float(self.rng.randint(lo, hi)),
            development_rate=round(self.rng.uniform(*cfg.development_rate_range), 3),
            peak_age=self.rng.randint(*cfg.peak_age_range),
            career_length=self.rng.randint(*cfg.career_length_range),
            division=division,
        )

    def generate_initial_players(self) -> list[Player]:
        """
        Ten players for season 1. Half are drawn from the stronger opening
        range; divisions are then assigned by rating alone: the five highest
        go to division 1 (ties broken by id).
        """
        players = [
            self.generate_player(rating_range=self.config.initial_top_rating_range)
            for _ in range(PLAYERS_PER_DIVISION)
        ]
        players += [self.generate_player() for _ in range(LEAGUE_SIZE - PLAYERS_PER_DIVISION)]
        assign_divisions_by_rating(players)
        return players

    def generate_replacements(self, count: int) -> list[Player]:
        """New division-2 players, one per retiree."""
        return [self.generate_player(division=2) for _ in range(count)]


def assign_divisions_by_rating(players: list[Player]) -> None:
    ranked = sorted(players, key=lambda p: (-p.rating, p.id))
    for i, p in enumerate(ranked):
        p.division = 1 if i < PLAYERS_PER_DIVISION else 2
