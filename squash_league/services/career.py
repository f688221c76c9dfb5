"""
Career progression run once per player at season close: aging, development
or decline, cup and league honours, season record, retirement. Also the
between-season roster moves: retiree replacement and promotion/relegation.
"""
from __future__ import annotations

import logging
from typing import Iterable

from squash_league.config import CareerConfig, DIVISIONS, LEAGUE_SIZE, PLAYERS_PER_DIVISION
from squash_league.models import CupResult, Player, PlayerRegistry, SeasonArchive, SeasonRecord
from squash_league.simulation.rng import SeededRNG

logger = logging.getLogger(__name__)

CHAMPION_POSITION = 1
PODIUM_POSITION = 3


# ---------- Development ----------


def decline_probability(seasons_played: int, config: CareerConfig) -> float:
    """Chance of decline this close; zero before the minimum career length."""
    if seasons_played < config.decline_min_seasons:
        return 0.0
    steps = seasons_played - config.decline_min_seasons
    return min(1.0, config.decline_base_probability + config.decline_step * steps)


def growth_amount(player: Player, rng: SeededRNG, config: CareerConfig) -> float:
    base = rng.uniform(*config.growth_range)
    age_factor = config.pre_peak_growth if player.age < player.peak_age else config.post_peak_growth
    diminishing = max(config.diminishing_min, 1 - (player.rating - config.diminishing_pivot) / 100)
    return base * age_factor * player.development_rate * diminishing


def develop(player: Player, rng: SeededRNG, config: CareerConfig) -> float:
    """Apply one season of decline or growth. Returns the rating change."""
    before = player.rating
    if player.age >= player.peak_age and rng.chance(decline_probability(player.seasons_played, config)):
        player.is_declined = True
        player.rating = max(config.rating_floor, player.rating - rng.uniform(*config.decline_range))
    else:
        player.rating = min(config.rating_ceiling, player.rating + growth_amount(player, rng, config))
    player.career_high_rating = max(player.career_high_rating, player.rating)
    return player.rating - before


# ---------- Season close ----------


def close_season_for_player(
    player: Player,
    archive: SeasonArchive,
    rng: SeededRNG,
    config: CareerConfig | None = None,
) -> SeasonRecord:
    """Progress one active player past the archived season; appends and returns its record."""
    config = config or CareerConfig()
    player.seasons_played += 1
    player.age += 1
    delta = develop(player, rng, config)

    cup_result = archive.cup.result_for(player.id)
    if cup_result is not CupResult.DID_NOT_QUALIFY:
        player.cups_played += 1
    if cup_result is CupResult.CHAMPION:
        player.cups_won += 1
    if cup_result.is_podium:
        player.cup_podiums += 1

    row = archive.row_for(player.id)
    position = archive.overall_position(player.id)
    if row is None or position is None:
        # Not in this season's tables
        logger.warning("CAREER_NO_STANDINGS player=%s season=%s", player.id, archive.season)
        position = LEAGUE_SIZE
    record = SeasonRecord(
        season=archive.season,
        division=row.division if row is not None else player.division,
        position=position,
        cup_result=cup_result,
        end_rating=round(player.rating, 2),
        league_points=row.league_points if row is not None else 0,
    )
    player.season_history.append(record)
    if position == CHAMPION_POSITION:
        player.championships_won += 1
    if position <= PODIUM_POSITION:
        player.podiums += 1

    player.is_retired = player.seasons_played >= player.career_length
    logger.debug(
        "CAREER_CLOSE player=%s season=%s position=%s cup=%s rating_delta=%.2f retired=%s",
        player.id, archive.season, position, cup_result.value, delta, player.is_retired,
    )
    return record


# ---------- Roster moves ----------


def resolve_archived(registry: PlayerRegistry, player_id: str, name: str, nationality: str) -> Player | None:
    """Archive row -> live player by id, falling back to name + nationality."""
    return registry.get(player_id) or registry.find_by_identity(name, nationality)


def replace_retirees(
    registry: PlayerRegistry,
    retired_count: int,
    new_players: list[Player],
) -> list[Player]:
    """
    Add replacements so that exactly LEAGUE_SIZE active players remain.
    new_players should hold one division-2 player per retiree; extras are
    dropped from the end and a shortfall is reported. Returns the players added.
    """
    needed = LEAGUE_SIZE - len(registry)
    if len(new_players) != retired_count or needed != retired_count:
        logger.warning(
            "ROSTER_REPLACEMENT_MISMATCH retired=%s generated=%s needed=%s",
            retired_count, len(new_players), needed,
        )
    added = new_players[: max(0, needed)]
    for p in added:
        p.division = 2
        registry.add(p)
    return added


def apply_promotion_relegation(registry: PlayerRegistry, archive: SeasonArchive) -> tuple[Player | None, Player | None]:
    """
    Relegate division 1's last and promote division 2's winner, then rebalance
    to PLAYERS_PER_DIVISION each. Returns (relegated, promoted); either may be
    None when that player has retired.
    """
    top, bottom = DIVISIONS
    div1 = archive.division_order(top)
    div2 = archive.division_order(bottom)
    relegated = resolve_archived(registry, div1[-1].player_id, div1[-1].name, div1[-1].nationality) if div1 else None
    promoted = resolve_archived(registry, div2[0].player_id, div2[0].name, div2[0].nationality) if div2 else None
    if relegated is not None:
        relegated.division = bottom
    if promoted is not None:
        promoted.division = top
    rebalance_divisions(registry, archive, relegated=relegated, promoted=promoted)
    logger.info(
        "PROMOTION_RELEGATION season=%s relegated=%s promoted=%s",
        archive.season,
        relegated.id if relegated else None,
        promoted.id if promoted else None,
    )
    return relegated, promoted


def _rebalance_key(archive: SeasonArchive):
    def key(p: Player):
        position = archive.overall_position(p.id)
        # Archived players first in finishing order, newcomers after by rating
        return (0, position, 0.0, p.id) if position is not None else (1, 0, -p.rating, p.id)
    return key


def rebalance_divisions(
    registry: PlayerRegistry,
    archive: SeasonArchive,
    relegated: Player | None = None,
    promoted: Player | None = None,
) -> None:
    """
    Force a PLAYERS_PER_DIVISION split. Division 1 is topped up from the best
    ranked division-2 players (archive order, then newcomers by rating) or
    trimmed from its worst. This close's relegated player is pulled back up
    last and the promoted player is trimmed last.
    """
    top, bottom = DIVISIONS
    key = _rebalance_key(archive)
    div1 = sorted(registry.in_division(top), key=lambda p: (p is not promoted, key(p)))
    div2 = sorted(registry.in_division(bottom), key=lambda p: (p is relegated, key(p)))
    moved = 0
    while len(div1) < PLAYERS_PER_DIVISION and div2:
        p = div2.pop(0)
        p.division = top
        div1.append(p)
        moved += 1
    while len(div1) > PLAYERS_PER_DIVISION:
        p = div1.pop()
        p.division = bottom
        div2.insert(0, p)
        moved += 1
    if moved:
        logger.warning("ROSTER_REBALANCED season=%s moved=%s", archive.season, moved)


def retire(registry: PlayerRegistry, players: Iterable[Player]) -> list[Player]:
    """Remove retired players from the registry; returns them in registry order."""
    out = []
    for p in list(players):
        if p.is_retired:
            out.append(registry.remove(p.id))
    return out
