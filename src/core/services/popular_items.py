"""Rank per-phase item popularity counts into short lists of impactful item names."""

from __future__ import annotations

import logging
from typing import Any

from src.config.settings import get_settings
from src.contracts.narrative import PopularItems
from src.core.data.dota_catalog import DotaCatalog, ItemInfo
from src.core.utils.telemetry import as_int

logger = logging.getLogger(__name__)

# Phase field in the popularity payload -> PopularItems field
PHASES = (
    ("early_game_items", "early_game"),
    ("mid_game_items", "mid_game"),
    ("late_game_items", "late_game"),
)


def is_impactful(item: ItemInfo, min_consumable_cost: int) -> bool:
    """False for recipes, passive stat components and cheap laning consumables."""
    if "recipe" in item.key or "recipe" in item.name.lower():
        return False
    if item.qual == "component" and not item.has_behavior:
        return False
    if item.qual == "consumable" and item.cost < min_consumable_cost:
        return False
    return True


def rank_phase(
    counts: dict[str, Any] | None,
    catalog: DotaCatalog,
    *,
    limit: int,
    min_consumable_cost: int,
) -> list[str]:
    """Names of the ``limit`` most used impactful items, most used first."""
    if not counts:
        return []

    ranked: list[tuple[int, str]] = []
    for item_id, count in counts.items():
        item = catalog.item_by_id(item_id)
        if item is None:
            logger.debug("Unknown item id in popularity data: %s", item_id)
            continue
        if is_impactful(item, min_consumable_cost):
            ranked.append((as_int(count), item.name))

    ranked.sort(key=lambda entry: entry[0], reverse=True)
    return [name for _, name in ranked[:limit]]


def rank_popular_items(
    popularity: dict[str, Any],
    catalog: DotaCatalog,
    *,
    limit: int | None = None,
    min_consumable_cost: int | None = None,
) -> PopularItems:
    """Apply the same ranking to the early, mid and late game phases."""
    settings = get_settings()
    limit = settings.popular_items_limit if limit is None else limit
    if min_consumable_cost is None:
        min_consumable_cost = settings.popular_items_min_consumable_cost

    return PopularItems(
        **{
            field: rank_phase(
                popularity.get(phase),
                catalog,
                limit=limit,
                min_consumable_cost=min_consumable_cost,
            )
            for phase, field in PHASES
        }
    )
