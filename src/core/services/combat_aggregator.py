"""Damage-taken bucketing and per-action combat aggregation for one participant."""

from __future__ import annotations

import logging
from typing import Any

from src.contracts.narrative import CombatAction, DamageTakenBreakdown
from src.core.data.dota_catalog import HERO_PREFIX, DotaCatalog
from src.core.utils.telemetry import as_int

logger = logging.getLogger(__name__)

# Key the replay parser uses for actions with no ability (right-click attacks)
NO_ABILITY_KEY = "null"
AUTO_ATTACK_LABEL = "auto_attack"

CREEP_PREFIX = "npc_dota_creep_"
NEUTRAL_PREFIX = "npc_dota_neutral_"
ROSHAN_UNIT = "npc_dota_roshan"


def build_damage_taken(
    damage_taken: dict[str, Any] | None, catalog: DotaCatalog
) -> DamageTakenBreakdown:
    """Bucket damage taken by source unit.

    Towers, lane creeps, neutrals and Roshan accumulate into one total each.
    Heroes and unrecognized sources stay keyed individually.
    """
    if not damage_taken:
        return DamageTakenBreakdown()

    heroes: dict[str, int] = {}
    other: dict[str, int] = {}
    towers = creeps = neutrals = roshan = 0

    for source, raw_amount in damage_taken.items():
        amount = as_int(raw_amount)
        if source.startswith(HERO_PREFIX):
            heroes[catalog.resolve_unit(source)] = amount
        elif "_tower" in source:
            towers += amount
        elif source.startswith(CREEP_PREFIX) or "_siege" in source:
            creeps += amount
        elif source.startswith(NEUTRAL_PREFIX):
            neutrals += amount
        elif source == ROSHAN_UNIT:
            roshan += amount
        else:
            other[source] = amount

    return DamageTakenBreakdown(
        heroes=heroes,
        towers=towers,
        creeps=creeps,
        neutrals=neutrals,
        roshan=roshan,
        other=other,
    )


def _action_key(key: str) -> str:
    return AUTO_ATTACK_LABEL if key == NO_ABILITY_KEY else key


def _resolve_breakdown(breakdown: dict[str, Any], catalog: DotaCatalog) -> dict[str, int]:
    return {catalog.resolve_unit(unit): as_int(value) for unit, value in breakdown.items()}


def build_combat_analysis(player: dict[str, Any], catalog: DotaCatalog) -> list[CombatAction]:
    """Merge use, hit, target and damage maps into one record per action key.

    Ability and item uses are summed when both maps carry the same key.
    """
    actions: dict[str, dict[str, Any]] = {}

    def _slot(raw_key: str) -> dict[str, Any]:
        key = _action_key(raw_key)
        return actions.setdefault(key, {"key": key, "uses": 0, "hits": 0, "targets": {}, "damage": {}})

    for field in ("ability_uses", "item_uses"):
        for key, uses in (player.get(field) or {}).items():
            _slot(key)["uses"] += as_int(uses)

    for key, hits in (player.get("hero_hits") or {}).items():
        _slot(key)["hits"] += as_int(hits)

    for key, targets in (player.get("ability_targets") or {}).items():
        if isinstance(targets, dict):
            _slot(key)["targets"] = _resolve_breakdown(targets, catalog)

    for key, damage in (player.get("damage_targets") or {}).items():
        if isinstance(damage, dict):
            _slot(key)["damage"] = _resolve_breakdown(damage, catalog)

    return [CombatAction(**fields) for fields in actions.values()]
