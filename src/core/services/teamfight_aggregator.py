"""Fold per-participant teamfight deltas into per-side and focus-player summaries."""

from __future__ import annotations

import logging
from typing import Any

from src.contracts.common import Side
from src.contracts.narrative import FocusStats, SideStats, TeamfightRecord
from src.core.data.dota_catalog import DotaCatalog
from src.core.utils.telemetry import as_int, player_side

logger = logging.getLogger(__name__)

_SUMMED_FIELDS = ("buybacks", "damage", "healing", "gold_delta", "xp_delta")


def _empty_side() -> dict[str, Any]:
    return {
        "deaths": 0,
        "death_roster": [],
        "buybacks": 0,
        "damage": 0,
        "healing": 0,
        "gold_delta": 0,
        "xp_delta": 0,
    }


def _focus_stats(delta: dict[str, Any], catalog: DotaCatalog) -> FocusStats:
    killed = delta.get("killed") or {}
    killed_heroes = [catalog.hero_name_by_raw(raw, default=raw) or raw for raw in killed]
    return FocusStats(
        deaths=as_int(delta.get("deaths")),
        kills=len(killed_heroes),
        killed_heroes=killed_heroes,
        damage=as_int(delta.get("damage")),
        healing=as_int(delta.get("healing")),
        gold_delta=as_int(delta.get("gold_delta")),
        xp_delta=as_int(delta.get("xp_delta")),
        buyback=as_int(delta.get("buybacks")) > 0,
        ability_uses={k: as_int(v) for k, v in (delta.get("ability_uses") or {}).items()},
        item_uses={k: as_int(v) for k, v in (delta.get("item_uses") or {}).items()},
    )


def aggregate_teamfight(
    teamfight: dict[str, Any],
    players: list[dict[str, Any]],
    catalog: DotaCatalog,
    focus_account_id: int | None = None,
) -> TeamfightRecord:
    """Summarize one window; ``teamfight["players"][i]`` belongs to ``players[i]``."""
    deltas = teamfight.get("players") or []
    if len(deltas) > len(players):
        logger.warning(
            "Teamfight at %s has %d participant deltas for %d players; ignoring the excess",
            teamfight.get("start"),
            len(deltas),
            len(players),
        )

    sides = {Side.RADIANT: _empty_side(), Side.DIRE: _empty_side()}
    focus: FocusStats | None = None

    for player, delta in zip(players, deltas):
        if not isinstance(delta, dict):
            continue
        totals = sides[player_side(player)]
        hero = catalog.hero_name(player.get("hero_id"))

        deaths = as_int(delta.get("deaths"))
        totals["deaths"] += deaths
        totals["death_roster"].extend([hero] * deaths)
        for field in _SUMMED_FIELDS:
            totals[field] += as_int(delta.get(field))

        if focus_account_id is not None and player.get("account_id") == focus_account_id:
            focus = _focus_stats(delta, catalog)

    return TeamfightRecord(
        start=as_int(teamfight.get("start")),
        end=as_int(teamfight.get("end")),
        radiant=SideStats(**sides[Side.RADIANT]),
        dire=SideStats(**sides[Side.DIRE]),
        focus_player_stats=focus,
    )


def build_teamfights(
    match: dict[str, Any], catalog: DotaCatalog, focus_account_id: int | None = None
) -> list[TeamfightRecord]:
    """One record per teamfight window, in match order. No fights means an empty list."""
    teamfights = match.get("teamfights") or []
    players = match.get("players") or []
    return [
        aggregate_teamfight(teamfight, players, catalog, focus_account_id)
        for teamfight in teamfights
        if isinstance(teamfight, dict)
    ]
