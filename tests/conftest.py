"""Pytest configuration and shared fixtures for the compaction engine tests.

The ``match`` fixture is a small four-player match shaped like a parsed
match-detail payload: two Radiant players (Anti-Mage, Crystal Maiden) and
two Dire players (Lion, Pudge).
"""

from __future__ import annotations

from typing import Any

import pytest

from src.core.data.dota_catalog import DotaCatalog, load_dota_catalog


def make_player(
    slot: int,
    hero_id: int,
    account_id: int | None,
    *,
    radiant: bool,
    **overrides: Any,
) -> dict[str, Any]:
    """Participant with every per-player log present and empty."""
    player: dict[str, Any] = {
        "player_slot": slot,
        "hero_id": hero_id,
        "account_id": account_id,
        "isRadiant": radiant,
        "kills_log": [],
        "buyback_log": [],
        "obs_log": [],
        "obs_left_log": [],
        "sen_log": [],
        "sen_left_log": [],
    }
    player.update(overrides)
    return player


@pytest.fixture(scope="session")
def catalog() -> DotaCatalog:
    return load_dota_catalog()


@pytest.fixture
def match() -> dict[str, Any]:
    anti_mage = make_player(
        0,
        1,
        1001,
        radiant=True,
        kills=1,
        deaths=1,
        assists=0,
        rank_tier=54,
        lane_role=1,
        kills_log=[{"time": 300, "key": "npc_dota_hero_lion"}],
        obs_log=[{"time": 100, "ehandle": "h1", "x": 120, "y": 130}],
        obs_left_log=[
            {"time": 400, "ehandle": "h1", "attackername": "npc_dota_hero_lion"}
        ],
        obs_placed=1,
        sen_placed=0,
        observer_kills=0,
        sentry_kills=0,
        damage_taken={
            "npc_dota_hero_lion": 800,
            "npc_dota_goodguys_tower1_mid": 150,
            "npc_dota_creep_badguys_melee": 90,
        },
        ability_uses={"antimage_blink": 12},
        item_uses={"manta": 3},
        hero_hits={"null": 40},
        damage_targets={"null": {"npc_dota_hero_lion": 1200}},
        purchase_log=[{"time": 540, "key": "power_treads"}],
        benchmarks={"gold_per_min": {"raw": 612, "pct": 0.8123}},
    )
    crystal_maiden = make_player(1, 5, 1002, radiant=True, rank_tier=0)
    lion = make_player(
        128,
        26,
        2001,
        radiant=False,
        rank_tier=80,
        kills_log=[{"time": 300, "key": "npc_dota_hero_antimage"}],
        buyback_log=[{"time": 300, "slot": 2}],
    )
    pudge = make_player(129, 14, None, radiant=False)

    return {
        "match_id": 7000000001,
        "duration": 2400,
        "radiant_win": True,
        "game_mode": 22,
        "lobby_type": 7,
        "radiant_score": 31,
        "dire_score": 18,
        "players": [anti_mage, crystal_maiden, lion, pudge],
        "objectives": [
            {"time": 2000, "type": "building_kill", "key": "npc_dota_badguys_fort"},
            {"time": 1200, "type": "CHAT_MESSAGE_ROSHAN_KILL", "team": 3},
            {"time": 600, "type": "building_kill", "key": "good_rax_top_melee"},
            {"time": 300, "type": "CHAT_MESSAGE_FIRSTBLOOD", "slot": 0, "key": 2},
            {"time": 450, "type": "CHAT_MESSAGE_COURIER_LOST", "team": 2},
        ],
        "teamfights": [
            {
                "start": 280,
                "end": 330,
                "players": [
                    {
                        "deaths": 1,
                        "buybacks": 0,
                        "damage": 500,
                        "healing": 0,
                        "gold_delta": 300,
                        "xp_delta": 250,
                        "killed": {"npc_dota_hero_lion": 1},
                        "ability_uses": {"antimage_blink": 2},
                        "item_uses": {"manta": 1},
                    },
                    {"deaths": 0, "damage": 120, "healing": 80, "gold_delta": 60},
                    {
                        "deaths": 2,
                        "buybacks": 1,
                        "damage": 300,
                        "gold_delta": -400,
                        "xp_delta": 90,
                        "killed": {"npc_dota_hero_antimage": 1},
                    },
                    {"deaths": 0, "damage": 40},
                ],
            }
        ],
        "picks_bans": [
            {"is_pick": True, "hero_id": 1, "team": 0},
            {"is_pick": False, "hero_id": 44, "team": 1},
        ],
        "chat": [
            {"time": 350, "type": "chat", "player_slot": 0, "key": "gg wp"},
            {"time": 360, "type": "chatwheel", "player_slot": 0, "key": "61"},
            {"time": 370, "type": "chat", "player_slot": 128, "key": "report am"},
        ],
    }


@pytest.fixture
def player_factory():
    return make_player
