from typing import Any

import pytest

from src.contracts import FocusStats, SideStats
from src.core.services.teamfight_aggregator import aggregate_teamfight, build_teamfights


def test_side_totals_and_death_roster(match: dict[str, Any], catalog) -> None:
    (fight,) = build_teamfights(match, catalog)

    assert (fight.start, fight.end) == (280, 330)
    assert fight.radiant == SideStats(
        deaths=1,
        death_roster=["Anti-Mage"],
        buybacks=0,
        damage=620,
        healing=80,
        gold_delta=360,
        xp_delta=250,
    )
    assert fight.dire == SideStats(
        deaths=2,
        death_roster=["Lion", "Lion"],
        buybacks=1,
        damage=340,
        healing=0,
        gold_delta=-400,
        xp_delta=90,
    )
    assert fight.focus_player_stats is None


def test_side_totals_conserve_participant_sums(match: dict[str, Any], catalog) -> None:
    (fight,) = build_teamfights(match, catalog)
    deltas = match["teamfights"][0]["players"]

    for field in ("deaths", "buybacks", "damage", "healing", "gold_delta", "xp_delta"):
        expected = sum(d.get(field, 0) for d in deltas)
        assert getattr(fight.radiant, field) + getattr(fight.dire, field) == expected, field
    assert len(fight.radiant.death_roster) == fight.radiant.deaths
    assert len(fight.dire.death_roster) == fight.dire.deaths


def test_focus_player_stats(match: dict[str, Any], catalog) -> None:
    (fight,) = build_teamfights(match, catalog, focus_account_id=1001)

    assert fight.focus_player_stats == FocusStats(
        deaths=1,
        kills=1,
        killed_heroes=["Lion"],
        damage=500,
        healing=0,
        gold_delta=300,
        xp_delta=250,
        buyback=False,
        ability_uses={"antimage_blink": 2},
        item_uses={"manta": 1},
    )


def test_focus_buyback_flag(match: dict[str, Any], catalog) -> None:
    (fight,) = build_teamfights(match, catalog, focus_account_id=2001)

    assert fight.focus_player_stats is not None
    assert fight.focus_player_stats.buyback is True
    assert fight.focus_player_stats.killed_heroes == ["Anti-Mage"]


def test_single_participant_damage_is_attributed_to_their_side(player_factory, catalog) -> None:
    players = [player_factory(128, 14, 5, radiant=False)]

    fight = aggregate_teamfight({"start": 10, "end": 40, "players": [{"damage": 500}]}, players, catalog)

    assert fight.dire.damage == 500
    assert fight.radiant.damage == 0


def test_excess_deltas_are_ignored(player_factory, catalog, caplog: pytest.LogCaptureFixture) -> None:
    players = [player_factory(0, 1, 1, radiant=True)]
    teamfight = {"start": 0, "end": 5, "players": [{"damage": 10}, {"damage": 999}]}

    with caplog.at_level("WARNING"):
        fight = aggregate_teamfight(teamfight, players, catalog)

    assert fight.radiant.damage == 10
    assert fight.dire.damage == 0
    assert "ignoring the excess" in caplog.text


def test_no_teamfights_is_an_empty_list(match: dict[str, Any], catalog) -> None:
    del match["teamfights"]
    assert build_teamfights(match, catalog) == []
    match["teamfights"] = None
    assert build_teamfights(match, catalog) == []
