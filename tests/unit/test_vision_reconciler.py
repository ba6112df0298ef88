from typing import Any

import pytest

from src.contracts import MapPosition, RemovalReason, VisionEvent, WardKind
from src.core.errors import IncompleteTelemetryError
from src.core.services.vision_reconciler import reconcile_vision


def test_dewarded_observer_names_the_attacker(match: dict[str, Any], catalog) -> None:
    events = reconcile_vision(match["players"][0], catalog)

    assert events == [
        VisionEvent(
            kind=WardKind.OBSERVER,
            placed_at=100,
            position=MapPosition(x=120, y=130),
            removed_at=400,
            reason=RemovalReason.DEWARD,
            removed_by="Lion",
        )
    ]


def test_removal_by_owner_or_without_attacker_is_expiry(player_factory, catalog) -> None:
    player = player_factory(
        0,
        1,
        1001,
        radiant=True,
        sen_log=[
            {"time": 50, "ehandle": "s1", "x": 1, "y": 2},
            {"time": 60, "ehandle": "s2", "x": 3, "y": 4},
        ],
        sen_left_log=[
            {"time": 470, "ehandle": "s1", "attackername": "npc_dota_hero_antimage"},
            {"time": 480, "ehandle": "s2"},
        ],
    )

    events = reconcile_vision(player, catalog)

    assert [(e.reason, e.removed_at, e.removed_by) for e in events] == [
        ("expire", 470, None),
        ("expire", 480, None),
    ]


def test_unresolvable_attacker_is_kept_verbatim(player_factory, catalog) -> None:
    player = player_factory(
        0,
        1,
        1001,
        radiant=True,
        obs_log=[{"time": 10, "ehandle": 7, "x": 5, "y": 5}],
        obs_left_log=[{"time": 20, "ehandle": 7, "attackername": "npc_dota_hero_new_hero"}],
    )

    (event,) = reconcile_vision(player, catalog)

    assert event.reason == "deward"
    assert event.removed_by == "npc_dota_hero_new_hero"


def test_never_removed_ward_stays_open(player_factory, catalog) -> None:
    player = player_factory(
        0,
        1,
        1001,
        radiant=True,
        obs_log=[{"time": 900, "ehandle": "h9", "x": 10, "y": 20}],
    )

    (event,) = reconcile_vision(player, catalog)

    assert event.removed_at is None
    assert event.reason == "unset"
    assert event.removed_by is None


def test_orphan_removal_is_dropped(player_factory, catalog) -> None:
    player = player_factory(
        0,
        1,
        1001,
        radiant=True,
        obs_log=[{"time": 300, "ehandle": "h1", "x": 1, "y": 1}],
        obs_left_log=[
            # before the placement, and for a handle that was never placed
            {"time": 200, "ehandle": "h1", "attackername": "npc_dota_hero_lion"},
            {"time": 400, "ehandle": "h2", "attackername": "npc_dota_hero_lion"},
        ],
    )

    (event,) = reconcile_vision(player, catalog)

    assert event.placed_at == 300
    assert event.reason == "unset"


def test_reused_handle_closes_earliest_open_ward(player_factory, catalog) -> None:
    player = player_factory(
        0,
        1,
        1001,
        radiant=True,
        obs_log=[
            {"time": 500, "ehandle": "h1", "x": 2, "y": 2},
            {"time": 100, "ehandle": "h1", "x": 1, "y": 1},
        ],
        obs_left_log=[
            {"time": 460, "ehandle": "h1"},
            {"time": 700, "ehandle": "h1", "attackername": "npc_dota_hero_pudge"},
        ],
    )

    first, second = reconcile_vision(player, catalog)

    assert (first.placed_at, first.removed_at, first.reason) == (100, 460, "expire")
    assert (second.placed_at, second.removed_at, second.removed_by) == (500, 700, "Pudge")


def test_kinds_are_reconciled_separately_and_sorted_by_placement(player_factory, catalog) -> None:
    player = player_factory(
        0,
        1,
        1001,
        radiant=True,
        obs_log=[{"time": 300, "ehandle": 1, "x": 1, "y": 1}],
        sen_log=[{"time": 200, "ehandle": 1, "x": 2, "y": 2}],
        obs_left_log=[{"time": 350, "ehandle": 1, "attackername": "npc_dota_hero_lion"}],
    )

    sentry, observer = reconcile_vision(player, catalog)

    assert sentry.kind == "sentry" and sentry.reason == "unset"
    assert observer.kind == "observer" and observer.removed_by == "Lion"


def test_malformed_placements_are_skipped(player_factory, catalog) -> None:
    player = player_factory(
        0,
        1,
        1001,
        radiant=True,
        obs_log=[{"time": 10, "ehandle": 1}, {"time": 20, "ehandle": 2, "x": 0, "y": 0}],
    )

    events = reconcile_vision(player, catalog)

    assert [e.placed_at for e in events] == [20]


@pytest.mark.parametrize("field", ["obs_log", "obs_left_log", "sen_log", "sen_left_log"])
def test_missing_ward_log_is_fatal(field: str, player_factory, catalog) -> None:
    player = player_factory(5, 1, 1001, radiant=True)
    del player[field]
    with pytest.raises(IncompleteTelemetryError) as exc:
        reconcile_vision(player, catalog)
    assert exc.value.field == field


def test_unhashable_handles_are_skipped(player_factory, catalog) -> None:
    player = player_factory(
        0,
        1,
        1001,
        radiant=True,
        obs_log=[
            {"time": 10, "ehandle": ["h1"], "x": 1, "y": 1},
            {"time": 20, "ehandle": "h2", "x": 2, "y": 2},
        ],
        obs_left_log=[
            {"time": 30, "ehandle": {"id": "h2"}, "attackername": "npc_dota_hero_lion"},
            {"time": 40, "ehandle": "h2", "attackername": "npc_dota_hero_lion"},
        ],
    )

    (event,) = reconcile_vision(player, catalog)

    assert (event.placed_at, event.removed_at, event.removed_by) == (20, 40, "Lion")
