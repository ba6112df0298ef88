"""Event normalization and chronological merge of the match narrative.

Three independent streams feed the narrative: the match objectives list
(type-tagged), every participant's kill log, and every participant's
buyback log. Each record is normalized to ``(time, message)`` and the
streams are merged into one time-ordered list.

Tie-break: records sharing a timestamp are ordered by source priority
(objectives, then kills, then buybacks); records of the same source keep
their input order.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from enum import Enum, IntEnum
from typing import Any

from src.contracts.narrative import NarrativeEvent
from src.core.data.dota_catalog import UNKNOWN_HERO, DotaCatalog
from src.core.errors import IncompleteTelemetryError, MissingMatchDataError

logger = logging.getLogger(__name__)


class ObjectiveType(str, Enum):
    """Objective record types that produce narrative lines."""

    FIRST_BLOOD = "CHAT_MESSAGE_FIRSTBLOOD"
    BUILDING_KILL = "building_kill"
    ROSHAN_KILL = "CHAT_MESSAGE_ROSHAN_KILL"
    AEGIS = "CHAT_MESSAGE_AEGIS"


class EventSource(IntEnum):
    """Narrative streams, in tie-break priority order."""

    OBJECTIVE = 0
    KILL = 1
    BUYBACK = 2


# Raw roshan/objective team ids: 2 = Radiant, 3 = Dire
_RADIANT_TEAM_ID = 2

_LOCATIONS = (("top", "top"), ("mid", "middle"), ("bot", "bottom"))
_TIER_RE = re.compile(r"\d")

ObjectiveHandler = Callable[[dict[str, Any], list[dict[str, Any]], DotaCatalog], str | None]


def _hero_at(players: list[dict[str, Any]], index: Any, catalog: DotaCatalog) -> str:
    """Display name of the hero in ``players[index]``; ``Unknown`` when unresolvable."""
    try:
        player = players[int(index)]
    except (TypeError, ValueError, IndexError):
        return UNKNOWN_HERO
    return catalog.hero_name(player.get("hero_id"))


def _handle_first_blood(
    message: dict[str, Any], players: list[dict[str, Any]], catalog: DotaCatalog
) -> str | None:
    killer = _hero_at(players, message.get("slot"), catalog)
    victim = _hero_at(players, message.get("key"), catalog)
    return f"{killer} drew first blood against {victim}"


def _building_label(key: str) -> str:
    if "tower" in key:
        tier = _TIER_RE.search(key)
        return f"tier {tier.group()} tower" if tier else "tower"
    if "rax" in key:
        if "range" in key:
            return "ranged barracks"
        if "melee" in key:
            return "melee barracks"
    logger.warning("Unexpected building kill key: %s", key)
    return key


def _handle_building_kill(
    message: dict[str, Any], players: list[dict[str, Any]], catalog: DotaCatalog
) -> str | None:
    key = str(message["key"])
    # The ancient falling is already implied by the match result
    if key.endswith("fort"):
        return None

    team = "Radiant" if "good" in key else "Dire"
    location = next((label for marker, label in _LOCATIONS if marker in key), "")
    building = " ".join(part for part in (location, _building_label(key)) if part)
    return f"{team}'s {building} was destroyed"


def _handle_roshan_kill(
    message: dict[str, Any], players: list[dict[str, Any]], catalog: DotaCatalog
) -> str | None:
    team = "Radiant" if int(message["team"]) == _RADIANT_TEAM_ID else "Dire"
    return f"{team} killed Roshan"


def _handle_aegis(
    message: dict[str, Any], players: list[dict[str, Any]], catalog: DotaCatalog
) -> str | None:
    return f"{_hero_at(players, message['slot'], catalog)} picked up the Aegis"


_OBJECTIVE_HANDLERS: dict[ObjectiveType, ObjectiveHandler] = {
    ObjectiveType.FIRST_BLOOD: _handle_first_blood,
    ObjectiveType.BUILDING_KILL: _handle_building_kill,
    ObjectiveType.ROSHAN_KILL: _handle_roshan_kill,
    ObjectiveType.AEGIS: _handle_aegis,
}

_missing_handlers = set(ObjectiveType) - set(_OBJECTIVE_HANDLERS)
if _missing_handlers:
    raise RuntimeError(f"No narrative handler for objective types: {sorted(_missing_handlers)}")


def normalize_objective(
    message: dict[str, Any], players: list[dict[str, Any]], catalog: DotaCatalog
) -> NarrativeEvent | None:
    """Normalize one objective record; ``None`` when unhandled, suppressed or malformed."""
    try:
        kind = ObjectiveType(message.get("type"))
    except ValueError:
        return None

    try:
        text = _OBJECTIVE_HANDLERS[kind](message, players, catalog)
        if text is None:
            return None
        return NarrativeEvent(time=int(message["time"]), message=text)
    except (KeyError, TypeError, ValueError) as e:
        logger.debug("Skipping malformed %s objective %s: %s", kind.value, message, e)
        return None


def _player_log(player: dict[str, Any], field: str) -> list[dict[str, Any]]:
    log = player.get(field)
    if not isinstance(log, list):
        raise IncompleteTelemetryError(field, player.get("player_slot"))
    return log


def _kill_events(player: dict[str, Any], catalog: DotaCatalog) -> list[NarrativeEvent]:
    hero = catalog.hero_name(player.get("hero_id"))
    events: list[NarrativeEvent] = []
    for entry in _player_log(player, "kills_log"):
        try:
            victim = catalog.hero_name_by_raw(entry.get("key"), default=UNKNOWN_HERO)
            events.append(NarrativeEvent(time=int(entry["time"]), message=f"{hero} killed {victim}"))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.debug("Skipping malformed kill record %s: %s", entry, e)
    return events


def _buyback_events(player: dict[str, Any], catalog: DotaCatalog) -> list[NarrativeEvent]:
    hero = catalog.hero_name(player.get("hero_id"))
    events: list[NarrativeEvent] = []
    for entry in _player_log(player, "buyback_log"):
        try:
            events.append(NarrativeEvent(time=int(entry["time"]), message=f"{hero} bought back"))
        except (KeyError, TypeError, ValueError) as e:
            logger.debug("Skipping malformed buyback record %s: %s", entry, e)
    return events


def merge_streams(
    streams: dict[EventSource, list[NarrativeEvent]],
) -> list[NarrativeEvent]:
    """Merge normalized streams by time, breaking ties by source priority."""
    tagged = [
        (event.time, source, position, event)
        for source, events in streams.items()
        for position, event in enumerate(events)
    ]
    tagged.sort(key=lambda item: (item[0], item[1], item[2]))
    return [event for _, _, _, event in tagged]


def build_narrative(match: dict[str, Any], catalog: DotaCatalog) -> list[NarrativeEvent]:
    """Build the chronological narrative of objectives, kills and buybacks.

    Raises:
        MissingMatchDataError: ``players`` or ``objectives`` is absent.
        IncompleteTelemetryError: a participant has no kill or buyback log.
    """
    players = match.get("players")
    if not isinstance(players, list) or not players:
        raise MissingMatchDataError("players")
    objectives = match.get("objectives")
    if not isinstance(objectives, list):
        raise MissingMatchDataError("objectives", "match has not been parsed")

    streams: dict[EventSource, list[NarrativeEvent]] = {
        EventSource.OBJECTIVE: [],
        EventSource.KILL: [],
        EventSource.BUYBACK: [],
    }
    for message in objectives:
        if not isinstance(message, dict):
            continue
        event = normalize_objective(message, players, catalog)
        if event is not None:
            streams[EventSource.OBJECTIVE].append(event)

    for player in players:
        streams[EventSource.KILL].extend(_kill_events(player, catalog))
        streams[EventSource.BUYBACK].extend(_buyback_events(player, catalog))

    return merge_streams(streams)
