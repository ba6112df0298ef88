"""Small helpers for reading raw match telemetry dictionaries."""

from __future__ import annotations

from typing import Any

from src.contracts.common import Side

# Dire player slots start at 128 in the raw replay encoding
_DIRE_SLOT_BASE = 128


def as_int(value: Any, default: int = 0) -> int:
    """Coerce a telemetry counter to ``int``; ``None`` and junk become ``default``."""
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def player_side(player: dict[str, Any]) -> Side:
    """Team of a participant, accepting every shape the match endpoint has used."""
    if isinstance(player.get("isRadiant"), bool):
        return Side.RADIANT if player["isRadiant"] else Side.DIRE
    if player.get("team_number") is not None:
        return Side.RADIANT if as_int(player["team_number"]) == 0 else Side.DIRE
    return Side.RADIANT if as_int(player.get("player_slot")) < _DIRE_SLOT_BASE else Side.DIRE
