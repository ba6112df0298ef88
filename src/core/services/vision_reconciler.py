"""Pair ward placements with their removals and classify why each ward ended."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any

from src.contracts.common import MapPosition, RemovalReason, WardKind
from src.contracts.narrative import VisionEvent
from src.core.data.dota_catalog import DotaCatalog
from src.core.errors import IncompleteTelemetryError

logger = logging.getLogger(__name__)

# (kind, placement log, removal log)
WARD_LOGS: tuple[tuple[WardKind, str, str], ...] = (
    (WardKind.OBSERVER, "obs_log", "obs_left_log"),
    (WardKind.SENTRY, "sen_log", "sen_left_log"),
)


@dataclass(eq=False)
class _WardState:
    """Working record for one placement while removals are being applied."""

    kind: WardKind
    handle: Any
    placed_at: int
    x: float
    y: float
    removed_at: int | None = None
    reason: RemovalReason = RemovalReason.UNSET
    removed_by: str | None = None

    def close(
        self, removed_at: int, attacker: str | None, owner_raw: str | None, catalog: DotaCatalog
    ) -> None:
        self.removed_at = removed_at
        if not attacker or attacker == owner_raw:
            self.reason = RemovalReason.EXPIRE
            return
        self.reason = RemovalReason.DEWARD
        self.removed_by = catalog.hero_name_by_raw(attacker, default=attacker)

    def to_event(self) -> VisionEvent:
        return VisionEvent(
            kind=self.kind,
            placed_at=self.placed_at,
            position=MapPosition(x=self.x, y=self.y),
            removed_at=self.removed_at,
            reason=self.reason,
            removed_by=self.removed_by,
        )


def _ward_handle(value: Any) -> Any:
    """Entity handle used to pair records; ``TypeError`` when it cannot be a key."""
    hash(value)
    return value


def _ward_log(player: dict[str, Any], field: str) -> list[dict[str, Any]]:
    log = player.get(field)
    if not isinstance(log, list):
        raise IncompleteTelemetryError(field, player.get("player_slot"))
    return log


def reconcile_vision(player: dict[str, Any], catalog: DotaCatalog) -> list[VisionEvent]:
    """Build the ward lifecycle list of one participant, ordered by placement time.

    A removal closes the earliest still-open ward of the same kind and handle
    placed at or before it. Removals with no such ward are dropped; wards that
    are never removed stay open with reason ``unset``.
    """
    owner_raw = catalog.hero_raw_name(player.get("hero_id"))
    wards: list[_WardState] = []
    open_wards: dict[tuple[WardKind, Any], list[_WardState]] = defaultdict(list)

    for kind, placed_field, _ in WARD_LOGS:
        for entry in _ward_log(player, placed_field):
            try:
                ward = _WardState(
                    kind=kind,
                    handle=_ward_handle(entry["ehandle"]),
                    placed_at=int(entry["time"]),
                    x=float(entry["x"]),
                    y=float(entry["y"]),
                )
            except (KeyError, TypeError, ValueError) as e:
                logger.debug("Skipping malformed %s placement %s: %s", kind.value, entry, e)
                continue
            wards.append(ward)
            open_wards[(kind, ward.handle)].append(ward)

    for kind, _, removed_field in WARD_LOGS:
        for entry in _ward_log(player, removed_field):
            try:
                handle = _ward_handle(entry["ehandle"])
                removed_at = int(entry["time"])
            except (KeyError, TypeError, ValueError) as e:
                logger.debug("Skipping malformed %s removal %s: %s", kind.value, entry, e)
                continue

            candidates = [w for w in open_wards.get((kind, handle), []) if w.placed_at <= removed_at]
            if not candidates:
                logger.debug("No open %s ward for removal %s", kind.value, entry)
                continue
            ward = min(candidates, key=lambda w: w.placed_at)
            open_wards[(kind, handle)].remove(ward)
            ward.close(removed_at, entry.get("attackername"), owner_raw, catalog)

    wards.sort(key=lambda w: w.placed_at)
    return [ward.to_event() for ward in wards]

