"""
Compact match contracts handed to the prompt-construction stage.

These mirror the structures produced by the compaction engine: the merged
narrative, reconciled vision events, combat aggregates, teamfight summaries,
popular items, and the per-player compact records.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field, model_validator

from .common import BaseContract, MapPosition, RemovalReason, Side, WardKind

# Only present for Ability Draft (drafted abilities) and outside Turbo (benchmarks)
_MODE_SPECIFIC_DETAIL_FIELDS = ("drafted_abilities", "benchmarks")


class NarrativeEvent(BaseContract):
    """One line of the chronological match narrative."""

    time: int = Field(..., description="Game time in seconds (negative before the horn)")
    message: str


class VisionEvent(BaseContract):
    """A ward from placement to removal (or to the end of the captured window)."""

    kind: WardKind
    placed_at: int
    position: MapPosition
    removed_at: int | None = None
    reason: RemovalReason = RemovalReason.UNSET
    removed_by: str | None = None

    @model_validator(mode="after")
    def _check_lifecycle(self) -> VisionEvent:
        if self.reason == RemovalReason.DEWARD and not self.removed_by:
            raise ValueError("deward events must name the hero that removed the ward")
        if self.removed_at is None and self.reason != RemovalReason.UNSET:
            raise ValueError("open ward events must keep reason 'unset'")
        return self


class CombatAction(BaseContract):
    """Aggregated usage of one ability or item (or auto attacks)."""

    key: str
    uses: int = 0
    hits: int = 0
    targets: dict[str, int] = Field(default_factory=dict)
    damage: dict[str, int] = Field(default_factory=dict)


class DamageTakenBreakdown(BaseContract):
    """Damage taken bucketed by source category."""

    heroes: dict[str, int] = Field(default_factory=dict)
    towers: int = 0
    creeps: int = 0
    neutrals: int = 0
    roshan: int = 0
    other: dict[str, int] = Field(default_factory=dict)


class SideStats(BaseContract):
    """One team's totals within a teamfight window."""

    deaths: int = 0
    death_roster: list[str] = Field(default_factory=list)
    buybacks: int = 0
    damage: int = 0
    healing: int = 0
    gold_delta: int = 0
    xp_delta: int = 0


class FocusStats(BaseContract):
    """The focus participant's own numbers within a teamfight window."""

    deaths: int = 0
    kills: int = 0
    killed_heroes: list[str] = Field(default_factory=list)
    damage: int = 0
    healing: int = 0
    gold_delta: int = 0
    xp_delta: int = 0
    buyback: bool = False
    ability_uses: dict[str, int] = Field(default_factory=dict)
    item_uses: dict[str, int] = Field(default_factory=dict)


class TeamfightRecord(BaseContract):
    """Per-side and focus-player summary of a single teamfight window."""

    start: int
    end: int
    radiant: SideStats
    dire: SideStats
    focus_player_stats: FocusStats | None = None


class PopularItems(BaseContract):
    """Most popular item names per game phase, most popular first."""

    early_game: list[str] = Field(default_factory=list)
    mid_game: list[str] = Field(default_factory=list)
    late_game: list[str] = Field(default_factory=list)


class PickBan(BaseContract):
    type: Literal["pick", "ban"]
    hero: str
    team: Side


class PurchaseEntry(BaseContract):
    time: int
    name: str


class ChatLine(BaseContract):
    time: int
    message: str


class VisionSummary(BaseContract):
    placed: dict[str, int] = Field(default_factory=dict)
    destroyed: dict[str, int] = Field(default_factory=dict)
    events: list[VisionEvent] = Field(default_factory=list)


class FocusPlayerDetail(BaseContract):
    """Extra detail only compiled for the focus participant."""

    drafted_abilities: list[str] | None = None
    vision: VisionSummary
    courier_kills: int | None = None
    camps_stacked: int | None = None
    combat_analysis: list[CombatAction] = Field(default_factory=list)
    chat: list[ChatLine] = Field(default_factory=list)
    benchmarks: dict[str, str] | None = None


class CompactPlayer(BaseContract):
    """Per-player record of the compact match."""

    focus: bool = False
    account_id: int | None = None
    hero: str
    team: Side
    kills: int | None = None
    deaths: int | None = None
    assists: int | None = None
    last_hits: int | None = None
    denies: int | None = None
    net_worth: int | None = None
    gold_per_minute: int | None = None
    xp_per_minute: int | None = None
    hero_damage: int | None = None
    tower_damage: int | None = None
    hero_healing: int | None = None
    damage_taken: DamageTakenBreakdown = Field(default_factory=DamageTakenBreakdown)
    level: int | None = None
    rank: str
    runes_picked_up: int | None = None
    teamfight_participation: float | None = None
    stuns_seconds: float | None = None
    abandoned: bool = False
    lane: str | None = None
    last_hit_times: list[int] | None = None
    deny_times: list[int] | None = None
    xp_times: list[int] | None = None
    gold_times: list[int] | None = None
    purchase_log: list[PurchaseEntry] = Field(default_factory=list)
    detail: FocusPlayerDetail | None = None


class CompactMatch(BaseContract):
    """Everything the summarization stage needs about one match."""

    match_id: int | None = None
    duration_seconds: int | None = None
    winning_team: Side
    lobby: str | None = None
    game_mode: str | None = None
    radiant_kills: int | None = None
    dire_kills: int | None = None
    pick_bans: list[PickBan] = Field(default_factory=list)
    radiant_gold_advantage: list[int] | None = None
    radiant_xp_advantage: list[int] | None = None
    players: list[CompactPlayer] = Field(default_factory=list)
    log: list[NarrativeEvent] = Field(default_factory=list)
    teamfights: list[TeamfightRecord] = Field(default_factory=list)

    def as_payload(self) -> dict[str, Any]:
        """Plain nested values for prompt construction.

        Nulls are kept (an open ward still reports ``removed_at: None``). Only
        the focus-only ``detail`` of other players and the mode-specific detail
        fields that do not apply to this match are left out.
        """
        payload = self.model_dump(mode="json")
        for player in payload["players"]:
            if player.get("detail") is None:
                player.pop("detail", None)
                continue
            for field in _MODE_SPECIFIC_DETAIL_FIELDS:
                if player["detail"].get(field) is None:
                    player["detail"].pop(field, None)
        return payload
