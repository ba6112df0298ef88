"""Contract models for data validation."""

from .common import MapPosition, RemovalReason, Side, WardKind
from .narrative import (
    ChatLine,
    CombatAction,
    CompactMatch,
    CompactPlayer,
    DamageTakenBreakdown,
    FocusPlayerDetail,
    FocusStats,
    NarrativeEvent,
    PickBan,
    PopularItems,
    PurchaseEntry,
    SideStats,
    TeamfightRecord,
    VisionEvent,
    VisionSummary,
)

__all__ = [
    "MapPosition",
    "RemovalReason",
    "Side",
    "WardKind",
    "ChatLine",
    "CombatAction",
    "CompactMatch",
    "CompactPlayer",
    "DamageTakenBreakdown",
    "FocusPlayerDetail",
    "FocusStats",
    "NarrativeEvent",
    "PickBan",
    "PopularItems",
    "PurchaseEntry",
    "SideStats",
    "TeamfightRecord",
    "VisionEvent",
    "VisionSummary",
]
