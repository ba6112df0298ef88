"""Service layer implementing the compaction engine.

Each stage is a pure function over the raw match payload and the shared
reference catalog; ``MatchCompactor`` composes them for one match.
"""

from src.core.services.combat_aggregator import build_combat_analysis, build_damage_taken
from src.core.services.match_compactor import MatchCompactor
from src.core.services.popular_items import rank_popular_items
from src.core.services.teamfight_aggregator import build_teamfights
from src.core.services.timeline_narrative import build_narrative
from src.core.services.vision_reconciler import reconcile_vision

__all__ = [
    "MatchCompactor",
    "build_narrative",
    "reconcile_vision",
    "build_damage_taken",
    "build_combat_analysis",
    "build_teamfights",
    "rank_popular_items",
]
