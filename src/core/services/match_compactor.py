"""Match compaction engine.

Turns one fully fetched match payload into the compact structures consumed
by the summarization prompt: the chronological narrative, per-player records
(with vision and combat detail for the focus player), and teamfight
summaries. Pure and synchronous; the reference catalog is injected once and
shared across matches.
"""

from __future__ import annotations

import logging
from typing import Any

from src.config.settings import get_settings
from src.contracts.common import Side
from src.contracts.narrative import (
    ChatLine,
    CombatAction,
    CompactMatch,
    CompactPlayer,
    DamageTakenBreakdown,
    FocusPlayerDetail,
    NarrativeEvent,
    PickBan,
    PopularItems,
    PurchaseEntry,
    TeamfightRecord,
    VisionEvent,
    VisionSummary,
)
from src.core.data.dota_catalog import DotaCatalog
from src.core.errors import FocusPlayerNotFoundError, MissingMatchDataError
from src.core.observability import bind_match_context, clear_match_context, trace_engine
from src.core.services.combat_aggregator import build_combat_analysis, build_damage_taken
from src.core.services.popular_items import rank_popular_items
from src.core.services.teamfight_aggregator import build_teamfights
from src.core.services.timeline_narrative import build_narrative
from src.core.services.vision_reconciler import reconcile_vision
from src.core.utils.telemetry import as_int, player_side

logger = logging.getLogger(__name__)

ABILITY_DRAFT_MODE = 18
TURBO_MODE = 23

LANE_NAMES = {
    1: "Safe",
    2: "Middle",
    3: "Off",
}

# leaver_status above this means the player abandoned
_LEAVER_STATUS_DISCONNECTED = 1


class MatchCompactor:
    """Compaction engine bound to one immutable reference catalog."""

    def __init__(
        self,
        catalog: DotaCatalog,
        *,
        popular_items_limit: int | None = None,
        min_consumable_cost: int | None = None,
    ) -> None:
        settings = get_settings()
        self.catalog = catalog
        self.popular_items_limit = (
            settings.popular_items_limit if popular_items_limit is None else popular_items_limit
        )
        self.min_consumable_cost = (
            settings.popular_items_min_consumable_cost
            if min_consumable_cost is None
            else min_consumable_cost
        )

    # ------------------------------------------------------------------
    # Individual stages
    # ------------------------------------------------------------------

    def build_narrative(self, match: dict[str, Any]) -> list[NarrativeEvent]:
        return build_narrative(match, self.catalog)

    def build_vision_events(self, player: dict[str, Any]) -> list[VisionEvent]:
        return reconcile_vision(player, self.catalog)

    def build_damage_taken(self, damage_taken: dict[str, Any] | None) -> DamageTakenBreakdown:
        return build_damage_taken(damage_taken, self.catalog)

    def build_combat_analysis(self, player: dict[str, Any]) -> list[CombatAction]:
        return build_combat_analysis(player, self.catalog)

    def build_teamfights(
        self, match: dict[str, Any], focus_account_id: int | None = None
    ) -> list[TeamfightRecord]:
        return build_teamfights(match, self.catalog, focus_account_id)

    def rank_popular_items(
        self, popularity: dict[str, Any], game_mode: int | None = None
    ) -> PopularItems | None:
        """Popular items per phase; ``None`` for Ability Draft where builds don't transfer."""
        if game_mode == ABILITY_DRAFT_MODE:
            return None
        return rank_popular_items(
            popularity,
            self.catalog,
            limit=self.popular_items_limit,
            min_consumable_cost=self.min_consumable_cost,
        )

    # ------------------------------------------------------------------
    # Full compaction
    # ------------------------------------------------------------------

    def compact(self, match: dict[str, Any], focus_account_id: int | None = None) -> CompactMatch:
        """Compact one match for the given focus player.

        Raises:
            MissingMatchDataError: a mandatory top-level field is absent.
            IncompleteTelemetryError: a participant lacks a whole log category.
            FocusPlayerNotFoundError: the focus account did not play in the match.
        """
        bind_match_context(match.get("match_id"), focus_account_id)
        try:
            return self._compact(match, focus_account_id)
        finally:
            clear_match_context()

    @trace_engine
    def _compact(self, match: dict[str, Any], focus_account_id: int | None) -> CompactMatch:
        players = match.get("players")
        if not isinstance(players, list) or not players:
            raise MissingMatchDataError("players")
        if not isinstance(match.get("radiant_win"), bool):
            raise MissingMatchDataError("radiant_win", "match result is unknown")
        if focus_account_id is not None and not any(
            p.get("account_id") == focus_account_id for p in players
        ):
            raise FocusPlayerNotFoundError(focus_account_id)

        game_mode = match.get("game_mode")
        compact_players = [
            self._compact_player(
                match,
                player,
                is_focus=focus_account_id is not None
                and player.get("account_id") == focus_account_id,
            )
            for player in players
        ]

        compact = CompactMatch(
            match_id=match.get("match_id"),
            duration_seconds=match.get("duration"),
            winning_team=Side.RADIANT if match["radiant_win"] else Side.DIRE,
            lobby=self.catalog.lobby_type_name(match.get("lobby_type")),
            game_mode=self.catalog.game_mode_name(game_mode),
            radiant_kills=match.get("radiant_score"),
            dire_kills=match.get("dire_score"),
            pick_bans=self._pick_bans(match),
            radiant_gold_advantage=match.get("radiant_gold_adv"),
            radiant_xp_advantage=match.get("radiant_xp_adv"),
            players=compact_players,
            log=self.build_narrative(match),
            teamfights=self.build_teamfights(match, focus_account_id),
        )
        logger.info(
            "Compacted match %s: %d narrative lines, %d teamfights",
            compact.match_id,
            len(compact.log),
            len(compact.teamfights),
        )
        return compact

    def _pick_bans(self, match: dict[str, Any]) -> list[PickBan]:
        pick_bans: list[PickBan] = []
        for entry in match.get("picks_bans") or []:
            pick_bans.append(
                PickBan(
                    type="pick" if entry.get("is_pick") else "ban",
                    hero=self.catalog.hero_name(entry.get("hero_id")),
                    team=Side.RADIANT if as_int(entry.get("team")) == 0 else Side.DIRE,
                )
            )
        return pick_bans

    def _purchase_log(self, player: dict[str, Any]) -> list[PurchaseEntry]:
        entries: list[PurchaseEntry] = []
        for purchase in player.get("purchase_log") or []:
            try:
                entries.append(
                    PurchaseEntry(
                        time=int(purchase["time"]),
                        name=self.catalog.item_name(str(purchase["key"])),
                    )
                )
            except (KeyError, TypeError, ValueError) as e:
                logger.debug("Skipping malformed purchase record %s: %s", purchase, e)
        return entries

    def _compact_player(
        self, match: dict[str, Any], player: dict[str, Any], *, is_focus: bool
    ) -> CompactPlayer:
        return CompactPlayer(
            focus=is_focus,
            account_id=player.get("account_id"),
            hero=self.catalog.hero_name(player.get("hero_id")),
            team=player_side(player),
            kills=player.get("kills"),
            deaths=player.get("deaths"),
            assists=player.get("assists"),
            last_hits=player.get("last_hits"),
            denies=player.get("denies"),
            net_worth=player.get("net_worth"),
            gold_per_minute=player.get("gold_per_min"),
            xp_per_minute=player.get("xp_per_min"),
            hero_damage=player.get("hero_damage"),
            tower_damage=player.get("tower_damage"),
            hero_healing=player.get("hero_healing"),
            damage_taken=self.build_damage_taken(player.get("damage_taken")),
            level=player.get("level"),
            rank=self.catalog.rank_name(player.get("rank_tier")),
            runes_picked_up=player.get("rune_pickups"),
            teamfight_participation=player.get("teamfight_participation"),
            stuns_seconds=player.get("stuns"),
            abandoned=as_int(player.get("leaver_status")) > _LEAVER_STATUS_DISCONNECTED,
            lane=LANE_NAMES.get(as_int(player.get("lane_role"))),
            last_hit_times=player.get("lh_t"),
            deny_times=player.get("dn_t"),
            xp_times=player.get("xp_t"),
            gold_times=player.get("gold_t"),
            purchase_log=self._purchase_log(player),
            detail=self._focus_detail(match, player) if is_focus else None,
        )

    def _focus_detail(self, match: dict[str, Any], player: dict[str, Any]) -> FocusPlayerDetail:
        game_mode = match.get("game_mode")
        chat = [
            ChatLine(time=as_int(msg.get("time")), message=str(msg.get("key", "")))
            for msg in match.get("chat") or []
            if msg.get("player_slot") == player.get("player_slot") and msg.get("type") == "chat"
        ]
        return FocusPlayerDetail(
            drafted_abilities=(
                self._drafted_abilities(player) if game_mode == ABILITY_DRAFT_MODE else None
            ),
            vision=VisionSummary(
                placed={
                    "observer": as_int(player.get("obs_placed")),
                    "sentry": as_int(player.get("sen_placed")),
                },
                destroyed={
                    "observer": as_int(player.get("observer_kills")),
                    "sentry": as_int(player.get("sentry_kills")),
                },
                events=self.build_vision_events(player),
            ),
            courier_kills=player.get("courier_kills"),
            camps_stacked=player.get("camps_stacked"),
            combat_analysis=self.build_combat_analysis(player),
            chat=chat,
            benchmarks=None if game_mode == TURBO_MODE else self._benchmarks(player),
        )

    def _drafted_abilities(self, player: dict[str, Any]) -> list[str]:
        """Abilities drafted in Ability Draft, without talents, alphabetically."""
        names: set[str] = set()
        for ability_id in player.get("ability_upgrades_arr") or []:
            key = self.catalog.ability_key(as_int(ability_id))
            if not key or "special_bonus" in key:
                continue
            names.add(self.catalog.ability_name(as_int(ability_id)) or key)
        return sorted(names)

    @staticmethod
    def _benchmarks(player: dict[str, Any]) -> dict[str, str]:
        benchmarks: dict[str, str] = {}
        for name, benchmark in (player.get("benchmarks") or {}).items():
            pct = (benchmark or {}).get("pct")
            if pct is None:
                continue
            benchmarks[name] = f"{float(pct) * 100:.2f}"
        return benchmarks
