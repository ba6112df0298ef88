"""Dota reference catalog loader (heroes, items, abilities, modes, rank tiers).

The catalog is pinned to a data version and shipped with the repository so
compaction never depends on a network fetch. It is loaded once, frozen, and
shared by reference across every match compaction.
"""

from __future__ import annotations

import json
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any

from src.config.settings import get_settings
from src.core.errors import CatalogError, CatalogVersionError

BASE_DIR = Path(__file__).resolve().parents[3]
DEFAULT_DATA_FILE = BASE_DIR / "assets" / "dota" / "constants.json"
DEFAULT_VERSION = "7.37"

HERO_PREFIX = "npc_dota_hero_"
UNKNOWN_HERO = "Unknown"


@dataclass(frozen=True)
class HeroInfo:
    id: int
    name: str
    raw_name: str


@dataclass(frozen=True)
class ItemInfo:
    id: int
    key: str
    name: str
    qual: str | None
    cost: int
    has_behavior: bool


@dataclass(frozen=True)
class DotaCatalog:
    """Immutable lookup tables built once from the catalog payload.

    ``heroes_by_raw`` is the reverse index used to resolve internal unit
    names such as ``npc_dota_hero_antimage`` to display names in O(1).
    """

    version: str
    heroes: Mapping[int, HeroInfo]
    heroes_by_raw: Mapping[str, HeroInfo]
    items: Mapping[str, ItemInfo]
    item_keys_by_id: Mapping[int, str]
    abilities: Mapping[str, str]
    ability_keys_by_id: Mapping[int, str]
    game_modes: Mapping[int, str]
    lobby_types: Mapping[int, str]
    rank_tiers: Mapping[int, str]

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> DotaCatalog:
        """Build a catalog from the decoded JSON document."""
        try:
            heroes: dict[int, HeroInfo] = {}
            for hero_id, entry in (payload.get("heroes") or {}).items():
                hero = HeroInfo(
                    id=int(hero_id), name=str(entry["name"]), raw_name=str(entry["raw_name"])
                )
                heroes[hero.id] = hero

            items: dict[str, ItemInfo] = {}
            for key, entry in (payload.get("items") or {}).items():
                items[key] = ItemInfo(
                    id=int(entry["id"]),
                    key=key,
                    name=str(entry.get("dname") or key),
                    qual=entry.get("qual"),
                    cost=int(entry.get("cost") or 0),
                    has_behavior=bool(entry.get("behavior")),
                )

            ability_ids = {int(k): str(v) for k, v in (payload.get("ability_ids") or {}).items()}
            game_modes = {int(k): str(v) for k, v in (payload.get("game_modes") or {}).items()}
            lobby_types = {int(k): str(v) for k, v in (payload.get("lobby_types") or {}).items()}
            rank_tiers = {int(k): str(v) for k, v in (payload.get("rank_tiers") or {}).items()}
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise CatalogError(f"Malformed catalog payload: {e}") from e

        return cls(
            version=str(payload.get("version", DEFAULT_VERSION)),
            heroes=MappingProxyType(heroes),
            heroes_by_raw=MappingProxyType({h.raw_name: h for h in heroes.values()}),
            items=MappingProxyType(items),
            item_keys_by_id=MappingProxyType({i.id: i.key for i in items.values()}),
            abilities=MappingProxyType(dict(payload.get("abilities") or {})),
            ability_keys_by_id=MappingProxyType(ability_ids),
            game_modes=MappingProxyType(game_modes),
            lobby_types=MappingProxyType(lobby_types),
            rank_tiers=MappingProxyType(rank_tiers),
        )

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def hero_name(self, hero_id: int | None, default: str = UNKNOWN_HERO) -> str:
        hero = self.heroes.get(hero_id) if hero_id is not None else None
        return hero.name if hero else default

    def hero_raw_name(self, hero_id: int | None) -> str | None:
        hero = self.heroes.get(hero_id) if hero_id is not None else None
        return hero.raw_name if hero else None

    def hero_name_by_raw(self, raw: str | None, default: str | None = None) -> str | None:
        """Resolve an internal hero unit name to its display name."""
        if not raw:
            return default
        hero = self.heroes_by_raw.get(raw)
        return hero.name if hero else default

    def resolve_unit(self, unit: str) -> str:
        """Display name for hero-shaped units; anything else passes through verbatim."""
        if unit.startswith(HERO_PREFIX):
            return self.hero_name_by_raw(unit, default=unit) or unit
        return unit

    def item_by_id(self, item_id: int | str) -> ItemInfo | None:
        try:
            key = self.item_keys_by_id.get(int(item_id))
        except (TypeError, ValueError):
            return None
        return self.items.get(key) if key else None

    def item_name(self, key: str) -> str:
        item = self.items.get(key)
        return item.name if item else key

    def ability_name(self, ability_id: int) -> str | None:
        key = self.ability_keys_by_id.get(ability_id)
        if key is None:
            return None
        return self.abilities.get(key) or key

    def ability_key(self, ability_id: int) -> str | None:
        return self.ability_keys_by_id.get(ability_id)

    def game_mode_name(self, game_mode: int | None) -> str | None:
        return self.game_modes.get(game_mode) if game_mode is not None else None

    def lobby_type_name(self, lobby_type: int | None) -> str | None:
        return self.lobby_types.get(lobby_type) if lobby_type is not None else None

    def rank_name(self, rank_tier: int | None) -> str:
        """Badge name for a two-digit rank tier (e.g. 54 -> "Legend 4")."""
        uncalibrated = self.rank_tiers.get(0, "Uncalibrated")
        if not rank_tier:
            return uncalibrated
        tier, sub_tier = divmod(int(rank_tier), 10)
        name = self.rank_tiers.get(tier)
        if name is None:
            return uncalibrated
        return f"{name} {sub_tier}" if sub_tier else name


_lock = threading.Lock()
_cache: DotaCatalog | None = None


def load_dota_catalog(data_file: Path | str | None = None) -> DotaCatalog:
    """Read and validate a catalog file without touching the shared instance."""
    path = Path(data_file) if data_file else DEFAULT_DATA_FILE
    if not path.exists():
        raise CatalogError(f"Catalog data file missing: {path}")
    try:
        payload = json.loads(path.read_text("utf-8"))
    except json.JSONDecodeError as e:
        raise CatalogError(f"Catalog data file is not valid JSON: {path}") from e

    catalog = DotaCatalog.from_payload(payload)
    expected = get_settings().catalog_data_version or DEFAULT_VERSION
    if catalog.version != expected:
        raise CatalogVersionError(found=catalog.version, expected=expected)
    return catalog


def get_dota_catalog() -> DotaCatalog:
    """Return the process-wide catalog, loading it on first use."""
    global _cache
    with _lock:
        if _cache is None:
            _cache = load_dota_catalog(get_settings().catalog_data_file)
        return _cache


def _clear_cache_for_tests() -> None:
    global _cache
    with _lock:
        _cache = None
