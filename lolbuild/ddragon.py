# lolbuild/ddragon.py - Data Dragon static data client
import logging
import re
import time
from typing import Any, Dict, List, Optional

from .constants import (
    DDRAGON_BASE,
    DDRAGON_FALLBACK_VERSION,
    DDRAGON_LOCALE,
    DDRAGON_VERSIONS_URL,
    SUMMONER_SPELLS,
    VERSION_TTL,
)
from .validators import normalize_champion_name

logger = logging.getLogger("red.lolbuild.ddragon")


class VersionedAssetCache:
    """Static data tables keyed by kind, valid for one game version at a time.

    Kinds used by the client: items, runes, spells, champions, champion_names.
    Tables are replaced wholesale, never mutated in place.
    """

    KINDS = ("items", "runes", "spells", "champions", "champion_names")

    def __init__(self):
        self.version: Optional[str] = None
        self._tables: Dict[str, Any] = {}
        self.hits = 0
        self.misses = 0

    def init(self):
        """Reset to an empty state"""
        self.version = None
        self._tables = {}
        self.hits = 0
        self.misses = 0

    def invalidate_on_version_change(self, version: str) -> bool:
        """Drop every table if the version differs. Returns True if cleared."""
        if self.version == version:
            return False
        if self.version is not None:
            logger.info(f"Patch changed {self.version} -> {version}, clearing static data")
        self._tables = {}
        self.version = version
        return True

    def get(self, kind: str, version: str) -> Optional[Any]:
        if version == self.version and kind in self._tables:
            self.hits += 1
            return self._tables[kind]
        self.misses += 1
        return None

    def set(self, kind: str, version: str, value: Any):
        if version != self.version:
            self.invalidate_on_version_change(version)
        self._tables[kind] = value

    def get_stats(self) -> Dict[str, Any]:
        total = self.hits + self.misses
        hit_rate = (self.hits / total * 100) if total > 0 else 0
        return {
            "version": self.version,
            "tables": sorted(self._tables),
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": f"{hit_rate:.1f}%",
        }


class DataDragonClient:
    """Resolves the live patch and maps numeric IDs to names and image URLs"""

    def __init__(self, fetcher, cache: Optional[VersionedAssetCache] = None,
                 version_ttl: int = VERSION_TTL):
        self.fetcher = fetcher
        self.cache = cache if cache is not None else VersionedAssetCache()
        self.version_ttl = version_ttl
        self._version: Optional[str] = None
        self._version_fetched_at = 0.0

    # Version

    async def get_latest_version(self, force_refresh: bool = False) -> str:
        """Newest Data Dragon version, polled at most every version_ttl seconds"""
        now = time.monotonic()
        if (not force_refresh and self._version
                and now - self._version_fetched_at < self.version_ttl):
            return self._version

        result = await self.fetcher.fetch_json(DDRAGON_VERSIONS_URL)
        if result.ok and isinstance(result.data, list) and result.data:
            latest = str(result.data[0])
            if latest != self._version:
                logger.info(f"Data Dragon version: {latest}")
            self.cache.invalidate_on_version_change(latest)
            self._version = latest
            self._version_fetched_at = now
            return latest

        logger.warning(f"Could not fetch Data Dragon versions ({result.error}), using fallback")
        return self._version or DDRAGON_FALLBACK_VERSION

    # Static tables

    async def _load_table(self, kind: str, version: str, filename: str, key: Optional[str] = "data"):
        cached = self.cache.get(kind, version)
        if cached is not None:
            return cached

        url = f"{DDRAGON_BASE}/cdn/{version}/data/{DDRAGON_LOCALE}/{filename}"
        result = await self.fetcher.fetch_json(url)
        if not result.ok or result.data is None:
            logger.warning(f"Failed to load {filename} for {version}: {result.error}")
            return [] if key is None else {}

        expected = list if key is None else dict
        if not isinstance(result.data, expected):
            logger.warning(f"Unexpected {type(result.data).__name__} body in {filename} for {version}")
            return [] if key is None else {}

        table = result.data if key is None else result.data.get(key, {})
        self.cache.set(kind, version, table)
        return table

    async def get_item_data(self, version: str) -> Dict[str, Any]:
        return await self._load_table("items", version, "item.json")

    async def get_rune_data(self, version: str) -> List[Dict[str, Any]]:
        return await self._load_table("runes", version, "runesReforged.json", key=None)

    async def get_summoner_spell_data(self, version: str) -> Dict[str, Any]:
        return await self._load_table("spells", version, "summoner.json")

    async def get_champion_data(self, version: str) -> Dict[str, Any]:
        data = await self._load_table("champions", version, "champion.json")
        if data and self.cache.get("champion_names", version) is None:
            names = sorted(champ["name"] for champ in data.values())
            self.cache.set("champion_names", version, names)
            logger.info(f"Cached {len(names)} champion names for {version}")
        return data

    async def get_all_champion_names(self, version: Optional[str] = None) -> List[str]:
        version = version or await self.get_latest_version()
        names = self.cache.get("champion_names", version)
        if names:
            return names
        await self.get_champion_data(version)
        return self.cache.get("champion_names", version) or []

    # Name lookups

    async def get_item_name(self, version: str, item_id: int) -> str:
        data = await self.get_item_data(version)
        item = data.get(str(item_id))
        return item["name"] if item else f"Item {item_id}"

    def _find_rune(self, runes: List[Dict[str, Any]], rune_id: int) -> Optional[Dict[str, Any]]:
        for tree in runes:
            if tree.get("id") == rune_id:
                return tree
            for slot in tree.get("slots", []):
                for rune in slot.get("runes", []):
                    if rune.get("id") == rune_id:
                        return rune
        return None

    async def get_rune_name(self, version: str, rune_id: int) -> str:
        rune = self._find_rune(await self.get_rune_data(version), rune_id)
        return rune["name"] if rune else f"Rune {rune_id}"

    async def get_summoner_spell_name(self, version: str, spell_id: int) -> str:
        spell = await self._find_spell(version, spell_id)
        if spell:
            return spell["name"]
        return SUMMONER_SPELLS.get(spell_id, f"Spell {spell_id}")

    async def get_item_id_by_name(self, version: str, name: str) -> int:
        """Exact name match first, then partial match either way. 0 if nothing fits."""
        data = await self.get_item_data(version)
        wanted = name.lower().strip()
        if not wanted:
            return 0
        for item_id, item in data.items():
            if item.get("name", "").lower() == wanted:
                return int(item_id)
        for item_id, item in data.items():
            item_name = item.get("name", "").lower()
            if item_name and (wanted in item_name or item_name in wanted):
                return int(item_id)
        return 0

    async def get_rune_id_by_name(self, version: str, name: str) -> int:
        wanted = name.lower().strip()
        for tree in await self.get_rune_data(version):
            if tree.get("name", "").lower() == wanted:
                return tree["id"]
            for slot in tree.get("slots", []):
                for rune in slot.get("runes", []):
                    if rune.get("name", "").lower() == wanted:
                        return rune["id"]
        return 0

    async def resolve_champion_key(self, version: str, name: str) -> Optional[str]:
        """Map user text or a scraped name onto the Data Dragon champion key"""
        data = await self.get_champion_data(version)
        if not data or not name:
            return None
        if name in data:
            return name

        lowered = name.lower()
        for key, champ in data.items():
            if key.lower() == lowered or champ.get("name", "").lower() == lowered:
                return key

        wanted = normalize_champion_name(name)
        for key, champ in data.items():
            if wanted in (normalize_champion_name(key), normalize_champion_name(champ.get("name", ""))):
                return key
        return None

    # Image URLs

    async def get_item_image_url(self, version: str, item_id: int) -> str:
        """Empty string for the empty slot (0) and for IDs absent from this patch"""
        if not item_id:
            return ""
        data = await self.get_item_data(version)
        if str(item_id) not in data:
            return ""
        return f"{DDRAGON_BASE}/cdn/{version}/img/item/{item_id}.png"

    async def _find_spell(self, version: str, spell_id: int) -> Optional[Dict[str, Any]]:
        # summoner.json is keyed by internal name, the numeric id lives in "key"
        data = await self.get_summoner_spell_data(version)
        for spell in data.values():
            if spell.get("key") == str(spell_id):
                return spell
        return None

    async def get_summoner_spell_image_url(self, version: str, spell_id: int) -> str:
        spell = await self._find_spell(version, spell_id)
        if not spell:
            return ""
        return f"{DDRAGON_BASE}/cdn/{version}/img/spell/{spell['image']['full']}"

    async def get_rune_image_url(self, version: str, rune_id: int) -> str:
        rune = self._find_rune(await self.get_rune_data(version), rune_id)
        if not rune or not rune.get("icon"):
            return ""
        return self.get_rune_icon_url(rune["icon"])

    @staticmethod
    def get_rune_icon_url(icon_path: str) -> str:
        return f"{DDRAGON_BASE}/cdn/img/{icon_path}"

    @staticmethod
    def get_champion_image_url(version: str, champion_key: str) -> str:
        key = re.sub(r"[^A-Za-z0-9]", "", champion_key)
        return f"{DDRAGON_BASE}/cdn/{version}/img/champion/{key}.png"

    @staticmethod
    def get_champion_splash_url(champion_key: str, skin: int = 0) -> str:
        key = re.sub(r"[^A-Za-z0-9]", "", champion_key)
        return f"{DDRAGON_BASE}/cdn/img/champion/splash/{key}_{skin}.jpg"

    @staticmethod
    def get_stat_shard_image_url(filename: str) -> str:
        return f"{DDRAGON_BASE}/cdn/img/perk-images/StatMods/{filename}"
