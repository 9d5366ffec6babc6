# lolbuild/riot.py - Challenger match build source (Riot API)
import logging
import random
from typing import Any, Awaitable, Callable, Dict, List, Optional

from .constants import (
    BOOTS_IDS,
    CHALLENGER_MATCHES_TO_CHECK,
    CHALLENGER_SAMPLE_SIZE,
    RANKED_SOLO_QUEUE,
    RIOT_PLATFORM,
    RIOT_ROUTING,
)
from .models import BuildResult, ItemSet, RuneSelection
from .validators import normalize_champion_name

logger = logging.getLogger("red.lolbuild.riot")

TRINKETS = frozenset({3340, 3363, 3364, 3330, 2052})


def participant_to_build(participant: Dict[str, Any], source: str) -> BuildResult:
    """Turn one match-v5 participant into a build"""
    item_ids = [participant.get(f"item{i}", 0) for i in range(7)]
    item_ids = [i for i in item_ids if i and i not in TRINKETS]

    styles = participant.get("perks", {}).get("styles", [])
    perks: List[int] = []
    for style in styles[:2]:
        perks.extend(sel.get("perk", 0) for sel in style.get("selections", []))
    stat_perks = participant.get("perks", {}).get("statPerks", {})
    perks.extend(stat_perks.get(k) for k in ("offense", "flex", "defense") if stat_perks.get(k))

    position = participant.get("teamPosition") or participant.get("individualPosition") or ""
    return BuildResult(
        success=True,
        champion=participant.get("championName", ""),
        role=position.capitalize() if position and position != "Invalid" else "Popular",
        win_rate="Win" if participant.get("win") else "Loss",
        match_count="1",
        items=ItemSet(
            core=[i for i in item_ids if i not in BOOTS_IDS],
            boots=[i for i in item_ids if i in BOOTS_IDS][:1],
        ),
        runes=RuneSelection(
            primary_tree=styles[0].get("style", 0) if styles else 0,
            secondary_tree=styles[1].get("style", 0) if len(styles) > 1 else 0,
            perks=perks,
        ),
        spells=[participant.get("summoner1Id", 4), participant.get("summoner2Id", 12)],
        source=source,
    )


class RiotChallengerSource:
    """Finds a recent ranked game of the champion among sampled Challenger players"""

    name = "Riot API (Challenger)"

    def __init__(self, fetcher, api_key_getter: Callable[[], Awaitable[Optional[str]]],
                 platform: str = RIOT_PLATFORM, routing: str = RIOT_ROUTING):
        self.fetcher = fetcher
        self.get_api_key = api_key_getter
        self.platform = platform
        self.routing = routing

    async def _request(self, url: str, api_key: str):
        result = await self.fetcher.fetch_json(url, headers={"X-Riot-Token": api_key})
        if not result.ok:
            if result.status == 403:
                logger.error("Riot API key rejected (403)")
            elif result.status == 429:
                logger.warning("Riot API rate limit exceeded")
            return None
        return result.data

    async def fetch_build(self, champion: str, role: Optional[str] = None) -> Optional[BuildResult]:
        """None when no key is set or no matching game was found"""
        api_key = await self.get_api_key()
        if not api_key:
            return None

        league = await self._request(
            f"https://{self.platform}.api.riotgames.com/lol/league/v4/"
            f"challengerleagues/by-queue/RANKED_SOLO_5x5",
            api_key,
        )
        entries = (league or {}).get("entries") or []
        if not entries:
            return None

        wanted = normalize_champion_name(champion)
        sample = random.sample(entries, min(CHALLENGER_SAMPLE_SIZE, len(entries)))
        for player in sample:
            puuid = player.get("puuid")
            if not puuid:
                continue
            match_ids = await self._request(
                f"https://{self.routing}.api.riotgames.com/lol/match/v5/matches/by-puuid/"
                f"{puuid}/ids?queue={RANKED_SOLO_QUEUE}&count={CHALLENGER_MATCHES_TO_CHECK}",
                api_key,
            )
            for match_id in match_ids or []:
                match = await self._request(
                    f"https://{self.routing}.api.riotgames.com/lol/match/v5/matches/{match_id}",
                    api_key,
                )
                participants = ((match or {}).get("info") or {}).get("participants", [])
                participant = next((p for p in participants if p.get("puuid") == puuid), None)
                if participant is None:
                    continue
                if normalize_champion_name(participant.get("championName", "")) != wanted:
                    continue
                if role and participant.get("teamPosition", "").lower() not in ("", _riot_position(role)):
                    continue
                logger.info(f"Found challenger game {match_id} on {participant.get('championName')}")
                return participant_to_build(participant, self.name)

        logger.info(f"No recent challenger game on {champion}")
        return None


def _riot_position(role: str) -> str:
    return {
        "top": "top",
        "jungle": "jungle",
        "mid": "middle",
        "middle": "middle",
        "adc": "bottom",
        "bot": "bottom",
        "bottom": "bottom",
        "support": "utility",
        "sup": "utility",
    }.get(role.lower(), role.lower())
