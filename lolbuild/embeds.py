# lolbuild/embeds.py - Discord embeds for builds, counters and info commands
import time
from datetime import datetime, timezone
from typing import List, Optional

import discord

from .constants import (
    EMBED_COLOR_BUILD,
    EMBED_COLOR_COUNTER,
    EMBED_COLOR_ERROR,
    EMBED_COLOR_INFO,
    SUMMONER_SPELLS,
)
from .models import BuildResult, CounterEntry, CounterResult
from .resolvers import mobalytics_build_url, mobalytics_counters_url
from .validators import normalize_champion_name

BUILD_IMAGE_NAME = "build-summary.png"
COUNTER_IMAGE_NAME = "counter-matchups.png"


class EmbedFactory:
    """Builds the embeds posted by the cog"""

    def __init__(self, ddragon):
        self.ddragon = ddragon

    async def _thumbnail(self, version: str, champion: str) -> str:
        key = await self.ddragon.resolve_champion_key(version, champion) or champion
        return self.ddragon.get_champion_image_url(version, key)

    async def build_embed(self, build: BuildResult, version: str, with_image: bool) -> discord.Embed:
        slug = normalize_champion_name(build.champion)
        role = build.role if build.role not in ("Popular", "Unknown") else None
        embed = discord.Embed(
            title=f"📊 {build.champion} Build",
            url=mobalytics_build_url(slug, role),
            description=(
                f"**Role:** {build.role}\n"
                f"**Win Rate:** {build.win_rate} • **Pick Rate:** {build.pick_rate} • "
                f"**Matches:** {build.match_count}"
            ),
            color=EMBED_COLOR_BUILD,
            timestamp=datetime.now(timezone.utc),
        )
        embed.set_thumbnail(url=await self._thumbnail(version, build.champion))

        items = build.items.core or build.items.all_items()
        item_lines = []
        for item_id in items[:6]:
            name = await self.ddragon.get_item_name(version, item_id)
            url = await self.ddragon.get_item_image_url(version, item_id)
            item_lines.append(f"[{name}]({url})" if url else name)
        embed.add_field(name="📦 Core Items", value="\n".join(item_lines) or "No data", inline=False)

        spells = []
        for spell_id in build.spells[:2]:
            spells.append(SUMMONER_SPELLS.get(spell_id) or await self.ddragon.get_summoner_spell_name(version, spell_id))
        embed.add_field(name="✨ Summoner Spells", value=" + ".join(spells) or "No data", inline=True)

        primary = await self.ddragon.get_rune_name(version, build.runes.primary_tree) if build.runes.primary_tree else "N/A"
        secondary = await self.ddragon.get_rune_name(version, build.runes.secondary_tree) if build.runes.secondary_tree else "N/A"
        keystone = ""
        if build.runes.perks:
            keystone = f"\nKeystone: {await self.ddragon.get_rune_name(version, build.runes.perks[0])}"
        embed.add_field(
            name="🔮 Runes",
            value=f"Primary: {primary}\nSecondary: {secondary}{keystone}",
            inline=True,
        )

        embed.set_footer(text=f"{build.source or 'Meta Build'} | LoL v{version}")
        if with_image:
            embed.set_image(url=f"attachment://{BUILD_IMAGE_NAME}")
        return embed

    @staticmethod
    def _format_matchups(entries: List[CounterEntry]) -> str:
        if not entries:
            return "No data"
        return "\n".join(
            f"**{i}.** {entry.name} ({entry.win_rate})" for i, entry in enumerate(entries, 1)
        )

    async def counter_embed(self, counters: CounterResult, version: str, with_image: bool) -> discord.Embed:
        embed = discord.Embed(
            title=f"⚔️ {counters.champion} Counter",
            url=mobalytics_counters_url(normalize_champion_name(counters.champion)),
            color=EMBED_COLOR_COUNTER,
            timestamp=datetime.now(timezone.utc),
        )
        embed.set_thumbnail(url=await self._thumbnail(version, counters.champion))
        embed.add_field(name="✅ Easy Matchups (you win lane)",
                        value=self._format_matchups(counters.easy), inline=True)
        embed.add_field(name="❌ Hard Matchups (you lose lane)",
                        value=self._format_matchups(counters.hard), inline=True)
        embed.set_footer(text=f"{counters.source} | LoL v{version}")
        if with_image:
            embed.set_image(url=f"attachment://{COUNTER_IMAGE_NAME}")
        return embed

    @staticmethod
    def not_found_embed(message: str, tip: Optional[str] = None) -> discord.Embed:
        embed = discord.Embed(
            title="❌ No Data Found",
            description=message,
            color=EMBED_COLOR_ERROR,
            timestamp=datetime.now(timezone.utc),
        )
        embed.set_footer(text=tip or "Check the champion name or try again later.")
        return embed

    @staticmethod
    def help_embed() -> discord.Embed:
        embed = discord.Embed(
            title="📚 LoL Build - Commands",
            description="Champion builds and matchups scraped from public stats sites.",
            color=EMBED_COLOR_INFO,
        )
        embed.add_field(
            name="🎮 League of Legends",
            value=(
                "`/build <champion> [role]` - Recommended items, runes and spells\n"
                "`/counter <champion>` - Easy and hard lane matchups"
            ),
            inline=False,
        )
        embed.add_field(
            name="⚙️ General",
            value=(
                "`/ping` - Bot latency\n"
                "`/stats` - Command usage statistics\n"
                "`/help` - This message"
            ),
            inline=False,
        )
        embed.add_field(
            name="📊 Sources",
            value="Mobalytics, LeagueOfGraphs, Riot Data Dragon",
            inline=False,
        )
        return embed

    @staticmethod
    def stats_embed(summary: dict, guild_count: int, latency_ms: float) -> discord.Embed:
        embed = discord.Embed(title="📊 Usage Statistics", color=0x5865F2,
                              timestamp=datetime.now(timezone.utc))
        embed.add_field(
            name="📈 Overall",
            value=(
                f"Total commands: **{summary['total']}**\n"
                f"Last hour: **{summary['last_hour']}**\n"
                f"Last 24h: **{summary['last_day']}**\n"
                f"Success rate: **{summary['success_rate']}**"
            ),
            inline=True,
        )
        most_used = summary.get("most_used") or []
        embed.add_field(
            name="🔥 Most Used",
            value="\n".join(f"`/{name}` - {count}" for name, count in most_used) or "No data",
            inline=True,
        )
        started = int(time.time() - summary.get("uptime", 0))
        embed.add_field(
            name="🤖 Bot",
            value=(
                f"Servers: **{guild_count}**\n"
                f"Users tracked: **{summary['unique_users']}**\n"
                f"Latency: **{latency_ms:.0f}ms**\n"
                f"Tracking since <t:{started}:R>"
            ),
            inline=False,
        )
        return embed
