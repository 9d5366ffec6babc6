# lolbuild/lolbuild.py - Main cog class
import asyncio
import io
import logging
import os
from typing import List, Literal, Optional

import discord
from discord import app_commands
from redbot.core import Config, commands
from redbot.core.data_manager import cog_data_path
from redbot.core.i18n import Translator, cog_i18n

from .cache import BuildCache, ImageCache
from .constants import AUTOCOMPLETE_LIMIT, AUTOCOMPLETE_TIMEOUT, BUILD_CACHE_TTL
from .ddragon import DataDragonClient, VersionedAssetCache
from .embeds import BUILD_IMAGE_NAME, COUNTER_IMAGE_NAME, EmbedFactory
from .errors import ChampionNotFoundError
from .fetcher import HttpFetcher
from .handlers import LoLBuildErrorHandler
from .imagegen import ImageComposer
from .keepalive import KeepAliveServer
from .ratelimit import HostRateLimiter
from .resolvers import BuildResolver, CounterResolver
from .riot import RiotChallengerSource
from .settings import LoLBuildSettings
from .stats import CommandStats
from .validators import filter_champion_names, find_champion, sanitize_input, suggest_champions

logger = logging.getLogger("red.lolbuild")

_ = Translator("LoLBuild", __file__)

Role = Literal["top", "jungle", "middle", "adc", "support"]


@cog_i18n(_)
class LoLBuild(LoLBuildSettings, LoLBuildErrorHandler, commands.Cog):
    """League of Legends builds and counters scraped from public stats sites"""

    def __init__(self, bot):
        self.bot = bot
        self.config = Config.get_conf(self, identifier=4820173956, force_registration=True)

        default_global = {
            "riot_api_key": None,
            "dev_guild_ids": [],
            "keepalive_port": None,
            "image_cache": True,
        }
        self.config.register_global(**default_global)

        self.stats = CommandStats()
        self.keepalive: Optional[KeepAliveServer] = None
        self._sync_task: Optional[asyncio.Task] = None

        data_path = cog_data_path(self)
        self.fetcher = HttpFetcher(rate_limiter=HostRateLimiter())
        self.asset_cache = VersionedAssetCache()
        self.ddragon = DataDragonClient(self.fetcher, self.asset_cache)
        self.build_cache = BuildCache(data_path / "cache" / "builds", BUILD_CACHE_TTL)
        self.image_cache = ImageCache(data_path / "cache" / "images")
        self.riot_source = RiotChallengerSource(self.fetcher, self.get_riot_api_key)
        self.build_resolver = BuildResolver(self.ddragon, self.fetcher, self.build_cache,
                                            riot_source=self.riot_source)
        self.counter_resolver = CounterResolver(self.fetcher)
        self.composer = ImageComposer(self.ddragon, self.fetcher, self.image_cache)
        self.embeds = EmbedFactory(self.ddragon)

    async def cog_load(self):
        """Warm the patch version, clean stale cards and start background services"""
        if not await self.config.image_cache():
            self.composer.image_cache = None
        self.image_cache.clean_old()

        version = await self.ddragon.get_latest_version()
        logger.info(f"LoL Build loaded on patch {version}")

        await self.restart_keepalive()
        if await self.get_dev_guild_ids():
            self._sync_task = asyncio.create_task(self._sync_when_ready())

    async def cog_unload(self):
        """Clean shutdown"""
        if self._sync_task and not self._sync_task.done():
            self._sync_task.cancel()
        if self.keepalive:
            await self.keepalive.stop()
        await self.fetcher.close()

    async def red_delete_data_for_user(self, *, requester, user_id: int):
        """Only in-memory usage statistics reference users"""
        self.stats.forget_user(user_id)

    # Configuration helpers

    async def get_riot_api_key(self) -> Optional[str]:
        return await self.config.riot_api_key() or os.environ.get("RIOT_API_KEY") or None

    async def get_dev_guild_ids(self) -> List[int]:
        guild_ids = list(await self.config.dev_guild_ids())
        for raw in os.environ.get("DEV_GUILD_IDS", "").split(","):
            raw = raw.strip()
            if not raw:
                continue
            try:
                guild_id = int(raw)
            except ValueError:
                logger.warning(f"Ignoring invalid guild id in DEV_GUILD_IDS: {raw!r}")
                continue
            if guild_id not in guild_ids:
                guild_ids.append(guild_id)
        return guild_ids

    async def get_keepalive_port(self) -> Optional[int]:
        raw = os.environ.get("PORT")
        if raw:
            try:
                return int(raw)
            except ValueError:
                logger.warning(f"Ignoring invalid PORT value: {raw!r}")
        return await self.config.keepalive_port()

    async def restart_keepalive(self):
        if self.keepalive:
            await self.keepalive.stop()
            self.keepalive = None
        port = await self.get_keepalive_port()
        if not port:
            return
        try:
            server = KeepAliveServer(port)
            await server.start()
        except (ValueError, OSError) as e:
            logger.error(f"Could not start keep-alive server on port {port}: {e}")
            return
        self.keepalive = server

    async def sync_dev_guilds_commands(self, guild_ids: List[int]) -> int:
        """Copy global app commands to each guild and sync; returns commands synced"""
        synced = 0
        for guild_id in guild_ids:
            guild = discord.Object(id=guild_id)
            self.bot.tree.copy_global_to(guild=guild)
            try:
                commands_synced = await self.bot.tree.sync(guild=guild)
            except discord.HTTPException as e:
                logger.error(f"Failed to sync commands to guild {guild_id}: {e}")
                continue
            synced = max(synced, len(commands_synced))
            logger.info(f"Synced {len(commands_synced)} commands to guild {guild_id}")
        return synced

    async def _sync_when_ready(self):
        await self.bot.wait_until_red_ready()
        await self.sync_dev_guilds_commands(await self.get_dev_guild_ids())

    # Shared command flow

    async def _resolve_champion_name(self, champion: str, version: str) -> str:
        """Canonical display name, or ChampionNotFoundError with suggestions"""
        champion = sanitize_input(champion)
        names = await self.ddragon.get_all_champion_names(version)
        if not names:
            # Data Dragon is unreachable; let the build sites decide
            return champion
        match = find_champion(champion, names)
        if match is None:
            raise ChampionNotFoundError(champion, suggest_champions(champion, names))
        return match

    async def champion_autocomplete(self, interaction: discord.Interaction,
                                    current: str) -> List[app_commands.Choice[str]]:
        try:
            names = await asyncio.wait_for(self.ddragon.get_all_champion_names(), AUTOCOMPLETE_TIMEOUT)
        except asyncio.TimeoutError:
            logger.debug("Champion autocomplete timed out")
            return []
        return [
            app_commands.Choice(name=name, value=name)
            for name in filter_champion_names(names, current, AUTOCOMPLETE_LIMIT)
        ]

    def _record(self, ctx: commands.Context, success: bool, error: Optional[str] = None):
        self.stats.record(ctx.command.qualified_name, ctx.author.id,
                          ctx.guild.id if ctx.guild else None, success, error)

    # Commands

    @commands.hybrid_command(name="build")
    @commands.cooldown(1, 5, commands.BucketType.user)
    @app_commands.describe(champion="Champion name", role="Lane to get the build for")
    async def build(self, ctx: commands.Context, champion: str, role: Optional[Role] = None):
        """Get the recommended items, runes and spells for a champion"""
        async with ctx.typing():
            version = await self.ddragon.get_latest_version()
            name = await self._resolve_champion_name(champion, version)
            result = await self.build_resolver.resolve(name, role, version)
            if not result.success:
                self._record(ctx, False, result.error)
                await ctx.send(embed=EmbedFactory.not_found_embed(result.error))
                return

            png = await self.composer.render_build(name, result, version)
            file = discord.File(io.BytesIO(png), filename=BUILD_IMAGE_NAME) if png else None
            embed = await self.embeds.build_embed(result, version, with_image=file is not None)
            if file:
                await ctx.send(embed=embed, file=file)
            else:
                await ctx.send(embed=embed)
        self._record(ctx, True)

    @build.autocomplete("champion")
    async def build_champion_autocomplete(self, interaction: discord.Interaction, current: str):
        return await self.champion_autocomplete(interaction, current)

    @commands.hybrid_command(name="counter")
    @commands.cooldown(1, 5, commands.BucketType.user)
    @app_commands.describe(champion="Champion name")
    async def counter(self, ctx: commands.Context, champion: str):
        """Get the easiest and hardest lane matchups for a champion"""
        async with ctx.typing():
            version = await self.ddragon.get_latest_version()
            name = await self._resolve_champion_name(champion, version)
            result = await self.counter_resolver.resolve(name)
            if not result.success:
                self._record(ctx, False, result.error)
                await ctx.send(embed=EmbedFactory.not_found_embed(result.error))
                return

            png = await self.composer.render_counters(name, result, version)
            file = discord.File(io.BytesIO(png), filename=COUNTER_IMAGE_NAME) if png else None
            embed = await self.embeds.counter_embed(result, version, with_image=file is not None)
            if file:
                await ctx.send(embed=embed, file=file)
            else:
                await ctx.send(embed=embed)
        self._record(ctx, True)

    @counter.autocomplete("champion")
    async def counter_champion_autocomplete(self, interaction: discord.Interaction, current: str):
        return await self.champion_autocomplete(interaction, current)

    # Red owns the prefix ping and help commands, so these are slash only

    @app_commands.command(name="ping", description="Check the bot's latency")
    async def slash_ping(self, interaction: discord.Interaction):
        latency = self.bot.latency * 1000
        await interaction.response.send_message(f"🏓 Pong! Latency: {latency:.0f}ms")
        self.stats.record("ping", interaction.user.id, interaction.guild_id, True)

    @app_commands.command(name="help", description="Show the League build commands")
    async def slash_help(self, interaction: discord.Interaction):
        await interaction.response.send_message(embed=EmbedFactory.help_embed(), ephemeral=True)
        self.stats.record("help", interaction.user.id, interaction.guild_id, True)

    @app_commands.command(name="stats", description="Show command usage statistics")
    async def slash_stats(self, interaction: discord.Interaction):
        embed = EmbedFactory.stats_embed(self.stats.summary(), len(self.bot.guilds), self.bot.latency * 1000)
        await interaction.response.send_message(embed=embed)
        self.stats.record("stats", interaction.user.id, interaction.guild_id, True)
