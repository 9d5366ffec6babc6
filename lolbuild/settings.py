# lolbuild/settings.py - Owner settings and maintenance commands
import logging
from datetime import datetime, timezone

import discord
from redbot.core import checks, commands
from redbot.core.utils.chat_formatting import humanize_list

from .constants import EMBED_COLOR_INFO

logger = logging.getLogger("red.lolbuild.settings")


class LoLBuildSettings:
    """Mixin class containing settings and admin commands"""

    @commands.group(name="lolbuildset", aliases=["lbset"])
    @checks.is_owner()
    async def lolbuild_settings(self, ctx: commands.Context):
        """LoL Build cog settings"""
        pass

    @lolbuild_settings.command(name="info", aliases=["status"])
    async def settings_info(self, ctx: commands.Context):
        """Show patch, cache and rate limit status"""
        version = await self.ddragon.get_latest_version()
        api_key = await self.get_riot_api_key()
        dev_guilds = await self.get_dev_guild_ids()
        port = await self.get_keepalive_port()

        embed = discord.Embed(title="⚙️ LoL Build Status", color=EMBED_COLOR_INFO,
                              timestamp=datetime.now(timezone.utc))
        embed.add_field(name="Patch", value=version, inline=True)
        embed.add_field(name="Riot API key", value="✅ Set" if api_key else "❌ Not set", inline=True)
        embed.add_field(
            name="Keep-alive",
            value=f"Port {port}" if port and self.keepalive and self.keepalive.running else "Off",
            inline=True,
        )
        embed.add_field(
            name="Dev guilds",
            value=humanize_list([str(g) for g in dev_guilds]) if dev_guilds else "None",
            inline=False,
        )

        build_stats = self.build_cache.get_stats()
        asset_stats = self.asset_cache.get_stats()
        embed.add_field(
            name="💾 Caches",
            value=(
                f"Builds on disk: {build_stats['size']} (hit rate {build_stats['hit_rate']})\n"
                f"Static data: {humanize_list(asset_stats['tables']) or 'empty'} "
                f"(hit rate {asset_stats['hit_rate']})\n"
                f"Card cache: {'on' if await self.config.image_cache() else 'off'}"
            ),
            inline=False,
        )
        limits = self.fetcher.rate_limiter.get_status()
        embed.add_field(
            name="🚦 Rate Limits",
            value="\n".join(
                f"{host}: {', '.join(f'{used} per {window}' for window, used in windows.items())}"
                for host, windows in limits.items()
            ),
            inline=False,
        )
        await ctx.send(embed=embed)

    @lolbuild_settings.command(name="apikey")
    async def set_api_key(self, ctx: commands.Context, *, api_key: str = None):
        """Set or clear the Riot API key used for challenger builds

        Leave empty to clear. Falls back to the RIOT_API_KEY environment variable.
        Get your API key from: https://developer.riotgames.com/
        """
        await self.config.riot_api_key.set(api_key)
        await ctx.send("✅ API key has been set." if api_key else "✅ API key cleared.")
        if api_key:
            try:
                await ctx.message.delete()
            except discord.HTTPException:
                pass

    @lolbuild_settings.group(name="devguild")
    async def dev_guild(self, ctx: commands.Context):
        """Guilds that receive slash commands immediately"""
        pass

    @dev_guild.command(name="add")
    async def dev_guild_add(self, ctx: commands.Context, guild_id: int):
        """Add a development guild"""
        async with self.config.dev_guild_ids() as guild_ids:
            if guild_id not in guild_ids:
                guild_ids.append(guild_id)
        await ctx.send(f"✅ Added `{guild_id}`. Run `{ctx.clean_prefix}lolbuildset sync` to push commands.")

    @dev_guild.command(name="remove", aliases=["del"])
    async def dev_guild_remove(self, ctx: commands.Context, guild_id: int):
        """Remove a development guild"""
        async with self.config.dev_guild_ids() as guild_ids:
            if guild_id in guild_ids:
                guild_ids.remove(guild_id)
        await ctx.send(f"✅ Removed `{guild_id}`.")

    @lolbuild_settings.command(name="sync")
    async def sync_dev_guilds(self, ctx: commands.Context):
        """Copy global slash commands to each development guild and sync them

        Enable the cog's slash commands first with `[p]slash enablecog LoLBuild`.
        """
        guild_ids = await self.get_dev_guild_ids()
        if not guild_ids:
            await ctx.send("No development guilds configured.")
            return
        async with ctx.typing():
            synced = await self.sync_dev_guilds_commands(guild_ids)
        await ctx.send(f"✅ Synced {synced} command(s) to {len(guild_ids)} guild(s).")

    @lolbuild_settings.command(name="port")
    async def set_port(self, ctx: commands.Context, port: int = None):
        """Set the keep-alive HTTP port, or leave empty to disable

        The PORT environment variable takes precedence.
        """
        if port is not None and not 1 <= port <= 65535:
            await ctx.send("❌ Port must be between 1 and 65535.")
            return
        await self.config.keepalive_port.set(port)
        await self.restart_keepalive()
        await ctx.send(f"✅ Keep-alive port set to `{port}`." if port else "✅ Keep-alive disabled.")

    @lolbuild_settings.command(name="imagecache")
    async def toggle_image_cache(self, ctx: commands.Context, enabled: bool):
        """Toggle caching of rendered build cards"""
        await self.config.image_cache.set(enabled)
        self.composer.image_cache = self.image_cache if enabled else None
        await ctx.send(f"✅ Card cache {'enabled' if enabled else 'disabled'}.")

    @lolbuild_settings.command(name="clearcache")
    async def clear_cache(self, ctx: commands.Context):
        """Clear cached builds, cards and static data"""
        builds = self.build_cache.clear()
        images = self.image_cache.clear()
        self.asset_cache.init()
        await self.ddragon.get_latest_version(force_refresh=True)
        logger.info(f"Cache cleared by {ctx.author} ({builds} builds, {images} cards)")
        await ctx.send(f"✅ Cleared {builds} cached build(s) and {images} card(s).")
