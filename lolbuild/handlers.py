# lolbuild/handlers.py - Command error handling
import logging
from datetime import datetime, timezone

import discord
from discord import app_commands
from discord.ext.commands import HybridCommandError
from discord.ext.commands.hybrid import HybridAppCommand
from redbot.core import commands

from .constants import EMBED_COLOR_ERROR
from .errors import ChampionNotFoundError, ImageRenderError, InvalidRoleError, NotFoundError, UpstreamError

logger = logging.getLogger("red.lolbuild.handlers")


def unwrap(error: Exception) -> Exception:
    """Strip the invoke wrappers added by prefix, hybrid and slash dispatch"""
    wrappers = (commands.CommandInvokeError, HybridCommandError, app_commands.CommandInvokeError)
    while isinstance(error, wrappers) and getattr(error, "original", None) is not None:
        error = error.original
    return error


class ErrorHandler:
    """Centralized error handling for the lolbuild cog"""

    @staticmethod
    def build_embed(error: Exception, command_name: str = "command") -> discord.Embed:
        error = unwrap(error)
        embed = discord.Embed(color=EMBED_COLOR_ERROR, timestamp=datetime.now(timezone.utc))

        if isinstance(error, (commands.CommandOnCooldown, app_commands.CommandOnCooldown)):
            embed.title = "⏱️ Command on Cooldown"
            embed.description = f"Try again in {error.retry_after:.1f} seconds."

        elif isinstance(error, commands.MissingRequiredArgument):
            embed.title = "❓ Missing Argument"
            embed.description = f"Missing required argument: `{error.param.name}`"

        elif isinstance(error, (commands.BadArgument, InvalidRoleError)):
            embed.title = "❌ Invalid Argument"
            embed.description = str(error)

        elif isinstance(error, (commands.CheckFailure, app_commands.CheckFailure)):
            embed.title = "🚫 Permission Denied"
            if isinstance(error, commands.NotOwner):
                embed.description = "This command is only available to the bot owner."
            else:
                embed.description = "You don't have permission to use this command."

        elif isinstance(error, ChampionNotFoundError):
            embed.title = "👤 Champion Not Found"
            embed.description = str(error)
            if error.suggestions:
                embed.add_field(
                    name="💡 Did you mean",
                    value=", ".join(f"`{s}`" for s in error.suggestions),
                    inline=False,
                )

        elif isinstance(error, NotFoundError):
            embed.title = "❌ No Data Found"
            embed.description = str(error)

        elif isinstance(error, UpstreamError):
            embed.title = "🔧 Source Unavailable"
            embed.description = str(error)
            if error.status_code:
                embed.add_field(name="Status Code", value=str(error.status_code), inline=True)

        elif isinstance(error, ImageRenderError):
            embed.title = "🎨 Image Error"
            embed.description = str(error)

        else:
            logger.error(f"Unexpected error in {command_name}: {type(error).__name__}: {error}", exc_info=error)
            embed.title = "💥 Unexpected Error"
            embed.description = "Something went wrong. The error has been logged."

        return embed

    @classmethod
    async def handle_command_error(cls, ctx: commands.Context, error: Exception):
        """Send a user-friendly error for prefix and hybrid invocations"""
        embed = cls.build_embed(error, str(ctx.command))
        try:
            await ctx.send(embed=embed, ephemeral=True)
        except discord.HTTPException:
            try:
                await ctx.send(f"❌ {embed.title}: {embed.description}")
            except discord.HTTPException:
                logger.warning(f"Could not deliver error message for {ctx.command}")

    @classmethod
    async def handle_app_command_error(cls, interaction: discord.Interaction, error: Exception):
        """Same as handle_command_error, for pure slash commands"""
        command_name = interaction.command.name if interaction.command else "command"
        embed = cls.build_embed(error, command_name)
        try:
            if interaction.response.is_done():
                await interaction.followup.send(embed=embed, ephemeral=True)
            else:
                await interaction.response.send_message(embed=embed, ephemeral=True)
        except discord.HTTPException:
            logger.warning(f"Could not deliver error message for /{command_name}")


class LoLBuildErrorHandler:
    """Mixin class for error handling in commands"""

    async def cog_command_error(self, ctx: commands.Context, error: commands.CommandError):
        if getattr(self, "stats", None) is not None and ctx.command is not None:
            self.stats.record(ctx.command.qualified_name, ctx.author.id,
                              ctx.guild.id if ctx.guild else None, False, str(unwrap(error)))
        await ErrorHandler.handle_command_error(ctx, error)

    async def cog_app_command_error(self, interaction: discord.Interaction,
                                    error: app_commands.AppCommandError):
        if isinstance(interaction.command, HybridAppCommand):
            # Hybrid commands already went through cog_command_error
            return
        if getattr(self, "stats", None) is not None and interaction.command is not None:
            self.stats.record(interaction.command.name, interaction.user.id,
                              interaction.guild_id, False, str(unwrap(error)))
        await ErrorHandler.handle_app_command_error(interaction, error)
