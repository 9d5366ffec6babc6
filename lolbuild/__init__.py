"""
LoL Build Cog for Red-DiscordBot

Champion builds and lane counters for League of Legends:
- /build and /counter with champion autocomplete
- Builds scraped from Mobalytics with LeagueOfGraphs as fallback
- Optional Riot API challenger builds when a key is configured
- Rendered PNG summary cards using Riot Data Dragon assets

Red-DiscordBot Version: 3.5.0+
"""

import logging

logger = logging.getLogger(__name__)

try:
    from .lolbuild import LoLBuild
    COG_LOADED = True
except ImportError as e:
    logger.error(f"Failed to import LoL Build cog: {e}")
    COG_LOADED = False
    LoLBuild = None

__red_end_user_data_statement__ = (
    "This cog does not persist any user data. "
    "Command usage (command name, user ID, server ID) is kept in memory for the /stats command "
    "and is discarded when the cog unloads. "
    "A Riot API key may be stored globally by the bot owner."
)

__version__ = "1.0.0"


async def setup(bot):
    """Load the LoL Build cog"""
    if not COG_LOADED or LoLBuild is None:
        raise RuntimeError(
            "LoL Build cog failed to load. Check the following:\n"
            "1. Dependencies are installed: pip install aiohttp beautifulsoup4 Pillow\n"
            "2. Check bot logs for specific error details"
        )
    await bot.add_cog(LoLBuild(bot))
    logger.info("LoL Build cog added to bot successfully")


__all__ = ["LoLBuild", "setup", "__version__"]
