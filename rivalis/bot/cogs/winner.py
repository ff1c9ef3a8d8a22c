"""
rivalis.bot.cogs.winner — /winner Slash Command
===============================================

``/winner user:<member>`` records a session win, reassigns the back-to-back
tier role and announces the result.  All logic lives in
:class:`~rivalis.services.streak_service.StreakTierEngine`; this cog only
binds it to the command tree and owns the last-resort error reply.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from rivalis.services.messages import build_failure_notice
from rivalis.services.streak_service import reply_private

if TYPE_CHECKING:
    from rivalis.bot.core import RivalisBot

logger = logging.getLogger(__name__)


class Winner(commands.Cog, name="Winner"):
    """Back-to-back winner streak command."""

    def __init__(self, bot: RivalisBot) -> None:
        self.bot = bot

    @app_commands.command(
        name="winner",
        description="Announce winner + apply Rivalis back-to-back tier role",
    )
    @app_commands.describe(user="Winner of the session")
    @app_commands.guild_only()
    async def winner(self, interaction: discord.Interaction, user: discord.User) -> None:
        """Record a win for *user*."""
        await self.bot.streaks.report_winner(interaction, user)

    # -------------------------------------------------------------------
    # Anything the service did not turn into a reply (e.g. store write errors)
    # -------------------------------------------------------------------
    async def cog_app_command_error(
        self, interaction: discord.Interaction, error: app_commands.AppCommandError,
    ) -> None:
        original = getattr(error, "original", error)
        logger.error(
            "/winner crashed in guild %s: %s", interaction.guild_id, original,
            exc_info=original,
        )
        try:
            await reply_private(interaction, build_failure_notice(forbidden=False))
        except discord.HTTPException:
            logger.exception("Could not deliver /winner error reply")


async def setup(bot: RivalisBot) -> None:
    await bot.add_cog(Winner(bot))
