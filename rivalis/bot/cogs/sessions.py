"""
rivalis.bot.cogs.sessions — Join-to-Create Voice Listener
=========================================================

Forwards every voice-state change to the
:class:`~rivalis.services.session_service.SessionLifecycleManager`.
Mute/deafen toggles (same channel before and after) are ignored.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord.ext import commands

if TYPE_CHECKING:
    from rivalis.bot.core import RivalisBot

logger = logging.getLogger(__name__)


class Sessions(commands.Cog, name="Sessions"):
    """Creates session rooms from the trigger VC and deletes empty ones."""

    def __init__(self, bot: RivalisBot) -> None:
        self.bot = bot

    @commands.Cog.listener()
    async def on_voice_state_update(
        self,
        member: discord.Member,
        before: discord.VoiceState,
        after: discord.VoiceState,
    ) -> None:
        """Dispatch channel changes; the manager logs and swallows its own errors."""
        if before.channel == after.channel:
            return
        logger.debug(
            "Gateway event: VOICE_STATE %s (%s → %s)",
            member.id,
            getattr(before.channel, "name", "None"),
            getattr(after.channel, "name", "None"),
        )
        await self.bot.sessions.handle_transition(member, before.channel, after.channel)


async def setup(bot: RivalisBot) -> None:
    await bot.add_cog(Sessions(bot))
