"""
rivalis.services.session_service — Join-to-Create Session Rooms
================================================================

Turns one trigger voice channel into a factory of temporary session rooms:

* **Entry** — a member lands in the trigger VC → create
  ``<prefix><display name>`` under the session category (capped at
  ``session_user_limit``) and move them into it.
* **Exit** — a member leaves a session room → if the room is now empty,
  delete it.

Nothing is remembered between events.  A session room is recognised purely
by structure (voice channel + name prefix) and its occupancy is read from the
guild at the moment of decision, so restarts and concurrent joins/leaves
cannot leak rooms.

Errors never escape :meth:`SessionLifecycleManager.handle_transition`; the
voice path only logs.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import discord

from rivalis.constants import REASON_MOVE, REASON_SESSION, REASON_SESSION_END

if TYPE_CHECKING:
    from rivalis.config import RivalisConfig
    from rivalis.services.directory_service import DirectoryResolver

logger = logging.getLogger(__name__)


def is_session_channel(channel: Any, prefix: str) -> bool:
    """True if *channel* is a voice channel whose name carries the session prefix."""
    if channel is None:
        return False
    if channel.type != discord.ChannelType.voice:
        return False
    return channel.name.startswith(prefix)


class SessionLifecycleManager:
    """Drives session-room creation and cleanup from voice-state transitions."""

    def __init__(self, cfg: RivalisConfig, directory: DirectoryResolver) -> None:
        self.cfg = cfg
        self.directory = directory

    def session_name(self, member: discord.Member) -> str:
        return f"{self.cfg.session_prefix}{member.display_name}"

    async def handle_transition(
        self,
        member: discord.Member,
        before: discord.abc.GuildChannel | None,
        after: discord.abc.GuildChannel | None,
    ) -> None:
        """Process one voice-state change.  Never raises."""
        try:
            await self._handle(member, before, after)
        except Exception:
            logger.exception(
                "Voice transition failed for member %s (%s → %s)",
                member.id,
                getattr(before, "name", None),
                getattr(after, "name", None),
            )

    async def _handle(
        self,
        member: discord.Member,
        before: discord.abc.GuildChannel | None,
        after: discord.abc.GuildChannel | None,
    ) -> None:
        guild = member.guild

        # Resolve (and heal) the layout on every event.
        category = await self.directory.resolve_category(guild)
        trigger = await self.directory.resolve_trigger(guild, category)

        before_id = before.id if before is not None else None
        after_id = after.id if after is not None else None

        # --- Entry: joined the trigger VC ---
        if after_id == trigger.id and before_id != trigger.id:
            await self._open_session(guild, member, category)

        # --- Exit: left a session room ---
        if is_session_channel(before, self.cfg.session_prefix):
            await self._close_if_empty(guild, before)

    async def _open_session(
        self,
        guild: discord.Guild,
        member: discord.Member,
        category: discord.CategoryChannel,
    ) -> None:
        name = self.session_name(member)
        try:
            room = await guild.create_voice_channel(
                name,
                category=category,
                user_limit=self.cfg.session_user_limit,
                reason=REASON_SESSION,
            )
            logger.info("Opened session room '%s' (ID: %d) for %s", name, room.id, member.id)
            await member.move_to(room, reason=REASON_MOVE)
        except discord.HTTPException:
            # A half-created room is left to the exit path or to operators.
            logger.exception("Could not open session room '%s' for member %s", name, member.id)

    async def _close_if_empty(self, guild: discord.Guild, channel: discord.abc.GuildChannel) -> None:
        # Fresh read: another task may have deleted it or someone may have joined.
        live = guild.get_channel(channel.id)
        if live is None:
            logger.debug("Session room %d already gone", channel.id)
            return
        if len(live.members) > 0:
            return
        try:
            await live.delete(reason=REASON_SESSION_END)
            logger.info("Closed empty session room '%s' (ID: %d)", live.name, live.id)
        except discord.NotFound:
            logger.debug("Session room %d was deleted concurrently", channel.id)
