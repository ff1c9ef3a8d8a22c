"""
rivalis.services.streak_service — Back-to-Back Winner Streaks
=============================================================

**Why this file exists:**
``/winner`` is the only command the bot has.  One report:

1. fetches the winner as a guild member (fresh role list),
2. extends or restarts their streak and **persists it first** — the store is
   authoritative, roles are a repairable projection of it,
3. strips every configured tier role and grants the one the new streak
   earns (at most one tier role, re-derived on every win); when the run
   changes hands the previous holder's tier role is stripped too,
4. posts the result to the results channel, or — if that channel does not
   exist — hands the same text back privately with a setup hint.

Steps 2–3 hold the guild's streak lock, so concurrent reports cannot lose an
update or leave a member with two tier roles.

Error policy:

* Store write failures propagate (hard command failure).
* Discord failures while fetching the member or in steps 3–4 are logged and
  answered with a private failure notice.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

import discord

from rivalis.constants import REASON_TIER_UPDATE
from rivalis.database.locks import KeyedLocks
from rivalis.engine.tiers import is_tier_role, record_win, resolve_tier
from rivalis.services.messages import (
    ANNOUNCED_CONFIRMATION,
    GUILD_ONLY,
    build_failure_notice,
    build_private_result,
    build_winner_message,
)

if TYPE_CHECKING:
    from rivalis.config import RivalisConfig, TierDefinition
    from rivalis.database.store import JsonStateStore
    from rivalis.services.directory_service import DirectoryResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class WinnerOutcome:
    """What a completed report did."""

    winner_id: int
    streak: int
    tier: TierDefinition | None
    message: str
    announced: bool

    @property
    def tier_label(self) -> str | None:
        return self.tier.label if self.tier is not None else None


async def reply_private(interaction: discord.Interaction, content: str) -> None:
    """Ephemeral reply that works whether or not the interaction was deferred."""
    if interaction.response.is_done():
        await interaction.followup.send(content, ephemeral=True)
    else:
        await interaction.response.send_message(content, ephemeral=True)


class StreakTierEngine:
    """Records wins, reassigns tier roles and announces results."""

    def __init__(
        self,
        cfg: RivalisConfig,
        store: JsonStateStore,
        directory: DirectoryResolver,
        locks: KeyedLocks | None = None,
    ) -> None:
        self.cfg = cfg
        self.store = store
        self.directory = directory
        self.locks = locks or KeyedLocks()

    # -------------------------------------------------------------------
    # Command entry
    # -------------------------------------------------------------------
    async def report_winner(
        self, interaction: discord.Interaction, winner: discord.abc.User,
    ) -> WinnerOutcome | None:
        """Handle ``/winner``.  Returns ``None`` when a private error was sent."""
        guild = interaction.guild
        if guild is None:
            await reply_private(interaction, GUILD_ONLY)
            return None

        # Role and channel work can exceed the 3 s interaction window.
        await interaction.response.defer(ephemeral=True, thinking=True)

        try:
            member = await guild.fetch_member(winner.id)
        except discord.HTTPException as exc:
            return await self._fail(interaction, exc, winner.id)

        async with self.locks.hold(("streak", guild.id)):
            previous_id = self.store.get_or_create(guild.id).last_winner_id
            streak = self.record(guild.id, member.id)
            try:
                tier = await self.apply_tier_roles(guild, member, streak)
                if previous_id is not None and previous_id != member.id:
                    await self.revoke_tier_roles(guild, previous_id)
            except discord.HTTPException as exc:
                return await self._fail(interaction, exc, member.id)

        message = build_winner_message(member.id, streak, tier)
        try:
            announced = await self.announce(interaction, guild, message)
        except discord.HTTPException as exc:
            return await self._fail(interaction, exc, member.id)

        logger.info(
            "Winner %s in guild %s: streak=%d tier=%s announced=%s",
            member.id, guild.id, streak, tier.label if tier else None, announced,
        )
        return WinnerOutcome(
            winner_id=member.id,
            streak=streak,
            tier=tier,
            message=message,
            announced=announced,
        )

    # -------------------------------------------------------------------
    # Steps
    # -------------------------------------------------------------------
    def record(self, guild_id: int, winner_id: int) -> int:
        """Update and persist the guild's streak state.

        Store errors propagate, and the in-memory state is rolled back so a
        failed report is never counted by a later save.
        """
        state = self.store.get_or_create(guild_id)
        previous_winner = state.last_winner_id
        previous_streak = state.winner_streaks.get(winner_id)

        streak = record_win(state, winner_id)
        try:
            self.store.save()
        except OSError:
            state.last_winner_id = previous_winner
            if previous_streak is None:
                del state.winner_streaks[winner_id]
            else:
                state.winner_streaks[winner_id] = previous_streak
            raise
        return streak

    async def apply_tier_roles(
        self, guild: discord.Guild, member: discord.Member, streak: int,
    ) -> TierDefinition | None:
        """Clear every tier role, then grant the one *streak* earns (if any).

        The clear is unconditional even when the member already holds the
        right tier; that costs one redundant remove/add pair per repeat win.
        """
        await self._strip_tier_roles(member)

        tier = resolve_tier(self.cfg.tiers, streak)
        if tier is not None:
            role = await self.directory.resolve_role(guild, tier.label)
            await member.add_roles(role, reason=f"Rivalis winner streak: {streak}")
        return tier

    async def revoke_tier_roles(self, guild: discord.Guild, user_id: int) -> None:
        """Strip the tier of a streak holder whose run was just broken."""
        try:
            member = await guild.fetch_member(user_id)
        except discord.NotFound:
            logger.debug("Previous winner %s left guild %s; nothing to revoke", user_id, guild.id)
            return
        await self._strip_tier_roles(member)

    async def _strip_tier_roles(self, member: discord.Member) -> None:
        stale = [r for r in member.roles if is_tier_role(r.name, self.cfg.tiers)]
        if stale:
            await member.remove_roles(*stale, reason=REASON_TIER_UPDATE)

    async def announce(
        self, interaction: discord.Interaction, guild: discord.Guild, message: str,
    ) -> bool:
        """Post publicly if the results channel exists, else reply privately.

        Returns ``True`` when the public post was made.
        """
        channel = self.directory.resolve_announce_channel(guild)
        if channel is not None:
            await channel.send(content=message)
            await reply_private(interaction, ANNOUNCED_CONFIRMATION)
            return True

        await reply_private(
            interaction, build_private_result(message, self.cfg.announce_channel_name),
        )
        return False

    async def _fail(
        self, interaction: discord.Interaction, exc: Exception, winner_id: int,
    ) -> None:
        logger.error(
            "/winner failed for user %s in guild %s: %s",
            winner_id, interaction.guild_id, exc, exc_info=exc,
        )
        forbidden = isinstance(exc, discord.Forbidden)
        try:
            await reply_private(interaction, build_failure_notice(forbidden=forbidden))
        except discord.HTTPException:
            logger.exception("Could not deliver failure notice for /winner")
        return None
