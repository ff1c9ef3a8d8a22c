"""
rivalis.services.directory_service — Name-Based Directory Resolution
=====================================================================

Finds (or creates) the channels and roles the bot depends on **by name**,
never by a stored id.  Operators can delete or recreate any of them and the
next event quietly heals the layout.

Two guards keep resolve-or-create idempotent when events interleave:

1. All creations for one guild run under that guild's lock.
2. discord.py only adds a created channel/role to its cache when the
   gateway echoes the creation back, so a cache miss is confirmed with an
   authoritative ``fetch_channels()`` / ``fetch_roles()`` before creating.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

import discord

from rivalis.constants import REASON_CATEGORY, REASON_ROLE_CREATE, REASON_TRIGGER
from rivalis.database.locks import KeyedLocks

if TYPE_CHECKING:
    from rivalis.config import RivalisConfig

logger = logging.getLogger(__name__)


def _find_channel(
    channels: Iterable[Any],
    *,
    name: str,
    channel_type: discord.ChannelType,
    category_id: int | None = None,
    match_parent: bool = False,
) -> Any | None:
    for ch in channels:
        if ch.type != channel_type or ch.name != name:
            continue
        if match_parent and getattr(ch, "category_id", None) != category_id:
            continue
        return ch
    return None


def _find_role(roles: Iterable[discord.Role], name: str) -> discord.Role | None:
    for role in roles:
        if role.name == name:
            return role
    return None


class DirectoryResolver:
    """Resolve-or-create for the session category, trigger VC and tier roles.

    Parameters
    ----------
    cfg:
        Supplies the names to match.
    locks:
        Shared per-guild locks.  Pass the bot's instance so the streak engine
        and the session manager serialise on the same guild lock space.
    """

    def __init__(self, cfg: RivalisConfig, locks: KeyedLocks | None = None) -> None:
        self.cfg = cfg
        self.locks = locks or KeyedLocks()

    # -------------------------------------------------------------------
    # Category
    # -------------------------------------------------------------------
    async def resolve_category(self, guild: discord.Guild) -> discord.CategoryChannel:
        """Find the session category by name, else create it."""
        name = self.cfg.category_name
        found = _find_channel(guild.channels, name=name, channel_type=discord.ChannelType.category)
        if found is not None:
            return found

        async with self.locks.hold(("directory", guild.id)):
            found = _find_channel(
                await guild.fetch_channels(),
                name=name, channel_type=discord.ChannelType.category,
            )
            if found is not None:
                return found
            category = await guild.create_category(name, reason=REASON_CATEGORY)
            logger.info("Created category '%s' (ID: %d) in guild %s", name, category.id, guild.id)
            return category

    # -------------------------------------------------------------------
    # Trigger voice channel
    # -------------------------------------------------------------------
    async def resolve_trigger(
        self, guild: discord.Guild, category: discord.CategoryChannel,
    ) -> discord.VoiceChannel:
        """Find the trigger VC by name *inside* ``category``, else create it there."""
        name = self.cfg.trigger_channel_name
        lookup = dict(
            name=name,
            channel_type=discord.ChannelType.voice,
            category_id=category.id,
            match_parent=True,
        )
        found = _find_channel(guild.channels, **lookup)
        if found is not None:
            return found

        async with self.locks.hold(("directory", guild.id)):
            found = _find_channel(await guild.fetch_channels(), **lookup)
            if found is not None:
                return found
            trigger = await guild.create_voice_channel(
                name, category=category, reason=REASON_TRIGGER,
            )
            logger.info(
                "Created trigger VC '%s' (ID: %d) under category %d in guild %s",
                name, trigger.id, category.id, guild.id,
            )
            return trigger

    # -------------------------------------------------------------------
    # Announce channel (lookup only)
    # -------------------------------------------------------------------
    def resolve_announce_channel(self, guild: discord.Guild) -> discord.TextChannel | None:
        """Find the results text channel.  Never creates; ``None`` if absent."""
        return _find_channel(
            guild.channels,
            name=self.cfg.announce_channel_name,
            channel_type=discord.ChannelType.text,
        )

    # -------------------------------------------------------------------
    # Roles
    # -------------------------------------------------------------------
    async def resolve_role(self, guild: discord.Guild, name: str) -> discord.Role:
        """Find a role by exact name, else create it."""
        found = _find_role(guild.roles, name)
        if found is not None:
            return found

        async with self.locks.hold(("roles", guild.id)):
            found = _find_role(await guild.fetch_roles(), name)
            if found is not None:
                return found
            role = await guild.create_role(name=name, reason=REASON_ROLE_CREATE)
            logger.info("Created role '%s' (ID: %d) in guild %s", name, role.id, guild.id)
            return role
