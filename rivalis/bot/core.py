"""
rivalis.bot.core — Bot Instance & Cog Loader
============================================

**Why this file exists:**
:class:`RivalisBot` is the ``commands.Bot`` subclass every cog hangs off.
It:

1. Carries the shared config (``bot.cfg``) and the streak store
   (``bot.store``), both built once in the entry point and injected here —
   no module-level globals.
2. Builds the three services (directory, sessions, streaks) around one
   shared :class:`KeyedLocks` so all per-guild serialisation uses the same
   lock space.
3. Loads every cog in ``rivalis/bot/cogs/``.
4. Syncs the slash-command tree on ready (guild-scoped when
   ``DEV_GUILD_ID`` is set, global otherwise).
"""

from __future__ import annotations

import logging
import os

import discord
from discord.ext import commands

from rivalis.config import RivalisConfig
from rivalis.database.locks import KeyedLocks
from rivalis.database.store import JsonStateStore
from rivalis.services.directory_service import DirectoryResolver
from rivalis.services.session_service import SessionLifecycleManager
from rivalis.services.streak_service import StreakTierEngine

logger = logging.getLogger(__name__)

# Cog modules to load on startup.
EXTENSIONS: list[str] = [
    "rivalis.bot.cogs.sessions",
    "rivalis.bot.cogs.winner",
]


class RivalisBot(commands.Bot):
    """Custom Bot subclass that carries project-wide state.

    Parameters
    ----------
    cfg:
        The parsed :class:`RivalisConfig`.
    store:
        The loaded :class:`JsonStateStore`.
    application_id:
        Application (client) id used for slash-command registration.
    """

    def __init__(
        self,
        cfg: RivalisConfig,
        store: JsonStateStore,
        application_id: int | None = None,
    ) -> None:
        # GUILDS + GUILD_VOICE_STATES are all the bot needs; no privileged intents.
        intents = discord.Intents.none()
        intents.guilds = True
        intents.voice_states = True

        super().__init__(
            command_prefix=commands.when_mentioned,
            intents=intents,
            application_id=application_id,
            description="Rivalis live sessions + back-to-back winner tiers",
        )

        self.cfg = cfg
        self.store = store
        self.locks = KeyedLocks()

        self.directory = DirectoryResolver(cfg, self.locks)
        self.sessions = SessionLifecycleManager(cfg, self.directory)
        self.streaks = StreakTierEngine(cfg, store, self.directory, self.locks)

    # -----------------------------------------------------------------------
    # Lifecycle hooks
    # -----------------------------------------------------------------------
    async def setup_hook(self) -> None:
        """Load cogs before connecting.  One broken cog must not take down the bot."""
        for ext in EXTENSIONS:
            try:
                await self.load_extension(ext)
                logger.info("Loaded extension: %s", ext)
            except Exception as exc:
                logger.error("Failed to load extension %s: %s", ext, exc)

    async def on_ready(self) -> None:
        """Fired when the bot has connected and the cache is populated."""
        assert self.user is not None  # guaranteed after on_ready
        logger.info("Logged in as %s (ID: %s)", self.user.name, self.user.id)

        # --- Slash-command sync ---------------------------------------------
        dev_guild_id = os.getenv("DEV_GUILD_ID")
        if dev_guild_id:
            guild = discord.Object(id=int(dev_guild_id))
            self.tree.copy_global_to(guild=guild)
            synced = await self.tree.sync(guild=guild)
            logger.info("Synced %d commands to dev guild %s", len(synced), dev_guild_id)
        else:
            synced = await self.tree.sync()
            logger.info("Synced %d commands globally", len(synced))
