"""
rivalis.database.store — JSON File State Store
===============================================

**Why this file exists:**
Streaks must survive restarts, but the data is tiny (two fields per guild),
so a single JSON file is enough.  The store is loaded once at startup and
flushed after every mutation.

Failure policy:

* **Read** — a missing, unreadable or corrupt file means "start fresh".
  :meth:`JsonStateStore.load` never raises.
* **Write** — errors propagate.  The ``/winner`` command treats them as a
  hard failure so the user never sees an outcome that was not recorded.

Writes go to a sibling temp file that is then ``os.replace``-d over the
store.  That is best-effort atomicity, not a transaction.

Usage::

    store = JsonStateStore("data.json")
    store.load()
    state = store.get_or_create(guild_id)
    state.winner_streaks[user_id] = 1
    store.save()
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from rivalis.database.models import CommunityState

logger = logging.getLogger(__name__)


class JsonStateStore:
    """Process-wide owner of every guild's :class:`CommunityState`.

    Construct once in the entry point and hand it to the bot.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._states: dict[int, CommunityState] = {}

    @property
    def states(self) -> dict[int, CommunityState]:
        return self._states

    # -----------------------------------------------------------------------
    # Read
    # -----------------------------------------------------------------------
    def load(self) -> dict[int, CommunityState]:
        """Replace the in-memory mapping with the file contents.

        Returns the loaded mapping, empty if there was nothing usable.
        """
        self._states = self._read()
        logger.info(
            "State store loaded from %s (%d guild(s))", self.path, len(self._states),
        )
        return self._states

    def _read(self) -> dict[int, CommunityState]:
        try:
            with open(self.path, encoding="utf-8") as fh:
                raw = json.load(fh)
        except FileNotFoundError:
            logger.info("No state file at %s — starting fresh.", self.path)
            return {}
        except (OSError, ValueError):
            logger.warning(
                "State file %s is unreadable or corrupt — starting fresh.",
                self.path, exc_info=True,
            )
            return {}

        if not isinstance(raw, dict):
            logger.warning("State file %s is not a JSON object — starting fresh.", self.path)
            return {}

        states: dict[int, CommunityState] = {}
        for guild_id, payload in raw.items():
            try:
                states[int(guild_id)] = CommunityState.from_dict(payload)
            except (TypeError, ValueError, AttributeError):
                logger.warning("Skipping corrupt state for guild %r", guild_id)
        return states

    # -----------------------------------------------------------------------
    # Write
    # -----------------------------------------------------------------------
    def save(self) -> None:
        """Write the full mapping to disk.  ``OSError`` propagates."""
        payload = json.dumps(
            {str(gid): state.to_dict() for gid, state in self._states.items()},
            indent=2,
            ensure_ascii=False,
        )
        directory = self.path.parent
        directory.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=directory,
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("State store flushed to %s", self.path)

    # -----------------------------------------------------------------------
    # Access
    # -----------------------------------------------------------------------
    def get_or_create(self, guild_id: int) -> CommunityState:
        """Return the guild's state, inserting a fresh one if absent.

        Does **not** save; callers persist after mutating.
        """
        state = self._states.get(guild_id)
        if state is None:
            state = CommunityState()
            self._states[guild_id] = state
        return state
