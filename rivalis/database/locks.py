"""
rivalis.database.locks — Per-Guild Mutual Exclusion
===================================================

Gateway events run as independent asyncio tasks that interleave at every
``await``.  Two kinds of work must not interleave within one guild:

* resolve-or-create of channels and roles (else duplicates get created), and
* the streak read-modify-write plus tier-role reassignment (else updates
  are lost and a member can end up holding two tier roles).

:class:`KeyedLocks` hands out one :class:`asyncio.Lock` per key.

Usage::

    locks = KeyedLocks()
    async with locks.hold(guild.id):
        ...
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Hashable
from contextlib import asynccontextmanager


class KeyedLocks:
    """Lazily created asyncio locks keyed by guild id (or any hashable)."""

    def __init__(self) -> None:
        self._locks: dict[Hashable, asyncio.Lock] = {}

    def get(self, key: Hashable) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        async with self.get(key):
            yield
