"""
tests/conftest.py — Shared Test Fixtures
========================================
"""

from __future__ import annotations

import pytest
from fakes import FakeGuild

from rivalis.config import RivalisConfig, TierDefinition
from rivalis.database.locks import KeyedLocks
from rivalis.database.store import JsonStateStore
from rivalis.services.directory_service import DirectoryResolver
from rivalis.services.session_service import SessionLifecycleManager
from rivalis.services.streak_service import StreakTierEngine


@pytest.fixture
def cfg() -> RivalisConfig:
    """Built-in defaults (lowest tier at streak 2)."""
    return RivalisConfig()


@pytest.fixture
def cfg_with_tier_one() -> RivalisConfig:
    """The full ladder including a streak-1 tier."""
    return RivalisConfig(tiers=RivalisConfig().tiers + (
        TierDefinition(minimum_streak=1, label="\U0001f949 Rivalis Winner I"),
    ))


@pytest.fixture
def store(tmp_path) -> JsonStateStore:
    s = JsonStateStore(tmp_path / "data.json")
    s.load()
    return s


@pytest.fixture
def guild() -> FakeGuild:
    return FakeGuild()


@pytest.fixture
def locks() -> KeyedLocks:
    return KeyedLocks()


@pytest.fixture
def directory(cfg, locks) -> DirectoryResolver:
    return DirectoryResolver(cfg, locks)


@pytest.fixture
def sessions(cfg, directory) -> SessionLifecycleManager:
    return SessionLifecycleManager(cfg, directory)


@pytest.fixture
def engine(cfg, store, directory, locks) -> StreakTierEngine:
    return StreakTierEngine(cfg, store, directory, locks)
