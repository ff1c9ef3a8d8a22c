"""
rivalis.config — YAML Configuration & Secrets Loader
=====================================================

**Why this file exists:**
Two kinds of settings drive the bot:

* **Soft settings** in ``config.yaml`` — directory names, the session-room
  prefix and size, where the streak store lives, and the tier table.  They
  are static: changing them means a restart.
* **Secrets** in the environment (``.env``) — the bot token and the
  application id.  Both are required; a missing one aborts startup.

Usage::

    from rivalis.config import load_config, load_secrets

    cfg = load_config()              # reads ./config.yaml (optional)
    secrets = load_secrets()         # DISCORD_TOKEN / DISCORD_CLIENT_ID
    print(cfg.tiers[0].label)        # "🔥 Rivalis CHAMP"
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from rivalis.constants import (
    DEFAULT_ANNOUNCE_CHANNEL_NAME,
    DEFAULT_CATEGORY_NAME,
    DEFAULT_SESSION_PREFIX,
    DEFAULT_SESSION_USER_LIMIT,
    DEFAULT_STATE_PATH,
    DEFAULT_TIERS,
    DEFAULT_TRIGGER_CHANNEL_NAME,
    MAX_SESSION_USER_LIMIT,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Typed settings objects
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class TierDefinition:
    """One rung of the back-to-back ladder."""

    minimum_streak: int
    label: str


def _default_tiers() -> tuple[TierDefinition, ...]:
    return tuple(TierDefinition(minimum_streak=m, label=n) for m, n in DEFAULT_TIERS)


@dataclass(frozen=True, slots=True)
class RivalisConfig:
    """Immutable configuration loaded from ``config.yaml``.

    ``tiers`` is ordered highest threshold first; :func:`load_config`
    guarantees the thresholds are strictly decreasing.
    """

    # Directory (resolved by name on every event)
    category_name: str = DEFAULT_CATEGORY_NAME
    trigger_channel_name: str = DEFAULT_TRIGGER_CHANNEL_NAME
    announce_channel_name: str = DEFAULT_ANNOUNCE_CHANNEL_NAME

    # Session rooms
    session_prefix: str = DEFAULT_SESSION_PREFIX
    session_user_limit: int = DEFAULT_SESSION_USER_LIMIT

    # Streak store
    state_path: str = DEFAULT_STATE_PATH

    # Tier ladder
    tiers: tuple[TierDefinition, ...] = field(default_factory=_default_tiers)

    @property
    def tier_labels(self) -> frozenset[str]:
        """Every configured tier role name."""
        return frozenset(t.label for t in self.tiers)


@dataclass(frozen=True, slots=True)
class Secrets:
    """Startup secrets read from the environment."""

    token: str
    application_id: int


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------
def _parse_tiers(raw_tiers: object) -> tuple[TierDefinition, ...]:
    if not isinstance(raw_tiers, list):
        raise ValueError(f"tiers must be a list of mappings (got {raw_tiers!r}).")

    tiers: list[TierDefinition] = []
    for entry in raw_tiers:
        if not isinstance(entry, dict) or "label" not in entry or "minimum_streak" not in entry:
            raise ValueError(f"Tier entry {entry!r} needs both minimum_streak and label.")
        label = str(entry["label"]).strip()
        if not label:
            raise ValueError("Tier labels must not be empty.")
        minimum = entry["minimum_streak"]
        if isinstance(minimum, bool) or not isinstance(minimum, int):
            raise ValueError(f"Tier '{label}' minimum_streak must be an integer (got {minimum!r}).")
        if minimum < 1:
            raise ValueError(f"Tier '{label}' must have minimum_streak >= 1 (got {minimum}).")
        tiers.append(TierDefinition(minimum_streak=minimum, label=label))

    for higher, lower in zip(tiers, tiers[1:]):
        if lower.minimum_streak >= higher.minimum_streak:
            raise ValueError(
                "Tier thresholds must be strictly decreasing: "
                f"'{higher.label}' ({higher.minimum_streak}) is followed by "
                f"'{lower.label}' ({lower.minimum_streak})."
            )
    return tuple(tiers)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path = "config.yaml") -> RivalisConfig:
    """Read *path* and return a :class:`RivalisConfig` instance.

    Every key is optional.  A missing file yields the built-in defaults.

    Raises
    ------
    ValueError
        If the file is not a mapping, or the session size or the tier
        table is invalid.
    """
    config_path = Path(path)
    if not config_path.exists():
        logger.info("No %s found — using built-in defaults.", config_path)
        return RivalisConfig()

    with open(config_path, encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"{config_path} must hold a mapping of settings.")

    user_limit = raw.get("session_user_limit", DEFAULT_SESSION_USER_LIMIT)
    if isinstance(user_limit, bool) or not isinstance(user_limit, int):
        raise ValueError(f"session_user_limit must be an integer (got {user_limit!r}).")
    if not 1 <= user_limit <= MAX_SESSION_USER_LIMIT:
        raise ValueError(
            f"session_user_limit must be between 1 and {MAX_SESSION_USER_LIMIT} "
            f"(got {user_limit})."
        )

    tiers = _parse_tiers(raw["tiers"]) if "tiers" in raw else _default_tiers()

    return RivalisConfig(
        category_name=raw.get("category_name", DEFAULT_CATEGORY_NAME),
        trigger_channel_name=raw.get("trigger_channel_name", DEFAULT_TRIGGER_CHANNEL_NAME),
        announce_channel_name=raw.get("announce_channel_name", DEFAULT_ANNOUNCE_CHANNEL_NAME),
        session_prefix=raw.get("session_prefix", DEFAULT_SESSION_PREFIX),
        session_user_limit=user_limit,
        state_path=str(raw.get("state_path", DEFAULT_STATE_PATH)),
        tiers=tiers,
    )


def load_secrets() -> Secrets:
    """Read ``DISCORD_TOKEN`` and ``DISCORD_CLIENT_ID`` from the environment.

    Raises
    ------
    RuntimeError
        If either variable is missing or the client id is not numeric.
    """
    token = os.getenv("DISCORD_TOKEN")
    if not token or token == "your-discord-bot-token-here":
        raise RuntimeError(
            "Missing DISCORD_TOKEN env var.  "
            "Copy .env.example → .env and paste your bot token."
        )

    client_id = os.getenv("DISCORD_CLIENT_ID")
    if not client_id:
        raise RuntimeError(
            "Missing DISCORD_CLIENT_ID env var.  "
            "Set it to the application id from the Developer Portal."
        )
    try:
        application_id = int(client_id)
    except ValueError:
        raise RuntimeError(
            f"DISCORD_CLIENT_ID must be a numeric application id (got {client_id!r})."
        ) from None

    return Secrets(token=token, application_id=application_id)
