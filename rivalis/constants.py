"""
rivalis.constants — Shared Defaults & Presentation Constants
=============================================================

Single source of truth for the default directory names, session sizing and
the back-to-back tier table.  ``config.yaml`` may override any of these;
import from here instead of duplicating literals in cogs and services.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Directory names (matched exactly, never by id)
# ---------------------------------------------------------------------------
DEFAULT_CATEGORY_NAME = "\U0001f3ae Rivalis Live Sessions"      # 🎮
DEFAULT_TRIGGER_CHANNEL_NAME = "➕ Create a Session"       # ➕
DEFAULT_ANNOUNCE_CHANNEL_NAME = "live-session-results"

# ---------------------------------------------------------------------------
# Session rooms
# ---------------------------------------------------------------------------
DEFAULT_SESSION_PREFIX = "Rivalis — "
DEFAULT_SESSION_USER_LIMIT = 6
MAX_SESSION_USER_LIMIT = 99  # Discord's voice channel cap

# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------
DEFAULT_STATE_PATH = "data.json"

# ---------------------------------------------------------------------------
# Back-to-back tiers, highest threshold first: (minimum_streak, label)
# ---------------------------------------------------------------------------
DEFAULT_TIERS: list[tuple[int, str]] = [
    (10, "\U0001f525 Rivalis CHAMP"),        # 🔥
    (5, "\U0001f48e Rivalis Winner IV"),     # 💎
    (3, "\U0001f947 Rivalis Winner III"),    # 🥇
    (2, "\U0001f948 Rivalis Winner II"),     # 🥈
]

# Audit-log reasons attached to every remote mutation
REASON_CATEGORY = "Rivalis sessions category auto-create"
REASON_TRIGGER = "Rivalis trigger VC auto-create"
REASON_SESSION = "Rivalis temp session VC"
REASON_MOVE = "Move to Rivalis session VC"
REASON_SESSION_END = "Rivalis session ended (empty)"
REASON_ROLE_CREATE = "Rivalis tier role auto-create"
REASON_TIER_UPDATE = "Rivalis tier update"
