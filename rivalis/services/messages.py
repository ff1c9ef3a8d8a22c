"""
rivalis.services.messages — Reply & Announcement Text
=====================================================

Every user-visible string the ``/winner`` command produces.  Kept apart
from the streak service so the wording can change without touching logic.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rivalis.config import TierDefinition

GUILD_ONLY = "Run this inside a server."
ANNOUNCED_CONFIRMATION = "✅ Winner announced + tier role applied."


def build_winner_message(winner_id: int, streak: int, tier: TierDefinition | None) -> str:
    """The public result post."""
    tier_text = f"**{tier.label}**" if tier is not None else "**None**"
    return (
        f"\U0001f3c6 **Rivalis Session Winner:** <@{winner_id}>\n"        # 🏆
        f"\U0001f525 **Back-to-back streak:** **{streak}**\n"              # 🔥
        f"\U0001f396️ **Tier:** {tier_text}"                          # 🎖️
    )


def build_setup_hint(announce_channel_name: str) -> str:
    return (
        f"⚠️ I couldn't find #{announce_channel_name}. "
        "Create it or change announce_channel_name in config.yaml."
    )


def build_private_result(message: str, announce_channel_name: str) -> str:
    """Fallback reply when the results channel is missing."""
    return f"{message}\n\n{build_setup_hint(announce_channel_name)}"


def build_failure_notice(*, forbidden: bool) -> str:
    if forbidden:
        return (
            "❌ I don't have permission to finish that.\n"
            "Most common cause: my role is positioned below the tier roles "
            "(Server Settings → Roles → drag my role above them)."
        )
    return (
        "❌ Something failed. Check the bot logs.\n"
        "Most common cause: bot role is not above the tier roles."
    )
