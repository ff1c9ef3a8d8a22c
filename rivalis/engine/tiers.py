"""
rivalis.engine.tiers — Streak & Tier Decisions
==============================================

Pure functions.  No Discord I/O, no store I/O inside the engine.

Pipeline:
  (CommunityState, winner) → next_streak → record_win → resolve_tier → TierDefinition | None
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rivalis.config import TierDefinition
    from rivalis.database.models import CommunityState


__all__ = ["is_tier_role", "next_streak", "record_win", "resolve_tier"]


# ---------------------------------------------------------------------------
# Streak
# ---------------------------------------------------------------------------
def next_streak(state: CommunityState, winner_id: int) -> int:
    """Streak the winner will hold after this report.

    Only an exact repeat of the immediately preceding winner extends the
    streak.  Anyone else restarts at 1, whatever their stored history says.
    """
    if state.last_winner_id == winner_id:
        return state.winner_streaks.get(winner_id, 0) + 1
    return 1


def record_win(state: CommunityState, winner_id: int) -> int:
    """Apply a win to *state* in place and return the new streak."""
    streak = next_streak(state, winner_id)
    state.last_winner_id = winner_id
    state.winner_streaks[winner_id] = streak
    return streak


# ---------------------------------------------------------------------------
# Tier
# ---------------------------------------------------------------------------
def resolve_tier(tiers: Sequence[TierDefinition], streak: int) -> TierDefinition | None:
    """First tier (highest threshold first) whose minimum the streak reaches."""
    for tier in tiers:
        if streak >= tier.minimum_streak:
            return tier
    return None


def is_tier_role(role_name: str, tiers: Iterable[TierDefinition]) -> bool:
    return any(role_name == t.label for t in tiers)
