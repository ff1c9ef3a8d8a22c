"""
rivalis.database.models — Per-Guild Streak State
================================================

One :class:`CommunityState` per guild.  It is the only thing the bot
persists; everything else (channels, roles) is re-derived from the guild.

Invariant: every value in ``winner_streaks`` is >= 1.  Entries for users
who no longer hold the streak are kept as history.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CommunityState:
    """Mutable streak state for one guild."""

    last_winner_id: int | None = None
    winner_streaks: dict[int, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """JSON-ready form.  Snowflakes are written as strings."""
        return {
            "lastWinnerId": str(self.last_winner_id) if self.last_winner_id is not None else None,
            "winnerStreaks": {str(uid): streak for uid, streak in self.winner_streaks.items()},
        }

    @classmethod
    def from_dict(cls, raw: dict) -> CommunityState:
        """Build from the persisted form, dropping entries that break the invariant."""
        last = raw.get("lastWinnerId")
        streaks: dict[int, int] = {}
        for uid, streak in (raw.get("winnerStreaks") or {}).items():
            try:
                key = int(uid)
            except (TypeError, ValueError):
                logger.warning("Dropping malformed streak entry %r → %r", uid, streak)
                continue
            if isinstance(streak, bool) or not isinstance(streak, int):
                logger.warning("Dropping non-integer streak for user %s (%r)", uid, streak)
                continue
            value = streak
            if value < 1:
                logger.warning("Dropping non-positive streak for user %s (%d)", uid, value)
                continue
            streaks[key] = value
        return cls(
            last_winner_id=int(last) if last is not None else None,
            winner_streaks=streaks,
        )
