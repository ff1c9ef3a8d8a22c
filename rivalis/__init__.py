"""
Rivalis — Live Session Rooms & Back-to-Back Winner Tiers for Discord
====================================================================
Turns one "trigger" voice channel into a factory of temporary session
rooms that vanish when empty, and tracks back-to-back session winners per
guild, granting an exclusive tier role for the current streak.

Package layout::

    rivalis/
    ├── config.py          # YAML → typed config, env → secrets
    ├── constants.py       # Default names, sizes, tier table
    ├── database/
    │   ├── models.py      # CommunityState (per-guild streak state)
    │   ├── store.py       # JSON file store (load / save / get_or_create)
    │   └── locks.py       # Per-guild asyncio locks
    ├── engine/
    │   └── tiers.py       # Pure streak + tier decisions
    ├── services/
    │   ├── directory_service.py  # Resolve-or-create category / trigger / roles
    │   ├── session_service.py    # Join-to-create session rooms
    │   ├── streak_service.py     # /winner: record, re-tier, announce
    │   └── messages.py           # User-visible text
    └── bot/
        ├── core.py        # Bot subclass, cog loader, command sync
        └── cogs/
            ├── sessions.py  # on_voice_state_update
            └── winner.py    # /winner
"""

__version__ = "0.1.0"
