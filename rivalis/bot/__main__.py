"""
rivalis.bot.__main__ — Entry point for ``python -m rivalis.bot``
================================================================

Wiring:
1. Load .env (secrets) and require DISCORD_TOKEN + DISCORD_CLIENT_ID.
2. Load config.yaml (soft settings, optional).
3. Load the streak store (corrupt or missing file → empty state).
4. Create the RivalisBot and hand it config + store.
5. Start the bot (blocking — runs the asyncio event loop).

Run with::

    python -m rivalis.bot
"""

from __future__ import annotations

import logging
import sys

from dotenv import load_dotenv

from rivalis.bot.core import RivalisBot
from rivalis.config import load_config, load_secrets
from rivalis.database.store import JsonStateStore

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("rivalis")


def main() -> None:
    """Bootstrap and run the Rivalis bot."""

    # 1. Environment variables (secrets).
    load_dotenv()
    try:
        secrets = load_secrets()
    except RuntimeError as exc:
        logger.critical("%s", exc)
        sys.exit(1)

    # 2. Soft configuration.
    cfg = load_config()
    logger.info(
        "Config loaded — trigger '%s' in '%s', %d tier(s)",
        cfg.trigger_channel_name, cfg.category_name, len(cfg.tiers),
    )

    # 3. Streak store.
    store = JsonStateStore(cfg.state_path)
    store.load()

    # 4. Bot.
    bot = RivalisBot(cfg=cfg, store=store, application_id=secrets.application_id)

    # 5. Run (blocks until Ctrl+C or SIGTERM).
    logger.info("Starting Rivalis bot…")
    try:
        bot.run(secrets.token, log_handler=None)
    except KeyboardInterrupt:
        logger.info("Shutting down gracefully…")


if __name__ == "__main__":
    main()
