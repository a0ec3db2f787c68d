"""
tally.bot.__main__ — Entry point for ``python -m tally.bot``
=============================================================

Wiring:
1. Load .env (secrets).
2. Configure logging.
3. Load config.yaml (soft settings).
4. Create the SQLAlchemy engine, ensure tables exist, seed welcome configs.
5. Create the TallyBot and hand it config + engine.
6. Start the bot (blocking — runs the asyncio event loop).

Run with::

    python -m tally.bot
"""

from __future__ import annotations

import logging
import os
import sys

from dotenv import load_dotenv

from tally.bot.core import TallyBot
from tally.config import load_config
from tally.database.engine import create_db_engine, init_db

logger = logging.getLogger("tally")


def main() -> None:
    """Bootstrap and run the Tally bot."""

    # 1. Environment variables (secrets).
    load_dotenv()

    # 2. Logging.
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
        datefmt="%H:%M:%S",
    )

    token = os.getenv("DISCORD_TOKEN")
    if not token or token == "your-discord-bot-token-here":
        logger.critical(
            "DISCORD_TOKEN is not set.  "
            "Copy .env.example → .env and paste your bot token."
        )
        sys.exit(1)

    # 3. Soft configuration.
    cfg = load_config(os.getenv("TALLY_CONFIG", "config.yaml"))
    logger.info("Config loaded — prefix %r, level step %d", cfg.bot_prefix, cfg.level_step)

    # 4. Database.
    engine = create_db_engine()
    init_db(engine, cfg.welcome)

    # 5. Bot.
    bot = TallyBot(cfg=cfg, engine=engine)

    # 6. Run (blocks until Ctrl+C or SIGTERM).
    logger.info("Starting Tally bot…")
    try:
        bot.run(token, log_handler=None)
    except KeyboardInterrupt:
        logger.info("Shutting down gracefully…")


if __name__ == "__main__":
    main()
