"""
tally.database.seed — Welcome Config Seeder
============================================

Copies the ``welcome:`` entries of ``config.yaml`` into the ``guild_welcome``
table on startup, so a deployment can be configured without a dashboard.

Idempotent — re-running with the same entries changes nothing; an edited
entry overwrites the stored row for that guild.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from sqlalchemy import Engine

from tally.services.store_service import set_welcome_config

if TYPE_CHECKING:
    from tally.config import WelcomeSeed

logger = logging.getLogger(__name__)


def seed_welcome_configs(engine: Engine, seeds: Sequence[WelcomeSeed]) -> int:
    """Upsert every seed and return how many rows were written."""
    for seed in seeds:
        set_welcome_config(engine, seed.guild_id, seed.channel_id, seed.message)
        logger.info(
            "Seeded welcome config for guild %d → channel %d",
            seed.guild_id, seed.channel_id,
        )
    if seeds:
        logger.info("Welcome seeding complete: %d guild(s).", len(seeds))
    return len(seeds)
