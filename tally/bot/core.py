"""
tally.bot.core — Bot Instance & Wiring
=======================================

**Why this file exists:**
Defines :class:`TallyBot`, a ``discord.Client`` subclass that:

1. Requests the intents the bot needs (message content for command parsing,
   members for join events).
2. Owns the :class:`StoreClient`, built from the engine handed in at startup.
3. Builds the services and the :class:`EventDispatcher`, then forwards the
   three gateway events it cares about to it.

Commands are matched by the dispatcher from an explicit token table, so a
plain ``Client`` is enough; no ``commands.Bot`` framework is involved.
"""

from __future__ import annotations

import logging

import discord
from sqlalchemy import Engine

from tally.bot.commands import CommandResponder
from tally.bot.dispatcher import EventDispatcher
from tally.bot.gateway import DiscordGateway
from tally.config import TallyConfig
from tally.services.progression_service import ProgressionEngine
from tally.services.store_service import StoreClient
from tally.services.welcome_service import MembershipGreeter

logger = logging.getLogger(__name__)


class TallyBot(discord.Client):
    """Client subclass that carries the store and routes events.

    Parameters
    ----------
    cfg:
        The parsed :class:`TallyConfig` from ``config.yaml``.
    engine:
        A SQLAlchemy :class:`Engine` connected to the database.
    """

    def __init__(self, cfg: TallyConfig, engine: Engine) -> None:
        # Privileged intents (must enable in Developer Portal):
        #   MESSAGE_CONTENT — prefix command parsing
        #   GUILD_MEMBERS   — on_member_join
        intents = discord.Intents.default()
        intents.message_content = True
        intents.members = True
        intents.presences = False

        super().__init__(intents=intents)

        self.cfg = cfg
        self.store = StoreClient(engine)
        self.gateway = DiscordGateway(self)

        progression = ProgressionEngine(
            self.store,
            level_step=cfg.level_step,
            first_activity_points=cfg.first_activity_points,
        )
        greeter = MembershipGreeter(self.store, self.gateway)
        responder = CommandResponder(
            self.store, self.gateway, cfg.messages, level_step=cfg.level_step
        )
        self.dispatcher = EventDispatcher(
            prefix=cfg.bot_prefix,
            progression=progression,
            greeter=greeter,
            responder=responder,
            gateway=self.gateway,
            templates=cfg.messages,
        )

    # -----------------------------------------------------------------------
    # Gateway events
    # -----------------------------------------------------------------------
    async def on_ready(self) -> None:
        await self.dispatcher.on_ready(self.user)

    async def on_message(self, message: discord.Message) -> None:
        await self.dispatcher.on_message(message)

    async def on_member_join(self, member: discord.Member) -> None:
        await self.dispatcher.on_member_join(member)

    async def close(self) -> None:
        """Graceful shutdown — release pooled DB connections."""
        logger.info("Bot shutting down…")
        await super().close()
        self.store.engine.dispose()
