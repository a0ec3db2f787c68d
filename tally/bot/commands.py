"""
tally.bot.commands — Prefix Commands
=====================================

Read-only commands answered in the channel they were issued in:
- ``~ping`` — liveness check
- ``~check`` / ``~balance`` — your current points and level

Handlers take the triggering :class:`discord.Message`.  Send failures are
raised to the dispatcher, never swallowed here.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from tally.constants import DEFAULT_LEVEL_STEP, points_for_level

if TYPE_CHECKING:
    import discord

    from tally.bot.gateway import DiscordGateway
    from tally.config import MessageTemplates
    from tally.services.store_service import StoreClient

CommandHandler = Callable[["discord.Message"], Awaitable[None]]


class CommandResponder:
    """Answers ``ping`` and balance queries."""

    def __init__(
        self,
        store: StoreClient,
        gateway: DiscordGateway,
        templates: MessageTemplates,
        *,
        level_step: int = DEFAULT_LEVEL_STEP,
    ) -> None:
        self.store = store
        self.gateway = gateway
        self.templates = templates
        self.level_step = level_step

    def handlers(self) -> dict[str, CommandHandler]:
        """Command token → handler, as matched after the prefix."""
        return {
            "ping": self.ping,
            "check": self.check,
            "balance": self.check,
        }

    async def ping(self, message: discord.Message) -> None:
        await self.gateway.reply_to(message, self.templates.pong)

    async def check(self, message: discord.Message) -> None:
        state = await self.store.get_user_progress(message.author.id)
        if state is None:
            await self.gateway.reply_to(message, self.templates.no_data)
            return

        text = self.templates.balance.format(
            point=state.point,
            level=state.level,
            next=points_for_level(state.level, self.level_step) - state.point,
        )
        await self.gateway.reply_to(message, text)
