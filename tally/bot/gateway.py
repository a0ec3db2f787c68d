"""
tally.bot.gateway — Discord Send/Reply/Resolve Adapter
=======================================================

The three outbound operations the bot's services need from Discord, behind
one small object so the services never import a live client.  HTTP failures
are raised as :class:`~tally.errors.DeliveryFailure`.
"""

from __future__ import annotations

import logging

import discord
from discord.abc import Messageable

from tally.errors import DeliveryFailure

logger = logging.getLogger(__name__)


class DiscordGateway:
    """Outbound Discord operations on top of a connected client."""

    def __init__(self, client: discord.Client) -> None:
        self.client = client

    async def resolve_channel(self, channel_id: int) -> Messageable | None:
        """Return a sendable channel for *channel_id*, or ``None``.

        Tries the client cache first, then the REST API.  A deleted channel,
        a channel the bot cannot see, or a non-text channel all yield ``None``.
        Any other API failure raises :class:`DeliveryFailure`.
        """
        channel = self.client.get_channel(channel_id)
        if channel is None:
            try:
                channel = await self.client.fetch_channel(channel_id)
            except (discord.NotFound, discord.Forbidden) as exc:
                logger.debug("Channel %s not reachable: %s", channel_id, exc)
                return None
            except discord.HTTPException as exc:
                raise DeliveryFailure(f"Could not fetch channel {channel_id}: {exc}") from exc
        if not isinstance(channel, Messageable):
            logger.debug("Channel %s is not messageable (%s)", channel_id, type(channel).__name__)
            return None
        return channel

    async def send_message(self, channel: Messageable, text: str) -> discord.Message:
        """Post *text* to *channel*."""
        try:
            return await channel.send(text)
        except discord.HTTPException as exc:
            raise DeliveryFailure(
                f"Could not send to channel {getattr(channel, 'id', '?')}: {exc}"
            ) from exc

    async def reply_to(self, message: discord.Message, text: str) -> discord.Message:
        """Reply to *message* in its own channel."""
        try:
            return await message.reply(text)
        except discord.HTTPException as exc:
            raise DeliveryFailure(f"Could not reply to message {message.id}: {exc}") from exc
