"""
tally.services.welcome_service — Member Join Greetings
=======================================================

On GUILD_MEMBER_ADD, look up the guild's welcome settings and post the
configured text to the configured channel.

A guild without settings is the normal case and only gets an info line.
A configured channel that no longer resolves (deleted, or hidden from the
bot) is logged as an error and the greeting is skipped.
Transient API failures while looking the channel up propagate as
:class:`~tally.errors.DeliveryFailure`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tally.constants import WELCOME_GUILD_PLACEHOLDER, WELCOME_MEMBER_PLACEHOLDER

if TYPE_CHECKING:
    import discord

    from tally.bot.gateway import DiscordGateway
    from tally.services.store_service import StoreClient

logger = logging.getLogger(__name__)


def render_welcome(template: str, member: discord.Member) -> str:
    """Substitute ``{member}`` and ``{guild}`` in *template*.

    Plain replacement, not ``str.format``: operator-written text may contain
    other braces.
    """
    text = template.replace(WELCOME_MEMBER_PLACEHOLDER, member.mention)
    guild = getattr(member, "guild", None)
    if guild is not None:
        text = text.replace(WELCOME_GUILD_PLACEHOLDER, guild.name)
    return text


class MembershipGreeter:
    """Sends the per-guild welcome message for new members."""

    def __init__(self, store: StoreClient, gateway: DiscordGateway) -> None:
        self.store = store
        self.gateway = gateway

    async def on_member_join(self, guild_id: int, member: discord.Member) -> bool:
        """Greet *member*.  Returns ``True`` if a message was sent."""
        settings = await self.store.get_welcome_config(guild_id)
        if settings is None:
            logger.info("No welcome configuration for guild %s; not greeting %s", guild_id, member.id)
            return False

        channel = await self.gateway.resolve_channel(settings.channel_id)
        if channel is None:
            logger.error(
                "Welcome channel %s for guild %s cannot be resolved; skipping greeting for %s",
                settings.channel_id, guild_id, member.id,
            )
            return False

        await self.gateway.send_message(channel, render_welcome(settings.message, member))
        logger.info("Welcomed %s in guild %s (channel %s)", member.id, guild_id, settings.channel_id)
        return True
