"""
tally.bot.dispatcher — Gateway Event Routing
=============================================

Routes each inbound gateway event to the service that owns it:

* MESSAGE from a bot account → dropped (no bot-to-bot feedback loops)
* MESSAGE starting with ``<prefix><command>`` → :class:`CommandResponder`
* any other MESSAGE → :class:`ProgressionEngine`, plus a level-up reply
* GUILD_MEMBER_ADD → :class:`MembershipGreeter`
* READY → log line only

Every handler is wrapped so that a failure only costs that one event; the
exception is logged and never reaches discord.py's event loop.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tally.errors import TallyError

if TYPE_CHECKING:
    import discord

    from tally.bot.commands import CommandHandler, CommandResponder
    from tally.bot.gateway import DiscordGateway
    from tally.config import MessageTemplates
    from tally.services.progression_service import ProgressionEngine
    from tally.services.welcome_service import MembershipGreeter

logger = logging.getLogger(__name__)


class EventDispatcher:
    """Stateless router from gateway events to Tally services."""

    def __init__(
        self,
        *,
        prefix: str,
        progression: ProgressionEngine,
        greeter: MembershipGreeter,
        responder: CommandResponder,
        gateway: DiscordGateway,
        templates: MessageTemplates,
    ) -> None:
        self.prefix = prefix
        self.progression = progression
        self.greeter = greeter
        self.gateway = gateway
        self.templates = templates
        self.commands: dict[str, CommandHandler] = responder.handlers()

    # -----------------------------------------------------------------------
    # Routing helpers
    # -----------------------------------------------------------------------
    def match_command(self, content: str) -> CommandHandler | None:
        """Return the handler for ``<prefix><token>``, or ``None``.

        Unknown tokens are not commands; the message counts as activity.
        """
        if not self.prefix or not content.startswith(self.prefix):
            return None
        rest = content[len(self.prefix):]
        # The token must follow the prefix directly: "~ ping" is chatter.
        if not rest or rest[0].isspace():
            return None
        parts = rest.split(maxsplit=1)
        return self.commands.get(parts[0].lower())

    # -----------------------------------------------------------------------
    # READY
    # -----------------------------------------------------------------------
    async def on_ready(self, user: discord.ClientUser | None) -> None:
        name = user.name if user is not None else "unknown"
        logger.info("%s is connected!", name)

    # -----------------------------------------------------------------------
    # MESSAGE_CREATE
    # -----------------------------------------------------------------------
    async def on_message(self, message: discord.Message) -> None:
        try:
            await self._handle_message(message)
        except TallyError as exc:
            logger.error(
                "Dropped message %s from user %s: %s",
                message.id, message.author.id, exc,
                extra={"event_type": "message", "user_id": message.author.id},
            )
        except Exception:
            logger.exception(
                "Error processing message %s from user %s",
                message.id, message.author.id,
                extra={"event_type": "message", "user_id": message.author.id},
            )

    async def _handle_message(self, message: discord.Message) -> None:
        """Inner message handler (separated for error isolation)."""
        if message.author.bot:
            logger.debug("Ignoring bot message from %s", message.author.name)
            return

        handler = self.match_command(message.content)
        if handler is not None:
            logger.debug("Command from %s: %s", message.author.name, message.content)
            await handler(message)
            return

        outcome = await self.progression.on_activity(message.author.id)
        if outcome.leveled_up:
            text = self.templates.level_up.format(
                mention=message.author.mention, level=outcome.new_level
            )
            await self.gateway.reply_to(message, text)

    # -----------------------------------------------------------------------
    # GUILD_MEMBER_ADD
    # -----------------------------------------------------------------------
    async def on_member_join(self, member: discord.Member) -> None:
        try:
            await self.greeter.on_member_join(member.guild.id, member)
        except TallyError as exc:
            logger.error(
                "Dropped member_join for %s in guild %s: %s",
                member.id, member.guild.id, exc,
                extra={"event_type": "member_join", "user_id": member.id},
            )
        except Exception:
            logger.exception(
                "Error processing member_join for %s", member.id,
                extra={"event_type": "member_join", "user_id": member.id},
            )
