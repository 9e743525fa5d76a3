"""Telegram notification adapter that replies in the watched chat.

Sends the reply through the same Telethon client that receives the events.
"""

from __future__ import annotations

from telethon import errors

from core.errors import DeliveryError
from core.models import MessageContext


class TelegramReplyNotifier:
    """Notifier adapter that answers the bread post in place."""

    def __init__(self, client) -> None:
        self._client = client

    async def send(self, context: MessageContext, text: str) -> None:
        """Send the reply as a response to the original message."""

        try:
            await self._client.send_message(
                context.chat_id,
                text,
                reply_to=context.message_id,
                link_preview=False,
            )
        except (errors.RPCError, ConnectionError, ValueError) as exc:
            raise DeliveryError(f"Failed to reply in {context.source_key}: {exc}") from exc
