"""Telegram Bot API notification adapter.

Uses the Bot API for delivery so a user session can watch the channel while
a separate bot posts the replies.
"""

from __future__ import annotations

import json
import urllib.error
import urllib.request

from core.errors import DeliveryError
from core.models import MessageContext


class TelegramBotNotifier:
    """Notifier adapter that sends replies via the Telegram Bot API."""

    def __init__(self, bot_token: str, timeout: float = 10) -> None:
        self._bot_token = bot_token
        self._timeout = timeout

    def _endpoint(self) -> str:
        return f"https://api.telegram.org/bot{self._bot_token}/sendMessage"

    def _payload(self, context: MessageContext, text: str) -> dict:
        return {
            "chat_id": context.chat_id,
            "text": text,
            "reply_to_message_id": context.message_id,
            "allow_sending_without_reply": True,
            "disable_web_page_preview": True,
        }

    async def send(self, context: MessageContext, text: str) -> None:
        """Send the reply via the Bot API."""

        data = json.dumps(self._payload(context, text)).encode("utf-8")
        request = urllib.request.Request(self._endpoint(), data=data, method="POST")
        request.add_header("Content-Type", "application/json")
        # Blocking call; replies are rare and short.
        try:
            with urllib.request.urlopen(request, timeout=self._timeout):
                pass
        except urllib.error.HTTPError as e:
            body = e.read().decode("utf-8", errors="replace")
            raise DeliveryError(f"Bot API error {e.code}: {body}") from e
        except (urllib.error.URLError, OSError) as e:
            raise DeliveryError(f"Bot API unreachable: {e}") from e
