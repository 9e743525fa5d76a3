"""Eligibility filter for bread posts (core domain)."""

from __future__ import annotations

from core.config import WatchConfig
from core.models import MessageContext
from core.source_keys import chat_id_key


def contains_keyword(text: str, keyword: str) -> bool:
    """Case-insensitive substring check."""

    return keyword.lower() in text.lower()


def is_eligible(context: MessageContext, config: WatchConfig) -> bool:
    """Return True when the message is a bread post worth recording.

    All four conditions must hold:
    - the author is the watched user
    - the chat is the watched channel (any equivalent key form)
    - the message carries at least one attachment
    - the text mentions the keyword
    """

    if context.author_id != config.target_author_id:
        return False

    keys = config.channel_keys
    if context.source_key not in keys and chat_id_key(context.chat_id) not in keys:
        return False

    if not context.has_attachments:
        return False

    return contains_keyword(context.text, config.keyword)
