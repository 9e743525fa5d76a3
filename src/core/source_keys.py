"""Helpers for turning configured channels into breadwatch source keys.

Telegram exposes the same chat under several ids (bare channel id, the
``-100`` prefixed peer id, negative basic-group ids), so a configured
channel is expanded into every equivalent key up front.
"""

from __future__ import annotations

from typing import Union

CHAT_ID_PREFIX = "chat_id:"


def chat_id_key(chat_id: int) -> str:
    """Return the stable key used for chats without a public username."""

    return f"{CHAT_ID_PREFIX}{chat_id}"


def username_key(username: str) -> str:
    """Return the key used for chats with a public username."""

    return f"@{username.lstrip('@').lower()}"


def _chat_id_variants(raw_chat_id: int) -> set[int]:
    variants = {raw_chat_id}
    if raw_chat_id > 0:
        variants.add(-raw_chat_id)
        variants.add(-1000000000000 - raw_chat_id)
        return variants

    raw_text = str(raw_chat_id)
    # Marked channel/supergroup id: -100<channel_id>
    if raw_text.startswith("-100") and raw_text[4:].isdigit():
        variants.add(int(raw_text[4:]))
    else:
        variants.add(abs(raw_chat_id))
    return variants


def channel_key_variants(channel: Union[int, str]) -> frozenset[str]:
    """Expand a configured channel (id or @username) into equivalent keys."""

    if isinstance(channel, int):
        return frozenset(chat_id_key(variant) for variant in _chat_id_variants(channel))

    value = str(channel).strip()
    if not value:
        raise ValueError("Channel must not be empty")
    if value.startswith(CHAT_ID_PREFIX):
        value = value[len(CHAT_ID_PREFIX):]
    try:
        chat_id = int(value)
    except ValueError:
        return frozenset({username_key(value)})
    return channel_key_variants(chat_id)
