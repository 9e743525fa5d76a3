"""Telegram-to-core message mapping adapter.

This keeps Telethon-specific details out of the core pipeline.
"""

from __future__ import annotations

from typing import Optional

from telethon.tl.custom import Message
from telethon.tl.types import MessageMediaWebPage, PeerChannel, PeerChat

from core.models import MessageContext
from core.source_keys import chat_id_key, username_key


def source_key_from_message(message: Message) -> str:
    """Normalize a source key using a single rule enforced across the app."""

    chat = getattr(message, "chat", None)
    username = getattr(chat, "username", None)

    if isinstance(username, str) and username:
        return username_key(username)

    # Fallback: always stable and universal
    return chat_id_key(message.chat_id)


def has_attachments(message: Message) -> bool:
    """Return True for photos, documents, albums and other real media.

    Link previews arrive as media too, but they are not attachments.
    """

    media = getattr(message, "media", None)
    if media is None:
        return False
    return not isinstance(media, MessageMediaWebPage)


def build_permalink(message: Message) -> Optional[str]:
    chat = getattr(message, "chat", None)
    # Prefer public usernames for permalinks when available.
    if chat and getattr(chat, "username", None):
        return f"https://t.me/{chat.username}/{message.id}"

    peer_id = getattr(message, "peer_id", None)
    # Private groups/supergroups/channels can use the /c/ links.
    if isinstance(peer_id, PeerChannel):
        return f"https://t.me/c/{peer_id.channel_id}/{message.id}"
    if isinstance(peer_id, PeerChat):
        return f"https://t.me/c/{peer_id.chat_id}/{message.id}"
    # PeerUser has no chat/channel id; no permalink is possible.
    return None


def build_context(message: Message) -> MessageContext:
    """Build a core MessageContext from a Telethon Message."""

    return MessageContext(
        source_key=source_key_from_message(message),
        chat_id=message.chat_id,
        author_id=getattr(message, "sender_id", None),
        message_id=message.id,
        date=message.date,
        text=message.raw_text or "",
        has_attachments=has_attachments(message),
        permalink=build_permalink(message),
    )
