from __future__ import annotations

from datetime import datetime, timezone

from telethon.tl.types import MessageMediaPhoto, MessageMediaWebPage, PeerChannel, WebPageEmpty

from adapters.telegram_mapper import build_context, has_attachments


class DummyChat:
    def __init__(self, username: "str | None" = None) -> None:
        self.username = username


class DummyMessage:
    def __init__(
        self,
        *,
        chat_id: int,
        message_id: int,
        text: str,
        sender_id: "int | None" = 1001,
        chat: "DummyChat | None" = None,
        peer_id=None,
        media=None,
    ) -> None:
        self.chat_id = chat_id
        self.id = message_id
        self.raw_text = text
        self.sender_id = sender_id
        self.chat = chat
        self.peer_id = peer_id
        self.media = media
        self.date = datetime(2024, 1, 1, tzinfo=timezone.utc)


def test_build_context_private_channel() -> None:
    message = DummyMessage(
        chat_id=-100123,
        message_id=10,
        text="bread",
        chat=DummyChat(username=None),
        peer_id=PeerChannel(channel_id=123),
        media=MessageMediaPhoto(),
    )
    context = build_context(message)
    assert context.source_key == "chat_id:-100123"
    assert context.author_id == 1001
    assert context.has_attachments
    assert context.permalink == "https://t.me/c/123/10"


def test_build_context_public_channel_uses_username() -> None:
    message = DummyMessage(
        chat_id=-100123,
        message_id=11,
        text="bread",
        chat=DummyChat(username="Bakery"),
        peer_id=PeerChannel(channel_id=123),
    )
    context = build_context(message)
    assert context.source_key == "@bakery"
    assert context.permalink == "https://t.me/Bakery/11"
    assert not context.has_attachments


def test_link_preview_is_not_an_attachment() -> None:
    message = DummyMessage(
        chat_id=-100123,
        message_id=12,
        text="bread https://example.com",
        media=MessageMediaWebPage(webpage=WebPageEmpty(id=1)),
    )
    assert not has_attachments(message)


def test_missing_text_becomes_empty_string() -> None:
    message = DummyMessage(chat_id=-100123, message_id=13, text=None, media=MessageMediaPhoto())
    context = build_context(message)
    assert context.text == ""
    assert context.permalink is None
