from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Optional

from core.config import WatchConfig
from core.errors import DeliveryError, DuplicatePostError, StorageError
from core.models import BreadPost, MessageContext
from core.processor import BreadPostProcessor, post_from_context
from core.source_keys import channel_key_variants

CHAT_ID = -1001234567890
CONFIG = WatchConfig(target_author_id=1001, channel_keys=channel_key_variants(CHAT_ID))


class FakeStore:
    def __init__(self, posts: Optional[list[BreadPost]] = None) -> None:
        self.posts: list[BreadPost] = list(posts or [])
        self.fail_reads = False

    def append(self, post: BreadPost) -> None:
        if any(existing.id == post.id for existing in self.posts):
            raise DuplicatePostError(post.id)
        self.posts.append(post)

    def list_all_descending(self) -> tuple[BreadPost, ...]:
        if self.fail_reads:
            raise StorageError("disk gone")
        return tuple(sorted(self.posts, key=lambda post: post.date, reverse=True))

    def contains(self, post_id) -> bool:
        return any(post.id == post_id for post in self.posts)


class FakeNotifier:
    def __init__(self, fail: bool = False) -> None:
        self.sent: list[tuple[MessageContext, str]] = []
        self._fail = fail

    async def send(self, context: MessageContext, text: str) -> None:
        if self._fail:
            raise DeliveryError("chat unavailable")
        self.sent.append((context, text))


def _make_context(
    *,
    message_id: int,
    day: int,
    text: str = "bread!",
    author_id: int = 1001,
    has_attachments: bool = True,
) -> MessageContext:
    return MessageContext(
        source_key=f"chat_id:{CHAT_ID}",
        chat_id=CHAT_ID,
        author_id=author_id,
        message_id=message_id,
        date=datetime(2024, 1, day, tzinfo=timezone.utc),
        text=text,
        has_attachments=has_attachments,
        permalink=f"https://t.me/c/1234567890/{message_id}",
    )


def _post(message_id: int, day: int) -> BreadPost:
    return post_from_context(_make_context(message_id=message_id, day=day))


def test_ineligible_message_touches_nothing() -> None:
    store = FakeStore()
    notifier = FakeNotifier()
    processor = BreadPostProcessor(config=CONFIG, store=store, notifier=notifier)

    result = asyncio.run(processor.handle(_make_context(message_id=1, day=1, text="cake")))

    assert result is None
    assert not store.posts
    assert not notifier.sent


def test_first_post_gets_first_post_reply() -> None:
    store = FakeStore()
    notifier = FakeNotifier()
    processor = BreadPostProcessor(config=CONFIG, store=store, notifier=notifier)

    result = asyncio.run(processor.handle(_make_context(message_id=1, day=1)))

    assert result is None
    assert [post.id for post in store.posts] == [1]
    assert len(notifier.sent) == 1
    assert "bread post number 1." in notifier.sent[0][1]
    assert "first bread post" in notifier.sent[0][1]


def test_follow_up_post_replies_with_stats() -> None:
    store = FakeStore([_post(1, 1), _post(2, 2), _post(3, 3), _post(4, 4)])
    notifier = FakeNotifier()
    processor = BreadPostProcessor(config=CONFIG, store=store, notifier=notifier)

    stats = asyncio.run(processor.handle(_make_context(message_id=5, day=5)))

    assert stats is not None
    assert stats.count == 5
    assert stats.days_since_last == 1
    assert stats.posts_per_day == 1.25
    _, reply = notifier.sent[0]
    assert reply == (
        "New bread post!\n"
        "This is bread post number 5.\n"
        "It has been 1 days since the last bread post.\n"
        "Current BPPD is 1.25\n"
        "Link to previous post: https://t.me/c/1234567890/4"
    )


def test_redelivered_message_is_not_counted_twice() -> None:
    store = FakeStore([_post(1, 1)])
    notifier = FakeNotifier()
    processor = BreadPostProcessor(config=CONFIG, store=store, notifier=notifier)

    asyncio.run(processor.handle(_make_context(message_id=1, day=1)))

    assert len(store.posts) == 1
    assert not notifier.sent


def test_corrupt_history_skips_reply_but_keeps_insert() -> None:
    store = FakeStore([BreadPost(id=1, message_url="https://t.me/c/1/1", date="not a date")])
    notifier = FakeNotifier()
    processor = BreadPostProcessor(config=CONFIG, store=store, notifier=notifier)

    result = asyncio.run(processor.handle(_make_context(message_id=2, day=2)))

    assert result is None
    assert store.contains(2)
    assert not notifier.sent


def test_read_failure_is_logged_not_raised() -> None:
    store = FakeStore()
    store.fail_reads = True
    notifier = FakeNotifier()
    processor = BreadPostProcessor(config=CONFIG, store=store, notifier=notifier)

    result = asyncio.run(processor.handle(_make_context(message_id=1, day=1)))

    assert result is None
    assert store.contains(1)
    assert not notifier.sent


def test_delivery_failure_keeps_recorded_post() -> None:
    store = FakeStore([_post(1, 1)])
    processor = BreadPostProcessor(config=CONFIG, store=store, notifier=FakeNotifier(fail=True))

    stats = asyncio.run(processor.handle(_make_context(message_id=2, day=3)))

    assert stats is not None
    assert stats.days_since_last == 2
    assert store.contains(2)


def test_record_skips_known_and_ineligible_posts() -> None:
    store = FakeStore([_post(1, 1)])
    notifier = FakeNotifier()
    processor = BreadPostProcessor(config=CONFIG, store=store, notifier=notifier)

    assert not processor.record(_make_context(message_id=1, day=1))
    assert not processor.record(_make_context(message_id=2, day=2, has_attachments=False))
    assert processor.record(_make_context(message_id=3, day=3))
    assert [post.id for post in store.posts] == [1, 3]
    assert not notifier.sent


def test_post_from_context_normalizes_to_utc() -> None:
    context = _make_context(message_id=9, day=9)
    post = post_from_context(context)
    assert post.id == 9
    assert post.date == "2024-01-09T00:00:00+00:00"
    assert post.message_url == "https://t.me/c/1234567890/9"
