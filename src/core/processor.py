"""Core message processing pipeline.

This module is integration-agnostic. It only relies on ports for storage and
notifications, enabling future frontends or adapters without changes here.
"""

from __future__ import annotations

import logging
from datetime import timezone
from typing import Optional

from core.config import WatchConfig
from core.eligibility import is_eligible
from core.errors import (
    DeliveryError,
    DuplicatePostError,
    InsufficientHistoryError,
    ParseError,
    StorageError,
)
from core.models import BreadPost, MessageContext
from core.ports import NotifierPort, PostStorePort
from core.replies import format_first_post_reply, format_reply
from core.stats import PostStats, compute_stats

LOGGER = logging.getLogger(__name__)


def post_from_context(context: MessageContext) -> BreadPost:
    """Build the row to persist for an eligible message."""

    # Stored in UTC so the store's string ordering matches time ordering.
    date = context.date
    if date.tzinfo is None:
        date = date.replace(tzinfo=timezone.utc)
    return BreadPost(
        id=context.message_id,
        message_url=context.permalink or "",
        date=date.astimezone(timezone.utc).isoformat(),
    )


class BreadPostProcessor:
    """Orchestrates filtering, persistence, statistics and the reply."""

    def __init__(
        self,
        config: WatchConfig,
        store: PostStorePort,
        notifier: NotifierPort,
    ) -> None:
        self._config = config
        self._store = store
        self._notifier = notifier

    def _append(self, context: MessageContext) -> bool:
        try:
            self._store.append(post_from_context(context))
        except DuplicatePostError:
            # Redelivery of a message we already counted.
            LOGGER.info("Bread post %s already recorded", context.message_id)
            return False
        except StorageError:
            LOGGER.exception("Failed to record bread post %s", context.message_id)
            return False
        return True

    def record(self, context: MessageContext) -> bool:
        """Record an eligible message without replying.

        Returns True when a new row was written.
        """

        if not is_eligible(context, self._config):
            return False
        try:
            if self._store.contains(context.message_id):
                return False
        except StorageError:
            LOGGER.exception("Failed to look up bread post %s", context.message_id)
            return False
        return self._append(context)

    async def handle(self, context: MessageContext) -> Optional[PostStats]:
        """Process one message context through the core pipeline."""

        if not is_eligible(context, self._config):
            return None

        if not self._append(context):
            return None
        LOGGER.info("Bread post %s recorded", context.message_id)

        try:
            posts = self._store.list_all_descending()
        except StorageError:
            LOGGER.exception("Failed to load bread history")
            return None

        stats: Optional[PostStats] = None
        try:
            stats = compute_stats(posts)
        except InsufficientHistoryError:
            reply = format_first_post_reply(len(posts))
        except ParseError as exc:
            # The insert stays committed; we just refuse to compute on bad data.
            LOGGER.error("Skipping reply for %s: %s", context.message_id, exc)
            return None
        else:
            reply = format_reply(stats)

        try:
            await self._notifier.send(context, reply)
        except DeliveryError:
            LOGGER.exception("Failed to send reply for bread post %s", context.message_id)
        return stats
