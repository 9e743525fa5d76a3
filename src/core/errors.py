"""Error types raised across the core and adapters."""

from __future__ import annotations


class BreadWatchError(Exception):
    """Base class for all breadwatch failures."""


class ParseError(BreadWatchError, ValueError):
    """A stored timestamp is not a valid RFC3339 date-time."""

    def __init__(self, value: str) -> None:
        super().__init__(f"Invalid post timestamp: {value!r}")
        self.value = value


class InsufficientHistoryError(BreadWatchError):
    """Not enough recorded posts to derive a statistic."""


class StorageError(BreadWatchError):
    """The post store could not complete a read or write."""


class DuplicatePostError(StorageError):
    """A post with the same id is already recorded."""

    def __init__(self, post_id) -> None:
        super().__init__(f"Post {post_id} is already recorded")
        self.post_id = post_id


class DeliveryError(BreadWatchError):
    """The reply could not be delivered to the chat."""
