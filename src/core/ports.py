"""Ports (interfaces) used by the core pipeline.

Ports define the minimal contracts for storage and notification adapters so
that the core can be reused with different backends.
"""

from __future__ import annotations

from typing import Protocol, Sequence

from core.models import BreadPost, MessageContext, PostId


class PostStorePort(Protocol):
    """Append-only bread post log required by the core pipeline.

    Implementations raise ``StorageError`` (or ``DuplicatePostError``) on
    failure.
    """

    def append(self, post: BreadPost) -> None:
        ...

    def list_all_descending(self) -> Sequence[BreadPost]:
        ...

    def contains(self, post_id: PostId) -> bool:
        ...


class NotifierPort(Protocol):
    """Reply delivery required by the core pipeline.

    Implementations raise ``DeliveryError`` when the reply cannot be sent.
    """

    async def send(self, context: MessageContext, text: str) -> None:
        ...
