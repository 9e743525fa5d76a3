"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any integration-specific types.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

PostId = Union[int, str]


@dataclass(frozen=True)
class MessageContext:
    """Minimal message context used by the core processing pipeline."""

    source_key: str
    chat_id: int
    author_id: Optional[int]
    message_id: int
    date: datetime
    text: str
    has_attachments: bool
    permalink: Optional[str]


@dataclass(frozen=True)
class BreadPost:
    """Persisted representation of a single bread post.

    ``date`` is kept as the stored RFC3339 string; parsing happens in
    ``core.stats`` so a corrupt row surfaces as a typed error there.
    """

    id: PostId
    message_url: str
    date: str
