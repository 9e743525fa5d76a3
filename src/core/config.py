"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_KEYWORD = "bread"


@dataclass(frozen=True)
class WatchConfig:
    """Who and where to watch. Built once at startup."""

    target_author_id: int
    channel_keys: frozenset[str]
    keyword: str = DEFAULT_KEYWORD


@dataclass(frozen=True)
class CatchUpConfig:
    """Startup backfill settings."""

    enabled: bool
    messages_per_source: int
