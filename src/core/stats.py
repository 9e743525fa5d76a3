"""Post statistics over the recorded bread history (core domain).

Everything here is a pure function of a snapshot of ``BreadPost`` rows. The
store hands posts over newest first, but the helpers sort their parsed copy
again so a misordered snapshot cannot flip the sign of a duration.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Sequence, Tuple

from core.errors import InsufficientHistoryError, ParseError
from core.models import BreadPost

SECONDS_PER_DAY = 86400

# Full date, a T (or space) separator, then at least hours and minutes.
_RFC3339_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}[Tt ]\d{2}:\d{2}")


@dataclass(frozen=True)
class PostStats:
    """Derived numbers used in the bread post reply."""

    count: int
    days_since_last: int
    posts_per_day: float
    latest: BreadPost
    previous: BreadPost


def parse_post_date(value: str) -> datetime:
    """Parse an RFC3339 timestamp into an aware datetime.

    A trailing ``Z`` is accepted and values without an offset are read as UTC.
    Date-only values and the compact ``20240110T000000`` form are rejected.
    """

    text = (value or "").strip() if isinstance(value, str) else ""
    if not _RFC3339_PREFIX.match(text):
        raise ParseError(value)
    if text.endswith(("Z", "z")):
        text = f"{text[:-1]}+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except (TypeError, ValueError) as exc:
        raise ParseError(value) from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _sorted_newest_first(posts: Sequence[BreadPost]) -> List[Tuple[datetime, BreadPost]]:
    # Parse the whole batch before anything else so one corrupt row fails it.
    parsed = [(parse_post_date(post.date), post) for post in posts]
    parsed.sort(key=lambda item: item[0], reverse=True)
    return parsed


def _require_history(posts: Sequence[BreadPost]) -> None:
    if len(posts) < 2:
        raise InsufficientHistoryError(
            f"Need at least 2 posts, have {len(posts)}"
        )


def total_count(posts: Sequence[BreadPost]) -> int:
    return len(posts)


def _days_between(newer: datetime, older: datetime) -> int:
    # Truncate toward zero rather than flooring.
    return int((newer - older).total_seconds() / SECONDS_PER_DAY)


def _rate(count: int, newest: datetime, oldest: datetime) -> float:
    span_days = (newest - oldest).total_seconds() / SECONDS_PER_DAY
    if span_days <= 0:
        raise InsufficientHistoryError("All posts share the same timestamp")
    return count / span_days


def days_since_last_post(posts: Sequence[BreadPost]) -> int:
    """Whole days between the newest post and the one before it."""

    _require_history(posts)
    ordered = _sorted_newest_first(posts)
    return _days_between(ordered[0][0], ordered[1][0])


def posts_per_day(posts: Sequence[BreadPost]) -> float:
    """Average bread posts per day across the whole recorded history.

    The span is newest minus oldest, so it is never negative.
    """

    _require_history(posts)
    ordered = _sorted_newest_first(posts)
    return _rate(len(ordered), ordered[0][0], ordered[-1][0])


def compute_stats(posts: Sequence[BreadPost]) -> PostStats:
    """Compute every reply statistic in one pass over the snapshot.

    Raises:
        ParseError: a stored timestamp is malformed.
        InsufficientHistoryError: fewer than two posts, or a zero-length span.
    """

    ordered = _sorted_newest_first(posts)
    _require_history(posts)
    (newest_at, newest), (previous_at, previous) = ordered[0], ordered[1]
    return PostStats(
        count=len(ordered),
        days_since_last=_days_between(newest_at, previous_at),
        posts_per_day=_rate(len(ordered), newest_at, ordered[-1][0]),
        latest=newest,
        previous=previous,
    )
