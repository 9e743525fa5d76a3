"""Reply text for recorded bread posts.

Keeping formatting here prevents drift between notifier adapters; every
delivery channel sends the same plain-text body.
"""

from __future__ import annotations

from core.stats import PostStats

HEADER = "New bread post!"


def format_bppd(value: float) -> str:
    return f"{value:.2f}"


def format_reply(stats: PostStats) -> str:
    """Return the reply for a post that has at least one predecessor."""

    lines = [
        HEADER,
        f"This is bread post number {stats.count}.",
        f"It has been {stats.days_since_last} days since the last bread post.",
        f"Current BPPD is {format_bppd(stats.posts_per_day)}",
        f"Link to previous post: {stats.previous.message_url}",
    ]
    return "\n".join(lines)


def format_first_post_reply(count: int) -> str:
    """Return the reply used when there is not enough history for stats."""

    lines = [HEADER, f"This is bread post number {count}."]
    if count <= 1:
        lines.append("This is the first bread post on record.")
    else:
        lines.append("Not enough history yet to work out the BPPD.")
    return "\n".join(lines)
