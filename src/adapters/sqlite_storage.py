"""SQLite storage adapter.

Implements the core PostStorePort using a simple SQLite database.
"""

from __future__ import annotations

import os
import sqlite3
import threading
from contextlib import closing, contextmanager
from datetime import timezone
from typing import Iterator, Tuple

from core.errors import DuplicatePostError, ParseError, StorageError
from core.models import BreadPost, PostId
from core.stats import parse_post_date

BUSY_TIMEOUT_SECONDS = 10.0


class SQLitePostStore:
    """Thin SQLite wrapper that satisfies the PostStorePort contract."""

    def __init__(self, db_path: str, timeout: float = BUSY_TIMEOUT_SECONDS) -> None:
        self._db_path = db_path
        self._timeout = timeout
        # Telethon can run several handlers at once; writes go through here.
        self._write_lock = threading.Lock()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = sqlite3.connect(self._db_path, timeout=self._timeout)
        except sqlite3.Error as exc:
            raise StorageError(f"Cannot open database {self._db_path}: {exc}") from exc
        conn.row_factory = sqlite3.Row
        with closing(conn):
            # The connection context commits on success and rolls back on error.
            with conn:
                yield conn

    def init_db(self) -> None:
        """Create the bread_posts table if it does not exist.

        Inserts are positional, so the column order (id, message_url, date)
        is part of the on-disk contract.
        """

        directory = os.path.dirname(os.path.abspath(self._db_path))
        os.makedirs(directory, exist_ok=True)
        try:
            with self._connect() as conn:
                # bread_posts is an append-only log of every qualifying post.
                # Fields:
                # - id: Telegram message id (PRIMARY KEY, guards re-delivery)
                # - message_url: permalink to the original message
                # - date: RFC3339 timestamp in UTC
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS bread_posts (
                        id PRIMARY KEY,
                        message_url TEXT,
                        date TEXT
                    )
                    """
                )
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to initialise database: {exc}") from exc

    def append(self, post: BreadPost) -> None:
        """Insert one post. Raises DuplicatePostError if the id exists.

        The date is rewritten in UTC so ORDER BY date stays chronological
        whatever offset the caller used.
        """

        try:
            date = parse_post_date(post.date).astimezone(timezone.utc).isoformat()
        except ParseError as exc:
            raise StorageError(f"Refusing to store post {post.id}: {exc}") from exc

        with self._write_lock:
            try:
                with self._connect() as conn:
                    conn.execute(
                        "INSERT INTO bread_posts VALUES (?, ?, ?)",
                        (post.id, post.message_url, date),
                    )
            except sqlite3.IntegrityError as exc:
                raise DuplicatePostError(post.id) from exc
            except sqlite3.Error as exc:
                raise StorageError(f"Failed to insert post {post.id}: {exc}") from exc

    def list_all_descending(self) -> Tuple[BreadPost, ...]:
        """Return every recorded post, newest first."""

        try:
            with self._connect() as conn:
                rows = conn.execute(
                    "SELECT id, message_url, date FROM bread_posts ORDER BY date DESC"
                ).fetchall()
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to read posts: {exc}") from exc
        return tuple(
            BreadPost(id=row["id"], message_url=row["message_url"], date=row["date"])
            for row in rows
        )

    def contains(self, post_id: PostId) -> bool:
        """Check if a post id has already been recorded."""

        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT 1 FROM bread_posts WHERE id = ?",
                    (post_id,),
                ).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to look up post {post_id}: {exc}") from exc
        return row is not None
