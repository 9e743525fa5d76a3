"""Application entry point for the breadwatch bot."""

from __future__ import annotations

import argparse
import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional, Union

from art import tprint
from telethon import events

import settings
from adapters.sqlite_storage import SQLitePostStore
from adapters.telegram_bot_notifier import TelegramBotNotifier
from adapters.telegram_mapper import build_context
from adapters.telegram_notifier import TelegramReplyNotifier
from client import build_client
from core.config import CatchUpConfig, WatchConfig
from core.errors import InsufficientHistoryError, ParseError, StorageError
from core.processor import BreadPostProcessor
from core.replies import format_bppd
from core.source_keys import channel_key_variants
from core.stats import compute_stats
from login import authorize

NAME = "BREADWATCH"
FONT = "tarty-1"

LOGGER = logging.getLogger(__name__)


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


class _RedactingFormatter(logging.Formatter):
    def __init__(self, secrets: list[str], fmt: str, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._secrets = [secret for secret in secrets if secret]

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


def _collect_redaction_values(config: dict) -> list[str]:
    redact_cfg = config.get("redact", {}) if config else {}
    if not redact_cfg.get("enabled", False):
        return []
    values = []
    for name in redact_cfg.get("patterns", []):
        value = os.getenv(name)
        if value:
            values.append(value)
    return sorted(set(values), key=len, reverse=True)


def _configure_logging() -> None:
    config = settings.LOGGING or {}
    if not config.get("enabled", False):
        return

    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    formatter = _RedactingFormatter(_collect_redaction_values(config), fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/breadwatch.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        file_handler = RotatingFileHandler(
            path,
            maxBytes=int(file_cfg.get("max_bytes", 5 * 1024 * 1024)),
            backupCount=int(file_cfg.get("backup_count", 5)),
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)


def _channel_target(raw: Union[int, str]) -> Union[int, str]:
    """Return the configured channel as an int id when it is numeric."""

    if isinstance(raw, int):
        return raw
    try:
        return int(str(raw).strip())
    except ValueError:
        return str(raw).strip()


def build_watch_config() -> WatchConfig:
    """Build the single WatchConfig shared by every handler invocation."""

    if settings.TARGET_USER in (None, "") or settings.TARGET_CHANNEL in (None, ""):
        raise RuntimeError("TARGET_USER and TARGET_CHANNEL must be configured")
    try:
        target_author_id = int(settings.TARGET_USER)
    except (TypeError, ValueError) as exc:
        raise RuntimeError(f"TARGET_USER must be a numeric user id, got {settings.TARGET_USER!r}") from exc
    return WatchConfig(
        target_author_id=target_author_id,
        channel_keys=channel_key_variants(_channel_target(settings.TARGET_CHANNEL)),
        keyword=settings.KEYWORD,
    )


def _build_notifier(client):
    # "reply" answers through the watching client, "bot" through the Bot API.
    if settings.NOTIFICATION_METHOD == "bot":
        bot_token = os.getenv("BOT_API")
        if not bot_token:
            raise RuntimeError("BOT_API is required when notification_method=bot")
        return TelegramBotNotifier(bot_token=bot_token)
    if settings.NOTIFICATION_METHOD == "reply":
        return TelegramReplyNotifier(client)
    raise RuntimeError("notification_method must be 'reply' or 'bot'")


async def _catch_up_scan(client, processor: BreadPostProcessor, catch_up: CatchUpConfig) -> None:
    """Record bread posts made while the bot was offline, without replying."""

    if not catch_up.enabled:
        return

    target = _channel_target(settings.TARGET_CHANNEL)
    try:
        entity = await client.get_entity(target)
    except Exception:
        LOGGER.exception("Failed to resolve channel %s during catch-up", target)
        return

    messages = []
    async for message in client.iter_messages(entity, limit=catch_up.messages_per_source):
        messages.append(message)

    recorded = 0
    for message in reversed(messages):
        if processor.record(build_context(message)):
            recorded += 1

    LOGGER.info(
        "Catch-up scan complete: messages=%s, recorded=%s",
        len(messages),
        recorded,
    )


def _run() -> None:
    _print_banner()
    _configure_logging()

    LOGGER.info("Starting breadwatch")

    watch_config = build_watch_config()
    store = SQLitePostStore(settings.DB_PATH)
    store.init_db()
    LOGGER.info("Using database %s", settings.DB_PATH)

    client = build_client()
    client.loop.run_until_complete(client.connect())
    client.loop.run_until_complete(authorize(client, settings.BOT_TOKEN))

    notifier = _build_notifier(client)
    LOGGER.info("Selected notification method - %s", settings.NOTIFICATION_METHOD)

    processor = BreadPostProcessor(config=watch_config, store=store, notifier=notifier)

    # Backfill must finish before the live handler is registered.
    catch_up = CatchUpConfig(
        enabled=settings.CATCH_UP_ENABLED,
        messages_per_source=settings.CATCH_UP_MESSAGES_PER_SOURCE,
    )
    client.loop.run_until_complete(_catch_up_scan(client, processor, catch_up))

    # Every incoming message goes to the processor, which does the filtering.
    @client.on(events.NewMessage(incoming=True))
    async def handler(event) -> None:
        try:
            await processor.handle(build_context(event.message))
        except Exception:
            LOGGER.exception("Error while processing message")

    me = client.loop.run_until_complete(client.get_me())
    LOGGER.info("%s is connected!", getattr(me, "username", None) or getattr(me, "first_name", "breadwatch"))
    LOGGER.info("Listening for bread posts...")
    client.run_until_disconnected()


def _stats() -> None:
    store = SQLitePostStore(settings.DB_PATH)
    try:
        store.init_db()
        posts = store.list_all_descending()
    except StorageError as exc:
        print(f"Cannot read bread posts: {exc}")
        return

    print(f"Bread posts recorded: {len(posts)}")
    if not posts:
        return
    try:
        stats = compute_stats(posts)
    except InsufficientHistoryError:
        print(f"Latest post: {posts[0].message_url}")
        print("Not enough history yet to work out the BPPD.")
        return
    except ParseError as exc:
        print(f"Corrupt timestamp {exc.value!r} in the database; statistics unavailable.")
        return

    print(f"Days between the last two posts: {stats.days_since_last}")
    print(f"Current BPPD: {format_bppd(stats.posts_per_day)}")
    print(f"Latest post: {stats.latest.message_url}")


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="breadwatch")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("run", help="Start the bot")
    subparsers.add_parser("stats", help="Print bread statistics from the database")

    args = parser.parse_args(argv)
    if args.command == "stats":
        _stats()
        return
    _run()


if __name__ == "__main__":
    main()
