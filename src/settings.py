"""Static configuration for breadwatch.

User-editable settings live in config.json at the project root. Secrets stay
in .env, and the watch target can also come from the environment so a bare
.env deployment keeps working without a config file.
"""

import json
import os

from dotenv import load_dotenv

load_dotenv()

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

CONFIG_PATH = os.getenv("BREADWATCH_CONFIG", os.path.join(PROJECT_ROOT, "config.json"))


def _load_json_config() -> dict:
    """Load config.json if present; an absent file means defaults."""

    if not os.path.exists(CONFIG_PATH):
        return {}

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _resolve_path(path: str) -> str:
    if os.path.isabs(path):
        return path
    return os.path.join(PROJECT_ROOT, path)


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Watch target: one author in one channel.
# - TARGET_USER: numeric Telegram user id of the poster
# - TARGET_CHANNEL: chat id (any form) or @username
_watch = _CONFIG.get("watch", {})
TARGET_USER = _watch.get("target_user", os.getenv("TARGET_USER"))
TARGET_CHANNEL = _watch.get("target_channel", os.getenv("TARGET_CHANNEL"))
KEYWORD = _watch.get("keyword", "bread")

# Where to store the SQLite database.
_database = _CONFIG.get("database", {})
DB_PATH = _resolve_path(_database.get("path", os.getenv("DB_PATH", "bread_prod.db")))

# Login: a bot token is preferred, otherwise a user session is used.
BOT_TOKEN = os.getenv("BOT_TOKEN")

# Notification method switches adapters without changing core logic.
# - "reply": answer through the Telethon client
# - "bot": answer through the Bot API using BOT_API
_notifications = _CONFIG.get("notifications", {})
NOTIFICATION_METHOD = _notifications.get("notification_method", "reply")

# Catch-up scan settings for startup backfill.
_catch_up = _CONFIG.get("catch_up", {})
CATCH_UP_ENABLED = bool(_catch_up.get("enabled", False))
CATCH_UP_MESSAGES_PER_SOURCE = int(_catch_up.get("messages_per_source", 50))

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {"enabled": True})
