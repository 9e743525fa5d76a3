"""Telegram client factory for breadwatch.

The client is connected and authorised by ``app`` and ``login``; this module
only turns the .env credentials into a TelegramClient.
"""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv
from telethon import TelegramClient

LOGGER = logging.getLogger(__name__)

DEFAULT_SESSION_NAME = "breadwatch"


def build_client() -> TelegramClient:
    """Create a Telethon client from API_ID, API_HASH and SESSION_NAME.

    Telethon needs the API pair for bot-token logins as well, so both are
    mandatory whatever login method is used later.
    """

    load_dotenv()

    api_id = os.getenv("API_ID")
    api_hash = os.getenv("API_HASH")
    if not api_id or not api_hash:
        raise RuntimeError("Missing API_ID or API_HASH in environment")
    try:
        api_id_value = int(api_id)
    except ValueError as exc:
        raise RuntimeError(f"API_ID must be numeric, got {api_id!r}") from exc

    session_name = os.getenv("SESSION_NAME") or DEFAULT_SESSION_NAME
    LOGGER.info("Initializing Telegram client (session %s)", session_name)
    return TelegramClient(session_name, api_id_value, api_hash)
