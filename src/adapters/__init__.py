"""Adapters that connect the breadwatch core to Telegram and SQLite."""
