"""SQLite storage operations for the key/value ``config`` table.

Callers pass the connection; locking is the Store Facade's job.
"""

import sqlite3

from shotauto.features.config.models import (
    DEFAULT_OLLAMA_ENDPOINT,
    DEFAULT_POLL_INTERVAL_SECS,
    KEY_OLLAMA_ENDPOINT,
    KEY_POLL_INTERVAL_SECS,
    KEY_TELEGRAM_BOT_TOKEN,
    KEY_TELEGRAM_CHAT_ID,
    KEY_YOUTUBE_API_KEY,
    AppConfig,
)
from shotauto.platform.logging_config import get_logger

logger = get_logger(__name__)


def parse_poll_interval(text: str | None) -> tuple[int, bool]:
    """Lenient decode for the poll interval.

    Returns ``(seconds, was_defaulted)``.  Missing, non-integer and negative
    values all fall back to the default rather than raising.
    """
    if text is None:
        return DEFAULT_POLL_INTERVAL_SECS, True
    try:
        value = int(text.strip())
    except ValueError:
        logger.warning("poll_interval_defaulted", raw=text)
        return DEFAULT_POLL_INTERVAL_SECS, True
    if value < 0:
        logger.warning("poll_interval_defaulted", raw=text)
        return DEFAULT_POLL_INTERVAL_SECS, True
    return value, False


def get_config(conn: sqlite3.Connection, key: str) -> str | None:
    """Return the stored value for *key*, or None if it was never written."""
    row = conn.execute("SELECT value FROM config WHERE key = ?", (key,)).fetchone()
    return row["value"] if row else None


def set_config(conn: sqlite3.Connection, key: str, value: str) -> None:
    """Insert or overwrite a single key."""
    conn.execute(
        "INSERT OR REPLACE INTO config (key, value) VALUES (?, ?)",
        (key, value),
    )


def load_config(conn: sqlite3.Connection) -> AppConfig:
    """Read every recognized key, substituting defaults for missing ones."""
    poll_interval, _ = parse_poll_interval(get_config(conn, KEY_POLL_INTERVAL_SECS))
    return AppConfig(
        youtube_api_key=get_config(conn, KEY_YOUTUBE_API_KEY),
        telegram_bot_token=get_config(conn, KEY_TELEGRAM_BOT_TOKEN),
        telegram_chat_id=get_config(conn, KEY_TELEGRAM_CHAT_ID),
        ollama_endpoint=get_config(conn, KEY_OLLAMA_ENDPOINT) or DEFAULT_OLLAMA_ENDPOINT,
        poll_interval_secs=poll_interval,
    )


def save_config(conn: sqlite3.Connection, config: AppConfig) -> None:
    """Persist *config*.

    Optional secrets that are None are skipped so a previously saved value
    survives a partial save.  Endpoint and poll interval are always written.
    """
    optional = {
        KEY_YOUTUBE_API_KEY: config.youtube_api_key,
        KEY_TELEGRAM_BOT_TOKEN: config.telegram_bot_token,
        KEY_TELEGRAM_CHAT_ID: config.telegram_chat_id,
    }
    for key, value in optional.items():
        if value is not None:
            set_config(conn, key, value)

    set_config(conn, KEY_OLLAMA_ENDPOINT, config.ollama_endpoint)
    set_config(conn, KEY_POLL_INTERVAL_SECS, str(config.poll_interval_secs))
    logger.info(
        "config_saved",
        skipped=[key for key, value in optional.items() if value is None],
    )
