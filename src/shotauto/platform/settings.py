"""Process-level settings read from the environment.

These are distinct from the persisted ``config`` table: they decide *where*
the store lives and how the process logs, not what the application is
configured to do.

Variables (a ``.env`` file found from the working directory is honoured):
    SHOTAUTO_DB: Path of the SQLite database file.
    XDG_DATA_HOME: Base directory for the default database location.
    LOG_LEVEL: Root log level name (default: INFO).
    ENV: "development" switches logs to the console renderer.
"""

import logging
import os
from functools import lru_cache
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

APP_DIR_NAME = "shotauto"
DB_FILE_NAME = "shotauto.db"


@lru_cache(maxsize=1)
def _load_env() -> None:
    """Load ``.env`` once per process without overriding real variables."""
    load_dotenv(find_dotenv(usecwd=True), override=False)


def data_dir() -> Path:
    """Return the per-user application data directory."""
    _load_env()
    base = os.getenv("XDG_DATA_HOME")
    root = Path(base) if base else Path.home() / ".local" / "share"
    return root / APP_DIR_NAME


def database_path() -> Path:
    """Return the configured database path, honouring ``SHOTAUTO_DB``."""
    _load_env()
    override = os.getenv("SHOTAUTO_DB")
    if override:
        return Path(override).expanduser()
    return data_dir() / DB_FILE_NAME


def log_level() -> int:
    """Return the numeric level for ``LOG_LEVEL``; unknown names mean INFO."""
    _load_env()
    level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), None)
    return level if isinstance(level, int) else logging.INFO


def environment() -> str:
    _load_env()
    return os.getenv("ENV", "production")
