"""Store Facade: the single owner of the SQLite connection.

Every public method takes the instance lock for its full duration, so
operations from different threads are totally ordered and never observe a
partial write.  Feature storage modules receive the connection from here
and never open their own.

Low-level ``sqlite3.Error`` is translated into ``StoreError`` with a
readable message.  Domain errors from the jobs feature
(``InvalidTransitionError``, ``JobNotFoundError``) pass through unchanged.
"""

import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from shotauto.features.config import storage as config_storage
from shotauto.features.config.models import AppConfig
from shotauto.features.jobs import storage as job_storage
from shotauto.features.jobs.models import Job, JobStatus, Metric
from shotauto.features.shorts import storage as short_storage
from shotauto.features.shorts.models import Short
from shotauto.features.stats import storage as stats_storage
from shotauto.features.stats.models import DashboardStats
from shotauto.features.trends import storage as trend_storage
from shotauto.features.trends.models import Trend
from shotauto.platform.logging_config import get_logger
from shotauto.platform.settings import database_path

logger = get_logger(__name__)

MEMORY = ":memory:"

SCHEMA = """
CREATE TABLE IF NOT EXISTS config (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS trends (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    video_id TEXT UNIQUE NOT NULL,
    title TEXT NOT NULL,
    channel TEXT,
    views INTEGER,
    category TEXT,
    fetched_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS jobs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    trend_id INTEGER REFERENCES trends(id),
    status TEXT DEFAULT 'pending'
        CHECK(status IN ('pending','generating','rendering','done','failed')),
    priority INTEGER DEFAULT 0,
    retry_count INTEGER DEFAULT 0,
    error_msg TEXT,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    started_at TIMESTAMP,
    finished_at TIMESTAMP
);

CREATE TABLE IF NOT EXISTS shorts (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    job_id INTEGER REFERENCES jobs(id),
    script TEXT,
    audio_path TEXT,
    video_path TEXT,
    duration_sec REAL,
    telegram_sent BOOLEAN DEFAULT 0
);

CREATE TABLE IF NOT EXISTS metrics (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    job_id INTEGER REFERENCES jobs(id),
    stage TEXT,
    duration_ms INTEGER,
    recorded_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_jobs_status ON jobs(status);
CREATE INDEX IF NOT EXISTS idx_trends_video_id ON trends(video_id);
"""


class StoreError(Exception):
    """A storage-level failure (I/O, constraint, schema)."""


class ShotStore:
    """Thread-safe handle over the ShotAuto database."""

    def __init__(self, path: str | Path = MEMORY):
        self.path = path
        self._conn = None
        try:
            if str(path) != MEMORY:
                Path(path).parent.mkdir(parents=True, exist_ok=True)
            # Autocommit: single statements are atomic, the claim opens
            # its own transaction.
            self._conn = sqlite3.connect(
                str(path),
                isolation_level=None,
                check_same_thread=False,
            )
            self._conn.row_factory = sqlite3.Row
            self._conn.executescript(SCHEMA)
        except (sqlite3.Error, OSError) as exc:
            logger.error("store_bootstrap_failed", path=str(path), error=str(exc))
            if self._conn is not None:
                self._conn.close()
            raise StoreError(f"Could not initialise database at {path}: {exc}") from exc
        self._lock = threading.Lock()
        logger.debug("store_opened", path=str(path))

    @contextmanager
    def _locked(self, operation: str) -> Iterator[sqlite3.Connection]:
        with self._lock:
            try:
                yield self._conn
            except sqlite3.Error as exc:
                logger.error("store_operation_failed", operation=operation, error=str(exc))
                raise StoreError(f"{operation} failed: {exc}") from exc

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def __enter__(self) -> "ShotStore":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # -- config ----------------------------------------------------------------

    def get_config(self, key: str) -> str | None:
        with self._locked("get_config") as conn:
            return config_storage.get_config(conn, key)

    def set_config(self, key: str, value: str) -> None:
        with self._locked("set_config") as conn:
            config_storage.set_config(conn, key, value)

    def load_config(self) -> AppConfig:
        with self._locked("load_config") as conn:
            return config_storage.load_config(conn)

    def save_config(self, config: AppConfig) -> None:
        with self._locked("save_config") as conn:
            config_storage.save_config(conn, config)

    # -- trends ----------------------------------------------------------------

    def insert_trend(self, trend: Trend) -> int:
        with self._locked("insert_trend") as conn:
            return trend_storage.insert_trend(conn, trend)

    def get_trend_by_video_id(self, video_id: str) -> Trend | None:
        with self._locked("get_trend_by_video_id") as conn:
            return trend_storage.get_trend_by_video_id(conn, video_id)

    def get_trend(self, trend_id: int) -> Trend | None:
        with self._locked("get_trend") as conn:
            return trend_storage.get_trend(conn, trend_id)

    def list_trends(self, limit: int = 50) -> list[Trend]:
        with self._locked("list_trends") as conn:
            return trend_storage.list_trends(conn, limit)

    # -- jobs ------------------------------------------------------------------

    def create_job(self, trend_id: int, priority: int = 0) -> int:
        with self._locked("create_job") as conn:
            return job_storage.create_job(conn, trend_id, priority)

    def get_job(self, job_id: int) -> Job | None:
        with self._locked("get_job") as conn:
            return job_storage.get_job(conn, job_id)

    def get_next_pending_job(self) -> tuple[Job, Trend] | None:
        with self._locked("get_next_pending_job") as conn:
            return job_storage.get_next_pending_job(conn)

    def claim_next_pending_job(
        self, status: JobStatus = JobStatus.GENERATING
    ) -> tuple[Job, Trend] | None:
        with self._locked("claim_next_pending_job") as conn:
            return job_storage.claim_next_pending_job(conn, status)

    def update_job_status(
        self,
        job_id: int,
        status: JobStatus,
        error_msg: str | None = None,
        *,
        validate: bool = False,
    ) -> None:
        with self._locked("update_job_status") as conn:
            job_storage.update_job_status(conn, job_id, status, error_msg, validate=validate)

    def retry_job(self, job_id: int) -> Job:
        with self._locked("retry_job") as conn:
            return job_storage.retry_job(conn, job_id)

    def record_metric(self, job_id: int, stage: str, duration_ms: int) -> int:
        with self._locked("record_metric") as conn:
            return job_storage.record_metric(conn, job_id, stage, duration_ms)

    def list_metrics(self, job_id: int) -> list[Metric]:
        with self._locked("list_metrics") as conn:
            return job_storage.list_metrics(conn, job_id)

    # -- shorts ----------------------------------------------------------------

    def create_short(self, short: Short) -> int:
        with self._locked("create_short") as conn:
            return short_storage.create_short(conn, short)

    def get_short_for_job(self, job_id: int) -> Short | None:
        with self._locked("get_short_for_job") as conn:
            return short_storage.get_short_for_job(conn, job_id)

    def mark_short_sent(self, short_id: int) -> None:
        with self._locked("mark_short_sent") as conn:
            short_storage.mark_short_sent(conn, short_id)

    # -- stats -----------------------------------------------------------------

    def get_stats(self) -> DashboardStats:
        with self._locked("get_stats") as conn:
            return stats_storage.get_stats(conn)


def open_default_store() -> ShotStore:
    """Open the store at the path resolved from the environment."""
    return ShotStore(database_path())
