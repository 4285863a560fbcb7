"""SQLite storage operations for the ``trends`` registry."""

import sqlite3

from shotauto.features.trends.models import Trend
from shotauto.platform.logging_config import get_logger
from shotauto.platform.timestamps import format_timestamp, parse_timestamp

logger = get_logger(__name__)

TREND_COLUMNS = "id, video_id, title, channel, views, category, fetched_at"


def row_to_trend(row: sqlite3.Row, prefix: str = "") -> Trend:
    """Build a Trend from a row, tolerating a bad ``fetched_at``.

    *prefix* selects aliased columns when the row comes from a join.
    """
    fetched_at, _ = parse_timestamp(row[f"{prefix}fetched_at"])
    return Trend(
        id=row[f"{prefix}id"],
        video_id=row[f"{prefix}video_id"],
        title=row[f"{prefix}title"],
        channel=row[f"{prefix}channel"],
        views=row[f"{prefix}views"],
        category=row[f"{prefix}category"],
        fetched_at=fetched_at,
    )


def insert_trend(conn: sqlite3.Connection, trend: Trend) -> int:
    """Insert *trend* unless its video_id is already known.

    First write wins: only a duplicate video_id is ignored, and 0 is
    returned since the existing row is not re-fetched.  Any other
    constraint failure raises.  Use ``get_trend_by_video_id`` when the
    real id is needed.
    """
    cursor = conn.execute(
        """
        INSERT INTO trends (video_id, title, channel, views, category, fetched_at)
        VALUES (?, ?, ?, ?, ?, ?)
        ON CONFLICT(video_id) DO NOTHING
        """,
        (
            trend.video_id,
            trend.title,
            trend.channel,
            trend.views,
            trend.category,
            format_timestamp(trend.fetched_at),
        ),
    )
    if cursor.rowcount == 0:
        logger.debug("trend_duplicate_ignored", video_id=trend.video_id)
        return 0
    logger.debug("trend_inserted", video_id=trend.video_id, trend_id=cursor.lastrowid)
    return cursor.lastrowid


def get_trend_by_video_id(conn: sqlite3.Connection, video_id: str) -> Trend | None:
    """Return the trend with the given external id, or None."""
    row = conn.execute(
        f"SELECT {TREND_COLUMNS} FROM trends WHERE video_id = ?", (video_id,)
    ).fetchone()
    return row_to_trend(row) if row else None


def get_trend(conn: sqlite3.Connection, trend_id: int) -> Trend | None:
    """Return the trend with the given row id, or None."""
    row = conn.execute(
        f"SELECT {TREND_COLUMNS} FROM trends WHERE id = ?", (trend_id,)
    ).fetchone()
    return row_to_trend(row) if row else None


def list_trends(conn: sqlite3.Connection, limit: int = 50) -> list[Trend]:
    """Return the most recently fetched trends first."""
    rows = conn.execute(
        f"SELECT {TREND_COLUMNS} FROM trends ORDER BY julianday(fetched_at) DESC, id DESC LIMIT ?",
        (limit,),
    ).fetchall()
    return [row_to_trend(row) for row in rows]
