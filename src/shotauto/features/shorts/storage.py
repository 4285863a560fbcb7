"""SQLite storage operations for generated shorts."""

import sqlite3

from shotauto.features.shorts.models import Short
from shotauto.platform.logging_config import get_logger

logger = get_logger(__name__)


def create_short(conn: sqlite3.Connection, short: Short) -> int:
    cursor = conn.execute(
        """
        INSERT INTO shorts (job_id, script, audio_path, video_path, duration_sec, telegram_sent)
        VALUES (?, ?, ?, ?, ?, ?)
        """,
        (
            short.job_id,
            short.script,
            short.audio_path,
            short.video_path,
            short.duration_sec,
            int(short.telegram_sent),
        ),
    )
    logger.info("short_created", short_id=cursor.lastrowid, job_id=short.job_id)
    return cursor.lastrowid


def get_short_for_job(conn: sqlite3.Connection, job_id: int) -> Short | None:
    """Return the latest short produced for *job_id*, or None."""
    row = conn.execute(
        """
        SELECT id, job_id, script, audio_path, video_path, duration_sec, telegram_sent
        FROM shorts WHERE job_id = ? ORDER BY id DESC LIMIT 1
        """,
        (job_id,),
    ).fetchone()
    if row is None:
        return None
    return Short(
        id=row["id"],
        job_id=row["job_id"],
        script=row["script"],
        audio_path=row["audio_path"],
        video_path=row["video_path"],
        duration_sec=row["duration_sec"],
        telegram_sent=bool(row["telegram_sent"]),
    )


def mark_short_sent(conn: sqlite3.Connection, short_id: int) -> None:
    conn.execute("UPDATE shorts SET telegram_sent = 1 WHERE id = ?", (short_id,))
    logger.info("short_marked_sent", short_id=short_id)
