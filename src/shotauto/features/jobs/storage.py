"""SQLite storage operations for the job queue and its metrics log.

The connection is expected in autocommit mode (``isolation_level=None``);
single statements are atomic on their own and the claim opens its own
``BEGIN IMMEDIATE`` transaction.
"""

import sqlite3

from shotauto.features.jobs.models import (
    IN_PROGRESS_STATUSES,
    TERMINAL_STATUSES,
    InvalidTransitionError,
    Job,
    JobNotFoundError,
    JobStatus,
    Metric,
    decode_status,
    is_legal_transition,
)
from shotauto.features.trends.models import Trend
from shotauto.features.trends.storage import row_to_trend
from shotauto.platform.logging_config import get_logger
from shotauto.platform.timestamps import (
    parse_optional_timestamp,
    parse_timestamp,
    utc_now_iso,
)

logger = get_logger(__name__)

JOB_COLUMNS = (
    "id, trend_id, status, priority, retry_count, error_msg, "
    "created_at, started_at, finished_at"
)

# Queue order: most urgent first, then oldest, then insertion order.
# julianday() compares canonical text and CURRENT_TIMESTAMP text alike.
QUEUE_ORDER = "j.priority DESC, julianday(j.created_at) ASC, j.id ASC"

_JOB_WITH_TREND = """
    SELECT j.id, j.trend_id, j.status, j.priority, j.retry_count, j.error_msg,
           j.created_at, j.started_at, j.finished_at,
           t.id AS t_id, t.video_id AS t_video_id, t.title AS t_title,
           t.channel AS t_channel, t.views AS t_views,
           t.category AS t_category, t.fetched_at AS t_fetched_at
    FROM jobs j
    JOIN trends t ON j.trend_id = t.id
"""


def row_to_job(row: sqlite3.Row) -> Job:
    status, _ = decode_status(row["status"])
    created_at, _ = parse_timestamp(row["created_at"])
    return Job(
        id=row["id"],
        trend_id=row["trend_id"],
        status=status,
        priority=row["priority"],
        retry_count=row["retry_count"],
        error_msg=row["error_msg"],
        created_at=created_at,
        started_at=parse_optional_timestamp(row["started_at"]),
        finished_at=parse_optional_timestamp(row["finished_at"]),
    )


# ---------------------------------------------------------------------------
# Job CRUD
# ---------------------------------------------------------------------------


def create_job(conn: sqlite3.Connection, trend_id: int, priority: int = 0) -> int:
    """Queue a new pending job for *trend_id* and return its id.

    No deduplication: a trend may have any number of jobs.
    """
    cursor = conn.execute(
        "INSERT INTO jobs (trend_id, status, priority, created_at) VALUES (?, ?, ?, ?)",
        (trend_id, JobStatus.PENDING.value, priority, utc_now_iso()),
    )
    logger.info("job_created", job_id=cursor.lastrowid, trend_id=trend_id, priority=priority)
    return cursor.lastrowid


def get_job(conn: sqlite3.Connection, job_id: int) -> Job | None:
    row = conn.execute(f"SELECT {JOB_COLUMNS} FROM jobs WHERE id = ?", (job_id,)).fetchone()
    return row_to_job(row) if row else None


def get_next_pending_job(conn: sqlite3.Connection) -> tuple[Job, Trend] | None:
    """Return the most urgent pending job with its trend, without claiming it.

    The job stays ``pending``: two callers can both receive it unless one
    moves it on first.  Use ``claim_next_pending_job`` when several workers
    consume the queue.
    """
    row = conn.execute(
        f"{_JOB_WITH_TREND} WHERE j.status = ? ORDER BY {QUEUE_ORDER} LIMIT 1",
        (JobStatus.PENDING.value,),
    ).fetchone()
    if row is None:
        return None
    return row_to_job(row), row_to_trend(row, prefix="t_")


def claim_next_pending_job(
    conn: sqlite3.Connection, status: JobStatus = JobStatus.GENERATING
) -> tuple[Job, Trend] | None:
    """Atomically select the most urgent pending job and move it to *status*.

    Selection and the conditional update run inside one ``BEGIN IMMEDIATE``
    transaction, so no other connection can claim the same row in between.
    """
    if status not in IN_PROGRESS_STATUSES:
        raise ValueError(f"Claim status must be in progress, got {status.value}")

    conn.execute("BEGIN IMMEDIATE")
    try:
        row = conn.execute(
            f"SELECT j.id FROM jobs j JOIN trends t ON j.trend_id = t.id "
            f"WHERE j.status = ? ORDER BY {QUEUE_ORDER} LIMIT 1",
            (JobStatus.PENDING.value,),
        ).fetchone()
        if row is None:
            conn.execute("COMMIT")
            return None

        job_id = row["id"]
        conn.execute(
            "UPDATE jobs SET status = ?, started_at = ? WHERE id = ? AND status = ?",
            (status.value, utc_now_iso(), job_id, JobStatus.PENDING.value),
        )
        claimed = conn.execute(f"{_JOB_WITH_TREND} WHERE j.id = ?", (job_id,)).fetchone()
        conn.execute("COMMIT")
    except BaseException:
        conn.execute("ROLLBACK")
        raise

    logger.info("job_claimed", job_id=job_id, status=status.value)
    return row_to_job(claimed), row_to_trend(claimed, prefix="t_")


def update_job_status(
    conn: sqlite3.Connection,
    job_id: int,
    status: JobStatus,
    error_msg: str | None = None,
    *,
    validate: bool = False,
) -> None:
    """Move a job to *status*, stamping the fields that state owns.

    In-progress states stamp ``started_at``; terminal states stamp
    ``finished_at`` and record *error_msg*; anything else touches only the
    status column.

    By default the transition itself is not checked and an unknown job id
    is a no-op.  With ``validate=True`` the lifecycle is enforced and a
    missing job raises ``JobNotFoundError``.
    """
    if validate:
        current = get_job(conn, job_id)
        if current is None:
            raise JobNotFoundError(job_id)
        if not is_legal_transition(current.status, status):
            raise InvalidTransitionError(job_id, current.status, status)

    now = utc_now_iso()
    if status in IN_PROGRESS_STATUSES:
        cursor = conn.execute(
            "UPDATE jobs SET status = ?, started_at = ? WHERE id = ?",
            (status.value, now, job_id),
        )
    elif status in TERMINAL_STATUSES:
        cursor = conn.execute(
            "UPDATE jobs SET status = ?, finished_at = ?, error_msg = ? WHERE id = ?",
            (status.value, now, error_msg, job_id),
        )
    else:
        cursor = conn.execute(
            "UPDATE jobs SET status = ? WHERE id = ?",
            (status.value, job_id),
        )

    if cursor.rowcount == 0:
        logger.warning("job_status_update_missed", job_id=job_id, status=status.value)
        return
    logger.info("job_status_updated", job_id=job_id, status=status.value, error=error_msg)


def retry_job(conn: sqlite3.Connection, job_id: int) -> Job:
    """Send a failed job back to the queue, bumping its retry counter."""
    current = get_job(conn, job_id)
    if current is None:
        raise JobNotFoundError(job_id)
    if current.status is not JobStatus.FAILED:
        raise InvalidTransitionError(job_id, current.status, JobStatus.PENDING)

    cursor = conn.execute(
        """
        UPDATE jobs
        SET status = ?, retry_count = retry_count + 1,
            error_msg = NULL, started_at = NULL, finished_at = NULL
        WHERE id = ? AND status = ?
        """,
        (JobStatus.PENDING.value, job_id, JobStatus.FAILED.value),
    )
    job = get_job(conn, job_id)
    if cursor.rowcount == 0:
        # Another connection moved the job after it was read.
        raise InvalidTransitionError(
            job_id, job.status if job else current.status, JobStatus.PENDING
        )
    logger.info("job_requeued", job_id=job_id, retry_count=job.retry_count)
    return job


# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------


def record_metric(
    conn: sqlite3.Connection, job_id: int, stage: str, duration_ms: int
) -> int:
    """Append a stage timing for *job_id* and return the metric id."""
    cursor = conn.execute(
        "INSERT INTO metrics (job_id, stage, duration_ms, recorded_at) VALUES (?, ?, ?, ?)",
        (job_id, stage, duration_ms, utc_now_iso()),
    )
    logger.debug("metric_recorded", job_id=job_id, stage=stage, duration_ms=duration_ms)
    return cursor.lastrowid


def list_metrics(conn: sqlite3.Connection, job_id: int) -> list[Metric]:
    rows = conn.execute(
        "SELECT id, job_id, stage, duration_ms, recorded_at FROM metrics "
        "WHERE job_id = ? ORDER BY recorded_at ASC, id ASC",
        (job_id,),
    ).fetchall()
    metrics = []
    for row in rows:
        recorded_at, _ = parse_timestamp(row["recorded_at"])
        metrics.append(
            Metric(
                id=row["id"],
                job_id=row["job_id"],
                stage=row["stage"],
                duration_ms=row["duration_ms"],
                recorded_at=recorded_at,
            )
        )
    return metrics
