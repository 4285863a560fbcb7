"""Read-only rollups over trends and jobs.

Each count is its own query, so the four numbers are not a consistent
snapshot of one instant.  They are monitoring figures only.
"""

import sqlite3

from shotauto.features.jobs.models import JobStatus
from shotauto.features.stats.models import DashboardStats


def _count_jobs(conn: sqlite3.Connection, status: JobStatus) -> int:
    return conn.execute(
        "SELECT COUNT(*) FROM jobs WHERE status = ?", (status.value,)
    ).fetchone()[0]


def get_stats(conn: sqlite3.Connection) -> DashboardStats:
    total_trends = conn.execute("SELECT COUNT(*) FROM trends").fetchone()[0]
    return DashboardStats(
        total_trends=total_trends,
        pending_jobs=_count_jobs(conn, JobStatus.PENDING),
        completed_jobs=_count_jobs(conn, JobStatus.DONE),
        failed_jobs=_count_jobs(conn, JobStatus.FAILED),
    )
