"""Unit tests for dashboard stats."""

from shotauto.features.jobs.models import JobStatus
from shotauto.features.jobs.storage import create_job, update_job_status
from shotauto.features.stats.models import DashboardStats
from shotauto.features.stats.storage import get_stats
from shotauto.features.trends.models import Trend
from shotauto.features.trends.storage import insert_trend


def test_empty_store_is_all_zero(conn):
    assert get_stats(conn) == DashboardStats(
        total_trends=0, pending_jobs=0, completed_jobs=0, failed_jobs=0
    )


def test_counts_trends_and_jobs(conn):
    """3 trends, one pending job and one done job."""
    trend_ids = [insert_trend(conn, Trend(video_id=f"v{i}", title=f"T{i}")) for i in range(3)]
    create_job(conn, trend_ids[0])
    done = create_job(conn, trend_ids[1])
    update_job_status(conn, done, JobStatus.DONE)

    stats = get_stats(conn)
    assert stats.total_trends == 3
    assert stats.pending_jobs == 1
    assert stats.completed_jobs == 1
    assert stats.failed_jobs == 0


def test_in_progress_jobs_are_not_counted(conn):
    trend_id = insert_trend(conn, Trend(video_id="v", title="T"))
    rendering = create_job(conn, trend_id)
    failed = create_job(conn, trend_id)
    update_job_status(conn, rendering, JobStatus.RENDERING)
    update_job_status(conn, failed, JobStatus.FAILED, "no audio")

    stats = get_stats(conn)
    assert stats.pending_jobs == 0
    assert stats.completed_jobs == 0
    assert stats.failed_jobs == 1


def test_duplicate_trend_counted_once(conn):
    insert_trend(conn, Trend(video_id="same", title="A"))
    insert_trend(conn, Trend(video_id="same", title="B"))
    assert get_stats(conn).total_trends == 1
