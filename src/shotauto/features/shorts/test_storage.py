"""Unit tests for shorts storage."""

from shotauto.features.shorts import storage
from shotauto.features.shorts.models import Short


def test_missing_short_returns_none(conn):
    assert storage.get_short_for_job(conn, 1) is None


def test_create_and_fetch(conn):
    short_id = storage.create_short(
        conn,
        Short(job_id=7, script="Hook, body, outro", video_path="/tmp/out.mp4", duration_sec=42.5),
    )
    short = storage.get_short_for_job(conn, 7)
    assert short.id == short_id
    assert short.script == "Hook, body, outro"
    assert short.video_path == "/tmp/out.mp4"
    assert short.audio_path is None
    assert short.duration_sec == 42.5
    assert short.telegram_sent is False


def test_latest_short_wins(conn):
    storage.create_short(conn, Short(job_id=1, script="v1"))
    storage.create_short(conn, Short(job_id=1, script="v2"))
    assert storage.get_short_for_job(conn, 1).script == "v2"


def test_mark_sent(conn):
    short_id = storage.create_short(conn, Short(job_id=3))
    storage.mark_short_sent(conn, short_id)
    assert storage.get_short_for_job(conn, 3).telegram_sent is True
