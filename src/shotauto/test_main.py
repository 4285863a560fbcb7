"""Tests for the operator CLI."""

import logging

import pytest
from typer.testing import CliRunner

from shotauto.features.jobs.models import JobStatus
from shotauto.main import app
from shotauto.platform.store import ShotStore

runner = CliRunner()


@pytest.fixture(autouse=True)
def _restore_root_logging():
    """configure_logging() swaps the root handlers; restore the previous ones."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def invoke(tmp_db_path):
    """Run a CLI command against the temporary database."""

    def _invoke(*args):
        return runner.invoke(app, ["--db", tmp_db_path, *args])

    return _invoke


def test_init_creates_database(invoke, tmp_db_path):
    result = invoke("init")
    assert result.exit_code == 0
    assert "Database ready" in result.output


def test_config_show_defaults(invoke):
    result = invoke("config-show")
    assert result.exit_code == 0
    assert "http://localhost:11434" in result.output
    assert "300" in result.output


def test_config_set_and_show(invoke, tmp_db_path):
    assert invoke("config-set", "poll_interval_secs", "60").exit_code == 0
    with ShotStore(tmp_db_path) as store:
        assert store.load_config().poll_interval_secs == 60


def test_config_set_unknown_key(invoke):
    result = invoke("config-set", "colour", "blue")
    assert result.exit_code == 1
    assert "Unknown key" in result.output


def test_add_trend_twice(invoke):
    first = invoke("add-trend", "vid1", "First title")
    second = invoke("add-trend", "vid1", "Second title")
    assert first.exit_code == 0
    assert "stored" in first.output
    assert second.exit_code == 0
    assert "already known" in second.output


def test_create_job_for_unknown_trend(invoke):
    result = invoke("create-job", "missing")
    assert result.exit_code == 1
    assert "No trend" in result.output


def test_queue_flow(invoke, tmp_db_path):
    invoke("add-trend", "vid1", "Title", "--views", "10")
    assert invoke("create-job", "vid1", "--priority", "2").exit_code == 0

    peek = invoke("next")
    assert peek.exit_code == 0
    assert "Next pending job" in peek.output

    claimed = invoke("claim")
    assert claimed.exit_code == 0
    assert "Claimed job" in claimed.output
    assert "Queue is empty" in invoke("claim").output

    assert invoke("set-status", "1", "failed", "--error", "render crashed").exit_code == 0
    assert invoke("retry", "1").exit_code == 0

    with ShotStore(tmp_db_path) as store:
        job = store.get_job(1)
        assert job.status is JobStatus.PENDING
        assert job.retry_count == 1


def test_job_table_shows_plain_values(invoke):
    """Status and timestamps render as stored text, not Python reprs."""
    invoke("add-trend", "vid1", "Title")
    invoke("create-job", "vid1")

    peek = invoke("next")
    assert peek.exit_code == 0
    assert "pending" in peek.output
    assert "JobStatus." not in peek.output
    assert "datetime.datetime" not in peek.output


def test_strict_set_status_rejects_illegal_transition(invoke):
    invoke("add-trend", "vid1", "Title")
    invoke("create-job", "vid1")
    invoke("set-status", "1", "done")

    result = invoke("set-status", "1", "pending", "--strict")
    assert result.exit_code == 1
    assert "cannot move" in result.output


def test_retry_unknown_job(invoke):
    result = invoke("retry", "99")
    assert result.exit_code == 1
    assert "does not exist" in result.output


def test_stats(invoke):
    invoke("add-trend", "vid1", "Title")
    result = invoke("stats")
    assert result.exit_code == 0
    assert "total trends" in result.output
