"""Unit tests for job status decoding and the lifecycle table."""

import pytest

from shotauto.features.jobs.models import (
    TERMINAL_STATUSES,
    Job,
    JobStatus,
    decode_status,
    is_legal_transition,
)


@pytest.mark.parametrize("status", list(JobStatus))
def test_decode_known_status(status):
    assert decode_status(status.value) == (status, False)


@pytest.mark.parametrize("raw", ["PENDING", "running", "", None])
def test_decode_unknown_defaults_to_pending(raw):
    """Unknown text is re-queued as pending and flagged as defaulted."""
    assert decode_status(raw) == (JobStatus.PENDING, True)


def test_pending_decoded_from_text_is_not_flagged():
    """A real 'pending' is distinguishable from a defaulted one."""
    _, defaulted = decode_status("pending")
    assert defaulted is False


class TestLifecycle:
    """Tests for is_legal_transition()."""

    @pytest.mark.parametrize(
        "current,target",
        [
            (JobStatus.PENDING, JobStatus.GENERATING),
            (JobStatus.PENDING, JobStatus.RENDERING),
            (JobStatus.PENDING, JobStatus.FAILED),
            (JobStatus.GENERATING, JobStatus.RENDERING),
            (JobStatus.GENERATING, JobStatus.DONE),
            (JobStatus.RENDERING, JobStatus.FAILED),
        ],
    )
    def test_allowed(self, current, target):
        assert is_legal_transition(current, target)

    @pytest.mark.parametrize(
        "current,target",
        [
            (JobStatus.PENDING, JobStatus.DONE),
            (JobStatus.RENDERING, JobStatus.GENERATING),
            (JobStatus.GENERATING, JobStatus.PENDING),
        ],
    )
    def test_rejected(self, current, target):
        assert not is_legal_transition(current, target)

    @pytest.mark.parametrize("terminal", sorted(TERMINAL_STATUSES, key=lambda s: s.value))
    def test_terminal_states_have_no_exits(self, terminal):
        assert not any(is_legal_transition(terminal, target) for target in JobStatus)


def test_job_is_terminal_property():
    assert Job(trend_id=1, status=JobStatus.FAILED).is_terminal
    assert not Job(trend_id=1, status=JobStatus.RENDERING).is_terminal
