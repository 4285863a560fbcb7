"""Job domain models, status lifecycle and lenient status decoding."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from shotauto.platform.logging_config import get_logger
from shotauto.platform.timestamps import OptionalTimestamp, Timestamp, utc_now

logger = get_logger(__name__)


class JobStatus(str, Enum):
    """Status of a processing job.  Values match the ``jobs.status`` CHECK."""

    PENDING = "pending"
    GENERATING = "generating"
    RENDERING = "rendering"
    DONE = "done"
    FAILED = "failed"


IN_PROGRESS_STATUSES = frozenset({JobStatus.GENERATING, JobStatus.RENDERING})
TERMINAL_STATUSES = frozenset({JobStatus.DONE, JobStatus.FAILED})

# Canonical lifecycle.  The store only enforces it when asked to validate.
ALLOWED_TRANSITIONS: dict[JobStatus, frozenset[JobStatus]] = {
    JobStatus.PENDING: frozenset(
        {JobStatus.GENERATING, JobStatus.RENDERING, JobStatus.FAILED}
    ),
    JobStatus.GENERATING: frozenset(
        {JobStatus.RENDERING, JobStatus.DONE, JobStatus.FAILED}
    ),
    JobStatus.RENDERING: frozenset({JobStatus.DONE, JobStatus.FAILED}),
    JobStatus.DONE: frozenset(),
    JobStatus.FAILED: frozenset(),
}


class InvalidTransitionError(ValueError):
    """Raised when a job is moved along an edge the lifecycle does not allow."""

    def __init__(self, job_id: int, current: JobStatus, target: JobStatus):
        self.job_id = job_id
        self.current = current
        self.target = target
        super().__init__(
            f"Job {job_id} cannot move from {current.value} to {target.value}"
        )


class JobNotFoundError(LookupError):
    """Raised by operations that require an existing job."""

    def __init__(self, job_id: int):
        self.job_id = job_id
        super().__init__(f"Job {job_id} does not exist")


def decode_status(text: str | None) -> tuple[JobStatus, bool]:
    """Lenient decode of a stored status string.

    Returns ``(status, was_defaulted)``.  Unknown text maps to PENDING so a
    corrupted row is re-queued instead of breaking the read path.
    """
    try:
        return JobStatus(text), False
    except ValueError:
        logger.warning("job_status_defaulted", raw=text)
        return JobStatus.PENDING, True


def is_legal_transition(current: JobStatus, target: JobStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


class Job(BaseModel):
    """A unit of work referencing one trend."""

    id: Optional[int] = None
    trend_id: int
    status: JobStatus = JobStatus.PENDING
    priority: int = 0
    retry_count: int = 0
    error_msg: Optional[str] = None
    created_at: Timestamp = Field(default_factory=utc_now)
    started_at: OptionalTimestamp = None
    finished_at: OptionalTimestamp = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


class Metric(BaseModel):
    """Timing of one pipeline stage for a job.  Append-only."""

    id: Optional[int] = None
    job_id: int
    stage: str
    duration_ms: int
    recorded_at: Timestamp = Field(default_factory=utc_now)
