"""Domain entity for background jobs — database-backed fan-out queue."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class JobKind(str, Enum):
    """The kinds of deferred work scheduled by article mutations."""

    ARTICLE_CHANGED = "article_changed"
    ROTTEN_ARTICLE = "rotten_article"
    STALE_ARTICLE = "stale_article"


class JobStatus(str, Enum):
    """Lifecycle states of a job."""

    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class Job:
    """A single unit of deferred work.

    Jobs are written in the same transaction as the mutation that scheduled
    them, so a worker only ever sees work for committed changes. Delivery is
    at-least-once; handlers must tolerate a repeat.
    """

    kind: JobKind
    payload: dict[str, Any] = field(default_factory=dict)
    id: str | None = None
    status: JobStatus = JobStatus.QUEUED
    attempts: int = 0
    error_message: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    started_at: datetime | None = None
    completed_at: datetime | None = None

    def mark_processing(self) -> None:
        """Transition to processing state."""
        self.status = JobStatus.PROCESSING
        self.attempts += 1
        self.started_at = datetime.now(timezone.utc)

    def mark_completed(self) -> None:
        self.status = JobStatus.COMPLETED
        self.error_message = None
        self.completed_at = datetime.now(timezone.utc)

    def mark_failed(self, error: str) -> None:
        self.status = JobStatus.FAILED
        self.error_message = error[:1000]
        self.completed_at = datetime.now(timezone.utc)

    def mark_requeued(self) -> None:
        """Reset the job to queued state for another attempt."""
        self.status = JobStatus.QUEUED
        self.error_message = None
        self.started_at = None
        self.completed_at = None

    def release(self) -> None:
        """Hand an interrupted job back to the queue without charging the attempt."""
        self.mark_requeued()
        self.attempts = max(self.attempts - 1, 0)
