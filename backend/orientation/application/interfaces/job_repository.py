"""Abstract repository interface (port) for background jobs."""

from abc import ABC, abstractmethod
from datetime import datetime

from orientation.domain.entities import Job


class JobRepository(ABC):
    """Port for job persistence — implemented in the infrastructure layer."""

    @abstractmethod
    async def get_by_id(self, job_id: str) -> Job | None:
        ...

    @abstractmethod
    async def get_queued(self, limit: int = 10, *, reclaim_before: datetime | None = None) -> list[Job]:
        """Retrieve queued jobs ordered by creation time (FIFO).

        With ``reclaim_before``, processing jobs started before that moment
        are returned too: their worker is presumed gone.
        """
        ...

    @abstractmethod
    async def create(self, job: Job) -> Job:
        ...

    @abstractmethod
    async def update(self, job: Job) -> Job:
        ...

    @abstractmethod
    async def purge_finished(self, before: datetime) -> int:
        """Delete completed and failed jobs finished before ``before``. Returns the count."""
        ...
