"""JobRunner backed by the jobs table (transactional outbox)."""

import logging
from typing import Any

from orientation.application.interfaces import JobRepository, JobRunner
from orientation.domain.entities import Job, JobKind

logger = logging.getLogger(__name__)


class RepositoryJobRunner(JobRunner):
    """Writes each scheduled job through the session-bound JobRepository.

    The job row shares the caller's transaction, so it is only picked up by
    the worker once the mutation that scheduled it has committed.
    """

    def __init__(self, repository: JobRepository):
        self._repository = repository

    async def schedule(self, kind: JobKind, payload: dict[str, Any]) -> Job:
        job = await self._repository.create(Job(kind=kind, payload=dict(payload)))
        logger.debug("Scheduled %s job %s", kind.value, job.id)
        return job
