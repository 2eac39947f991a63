"""Job worker — asyncio daemon that drains the jobs table."""

import asyncio
import logging
import time
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from datetime import datetime, timedelta, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from orientation.application.interfaces import JobRepository
from orientation.application.services.notification_dispatcher import (
    DispatchReport,
    NotificationDispatcher,
)
from orientation.domain.entities import Job, JobKind, JobStatus
from orientation.infrastructure.logging.colored_logger import FanoutLogger, FanoutStage

logger = logging.getLogger(__name__)
flog = FanoutLogger("orientation.jobs")

SessionFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]
RepositoryFactory = Callable[[AsyncSession], JobRepository]
DispatcherFactory = Callable[[AsyncSession], NotificationDispatcher]

_STAGES = {
    JobKind.ARTICLE_CHANGED: FanoutStage.ANNOUNCE,
    JobKind.ROTTEN_ARTICLE: FanoutStage.ROTTEN,
    JobKind.STALE_ARTICLE: FanoutStage.STALE,
}

PURGE_INTERVAL = 3600.0


class JobWorker:
    """Polls the jobs table and runs each queued job through the dispatcher.

    Runs as an asyncio.Task inside FastAPI's lifespan. Claiming a batch and
    running each job use separate sessions, so one failing job never rolls
    back another. A job that raises is requeued until it has used up
    ``max_attempts``, then left as failed.

    Claimed jobs are never stranded: stopping the worker mid-batch hands the
    unfinished ones back to the queue, and a job left ``processing`` by a
    worker that died is reclaimed once its ``lease_timeout`` has passed.
    Finished jobs are purged after ``retention``.
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        repository_factory: RepositoryFactory,
        dispatcher_factory: DispatcherFactory,
        *,
        poll_interval: float = 5.0,
        batch_size: int = 10,
        max_attempts: int = 3,
        lease_timeout: float = 300.0,
        retention: timedelta = timedelta(days=7),
    ) -> None:
        self._session_factory = session_factory
        self._repository_factory = repository_factory
        self._dispatcher_factory = dispatcher_factory
        self._poll_interval = poll_interval
        self._batch_size = batch_size
        self._max_attempts = max_attempts
        self._lease_timeout = timedelta(seconds=lease_timeout)
        self._retention = retention
        self._last_purge: float | None = None
        self._running = False
        self._task: asyncio.Task | None = None

    async def start(self) -> None:
        """Start the background polling loop."""
        self._running = True
        self._task = asyncio.create_task(self._loop())
        logger.info("JobWorker started (poll every %.1fs)", self._poll_interval)

    async def stop(self) -> None:
        """Gracefully stop the background polling loop."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        logger.info("JobWorker stopped")

    async def _loop(self) -> None:
        while self._running:
            try:
                await self.run_once()
                await self._purge_if_due()
            except asyncio.CancelledError:
                break
            except Exception:
                logger.exception("JobWorker polling error")

            await asyncio.sleep(self._poll_interval)

    async def run_once(self) -> list[Job]:
        """Claim one batch of queued jobs and process it. Returns the jobs touched."""
        jobs = await self._claim()
        for index, job in enumerate(jobs):
            try:
                await self._process(job)
            except asyncio.CancelledError:
                await self._release(jobs[index:])
                raise
        return jobs

    async def purge_finished(self, now: datetime | None = None) -> int:
        """Delete completed and failed jobs older than the retention period."""
        cutoff = (now or datetime.now(timezone.utc)) - self._retention
        async with self._session_factory() as session:
            purged = await self._repository_factory(session).purge_finished(cutoff)
            await session.commit()
        if purged:
            logger.info("Purged %d finished job(s) older than %s", purged, cutoff.isoformat())
        return purged

    async def _purge_if_due(self) -> None:
        now = time.monotonic()
        if self._last_purge is not None and now - self._last_purge < PURGE_INTERVAL:
            return
        self._last_purge = now
        await self.purge_finished()

    async def _claim(self) -> list[Job]:
        reclaim_before = datetime.now(timezone.utc) - self._lease_timeout
        claimed: list[Job] = []
        async with self._session_factory() as session:
            repository = self._repository_factory(session)
            jobs = await repository.get_queued(
                limit=self._batch_size, reclaim_before=reclaim_before
            )
            for job in jobs:
                if job.status == JobStatus.PROCESSING:
                    if job.attempts >= self._max_attempts:
                        logger.error("Job %s abandoned on its last attempt; giving up", job.id)
                        job.mark_failed("lease expired")
                        await repository.update(job)
                        continue
                    logger.warning(
                        "Reclaiming job %s abandoned since %s", job.id, job.started_at
                    )
                job.mark_processing()
                await repository.update(job)
                claimed.append(job)
            await session.commit()
        return claimed

    async def _release(self, jobs: list[Job]) -> None:
        async with self._session_factory() as session:
            repository = self._repository_factory(session)
            for job in jobs:
                job.release()
                await repository.update(job)
            await session.commit()
        logger.info("Returned %d unfinished job(s) to the queue", len(jobs))

    async def _process(self, job: Job) -> DispatchReport | None:
        stage = _STAGES.get(job.kind, FanoutStage.JOB)

        async with self._session_factory() as session:
            repository = self._repository_factory(session)
            try:
                with flog.timed_step(stage, job.kind.value, job_id=job.id, attempt=job.attempts):
                    report = await self._dispatcher_factory(session).handle(job)
                if job.kind == JobKind.ARTICLE_CHANGED and (report.notified or report.failed):
                    flog.step_complete(
                        FanoutStage.UPDATE,
                        f"article {report.article_id}",
                        notified=len(report.notified),
                        failed=len(report.failed),
                    )
                elif report.failed:
                    flog.detail(f"article {report.article_id}", failed=len(report.failed))
                job.mark_completed()
                await repository.update(job)
                await session.commit()
                return report

            except Exception as exc:
                await session.rollback()
                if job.attempts < self._max_attempts:
                    logger.warning("Job %s failed (attempt %d); requeued: %s", job.id, job.attempts, exc)
                    job.mark_requeued()
                else:
                    logger.error("Job %s failed permanently after %d attempts", job.id, job.attempts)
                    job.mark_failed(str(exc))
                await repository.update(job)
                await session.commit()
                return None
