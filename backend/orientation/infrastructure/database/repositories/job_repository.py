"""SQLAlchemy implementation of the JobRepository."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import and_, delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from orientation.application.interfaces import JobRepository
from orientation.domain.entities import Job, JobKind, JobStatus
from orientation.infrastructure.database.models import JobModel

_FINISHED = (JobStatus.COMPLETED.value, JobStatus.FAILED.value)


def _aware(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SQLAlchemyJobRepository(JobRepository):
    """Concrete job repository backed by the 'jobs' table."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_id(self, job_id: str) -> Job | None:
        result = await self._session.execute(select(JobModel).where(JobModel.id == job_id))
        model = result.scalar_one_or_none()
        return self._to_domain(model) if model else None

    async def get_queued(self, limit: int = 10, *, reclaim_before: datetime | None = None) -> list[Job]:
        ready = JobModel.status == JobStatus.QUEUED.value
        if reclaim_before is not None:
            abandoned = and_(
                JobModel.status == JobStatus.PROCESSING.value,
                JobModel.started_at < reclaim_before,
            )
            ready = or_(ready, abandoned)

        stmt = (
            select(JobModel)
            .where(ready)
            .order_by(JobModel.created_at.asc())
            .limit(limit)
        )
        if self._session.bind is not None and self._session.bind.dialect.name == "postgresql":
            # Several workers may poll the same table
            stmt = stmt.with_for_update(skip_locked=True)
        result = await self._session.execute(stmt)
        return [self._to_domain(m) for m in result.scalars().all()]

    async def create(self, job: Job) -> Job:
        if not job.id:
            job.id = str(uuid.uuid4())

        model = JobModel(
            id=job.id,
            kind=job.kind.value,
            payload=job.payload,
            status=job.status.value,
            attempts=job.attempts,
            error_message=job.error_message,
            created_at=job.created_at,
            started_at=job.started_at,
            completed_at=job.completed_at,
        )
        self._session.add(model)
        await self._session.flush()
        return job

    async def update(self, job: Job) -> Job:
        result = await self._session.execute(select(JobModel).where(JobModel.id == job.id))
        model = result.scalar_one_or_none()
        if model is None:
            raise ValueError(f"Job with id {job.id} not found")

        model.status = job.status.value
        model.attempts = job.attempts
        model.error_message = job.error_message
        model.started_at = job.started_at
        model.completed_at = job.completed_at
        await self._session.flush()
        return job

    async def purge_finished(self, before: datetime) -> int:
        result = await self._session.execute(
            delete(JobModel).where(
                JobModel.status.in_(_FINISHED),
                JobModel.completed_at < before,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    # ── Mapping ──────────────────────────────────────────────────────

    @staticmethod
    def _to_domain(model: JobModel) -> Job:
        return Job(
            id=model.id,
            kind=JobKind(model.kind),
            payload=dict(model.payload or {}),
            status=JobStatus(model.status),
            attempts=model.attempts,
            error_message=model.error_message,
            created_at=_aware(model.created_at),
            started_at=_aware(model.started_at),
            completed_at=_aware(model.completed_at),
        )
