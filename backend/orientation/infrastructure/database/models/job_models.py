"""SQLAlchemy ORM model for background jobs."""

import uuid

from sqlalchemy import JSON, Column, DateTime, Index, Integer, String, Text, func

from orientation.infrastructure.database.base import Base


def _generate_uuid() -> str:
    return str(uuid.uuid4())


class JobModel(Base):
    """A single unit of deferred fan-out work."""

    __tablename__ = "jobs"

    id = Column(String(36), primary_key=True, default=_generate_uuid)
    kind = Column(String(30), nullable=False, index=True)
    payload = Column(JSON, nullable=False, default=dict)
    status = Column(String(20), nullable=False, default="queued", index=True)
    attempts = Column(Integer, nullable=False, default=0)
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    started_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("idx_jobs_status_created", "status", "created_at"),
    )
