"""Port for scheduling deferred work."""

from abc import ABC, abstractmethod
from typing import Any

from orientation.domain.entities import Job, JobKind


class JobRunner(ABC):
    """At-least-once job scheduling; no ordering across different kinds."""

    @abstractmethod
    async def schedule(self, kind: JobKind, payload: dict[str, Any]) -> Job:
        ...
