"""Domain events emitted by article transitions."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class TransitionKind(str, Enum):
    """What happened to an article in a committed mutation."""

    CREATED = "created"
    UPDATED = "updated"
    ARCHIVED = "archived"
    ROTTEN = "rotten"
    DESTROYED = "destroyed"


@dataclass(frozen=True)
class ArticleEvent:
    """A single article transition, carried to the fan-out jobs as payload."""

    kind: TransitionKind
    article_id: int
    title: str
    editor_id: int | None = None
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_save(self) -> bool:
        """Every transition except destruction is a save."""
        return self.kind is not TransitionKind.DESTROYED

    def to_payload(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "article_id": self.article_id,
            "title": self.title,
            "editor_id": self.editor_id,
            "occurred_at": self.occurred_at.isoformat(),
        }

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "ArticleEvent":
        return cls(
            kind=TransitionKind(payload["kind"]),
            article_id=int(payload["article_id"]),
            title=payload.get("title", ""),
            editor_id=payload.get("editor_id"),
            occurred_at=datetime.fromisoformat(payload["occurred_at"]),
        )
