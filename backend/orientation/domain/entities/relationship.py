"""Domain entities for user ↔ article relationships (endorsements, subscriptions)."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import ClassVar


class RelationshipKind(str, Enum):
    """The two kinds of per-user links an article owns."""

    ENDORSEMENT = "endorsement"
    SUBSCRIPTION = "subscription"


@dataclass
class ArticleRelationship:
    """A unique (article, user) pair. At most one row exists per pair and kind."""

    kind: ClassVar[RelationshipKind]

    article_id: int
    user_id: int
    id: int | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class Endorsement(ArticleRelationship):
    """A user's explicit approval of an article."""

    kind: ClassVar[RelationshipKind] = RelationshipKind.ENDORSEMENT


@dataclass
class Subscription(ArticleRelationship):
    """A user's registration to receive update notices for an article."""

    kind: ClassVar[RelationshipKind] = RelationshipKind.SUBSCRIPTION


def subscribers_to_update(
    subscriptions: Iterable[Subscription], editor_id: int | None
) -> list[Subscription]:
    """Subscriptions to notify about a save, minus the editor's own."""
    return [s for s in subscriptions if editor_id is None or s.user_id != editor_id]
