"""Idempotent user ↔ article relationship management."""

import logging

from orientation.application.interfaces import RelationshipRepository
from orientation.domain.entities import ArticleRelationship, RelationshipKind

logger = logging.getLogger(__name__)


class RelationshipSet:
    """One kind of (article, user) link — endorsements or subscriptions.

    ``add`` is get-or-create and never yields a second row for a pair;
    ``remove`` reports whether anything was there to remove. Uniqueness under
    concurrent callers is the repository's job (unique constraint), not ours.
    """

    def __init__(self, repository: RelationshipRepository):
        self._repository = repository

    @property
    def kind(self) -> RelationshipKind:
        return self._repository.kind

    async def add(self, article_id: int, user_id: int) -> ArticleRelationship:
        relationship, created = await self._repository.get_or_create(article_id, user_id)
        if created:
            logger.info(
                "Added %s: article=%s user=%s", self.kind.value, article_id, user_id
            )
        return relationship

    async def remove(self, article_id: int, user_id: int) -> bool:
        removed = await self._repository.remove(article_id, user_id)
        if removed:
            logger.info(
                "Removed %s: article=%s user=%s", self.kind.value, article_id, user_id
            )
        return removed
