"""Abstract repository interface (port) for endorsements and subscriptions."""

from abc import ABC, abstractmethod

from orientation.domain.entities import ArticleRelationship, RelationshipKind


class RelationshipRepository(ABC):
    """Port for (article, user) relationship rows of a single kind.

    Uniqueness per (article, user) is enforced by the store; the matching
    counter column on the article moves in the same transaction.
    """

    kind: RelationshipKind

    @abstractmethod
    async def get(self, article_id: int, user_id: int) -> ArticleRelationship | None:
        ...

    @abstractmethod
    async def get_or_create(
        self, article_id: int, user_id: int
    ) -> tuple[ArticleRelationship, bool]:
        """Idempotent insert. Returns the row and whether it was created now."""
        ...

    @abstractmethod
    async def remove(self, article_id: int, user_id: int) -> bool:
        """Delete the pair. Returns False if no row existed."""
        ...

    @abstractmethod
    async def list_for_article(self, article_id: int) -> list[ArticleRelationship]:
        ...
