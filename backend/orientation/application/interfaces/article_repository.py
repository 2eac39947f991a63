"""Abstract repository interfaces (ports) — define the contract, not the implementation."""

from abc import ABC, abstractmethod
from datetime import datetime

from orientation.domain.entities import Article
from orientation.domain.scopes import ArticleScope


class ArticleRepository(ABC):
    """Port for article persistence — implemented in the infrastructure layer.

    Writes join the caller's transaction; nothing here commits.
    """

    @abstractmethod
    async def get_by_id(self, article_id: int) -> Article | None:
        """Retrieve a single article (with its tags) by its ID."""
        ...

    @abstractmethod
    async def find(
        self,
        scope: ArticleScope,
        *,
        now: datetime | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[Article]:
        """Retrieve articles matching a scope, in the scope's order."""
        ...

    @abstractmethod
    async def create(self, article: Article) -> Article:
        """Persist a new article and return it with the generated ID."""
        ...

    @abstractmethod
    async def update(self, article: Article) -> Article:
        """Persist scalar changes to an existing article."""
        ...

    @abstractmethod
    async def delete(self, article_id: int) -> bool:
        """Delete an article and its owned rows. Returns False if not found."""
        ...

    @abstractmethod
    async def replace_tags(self, article_id: int, tag_ids: list[int]) -> int:
        """Replace the article's tag associations and set ``tags_count``.

        Returns the new tag count.
        """
        ...

    @abstractmethod
    async def increment_visits(self, article_id: int) -> bool:
        """Atomically add one visit. Returns False if the article does not exist."""
        ...

    @abstractmethod
    async def reset_tags_counts(self) -> int:
        """Recompute every cached ``tags_count``. Returns the number of articles touched."""
        ...
