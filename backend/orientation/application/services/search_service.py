"""Search orchestration: text search over a base scope, or the scope itself."""

import logging
from datetime import datetime

from orientation.application.interfaces import ArticleRepository, SearchEngine, SearchWeights
from orientation.domain import scopes
from orientation.domain.entities import SearchHit
from orientation.domain.scopes import ArticleScope

logger = logging.getLogger(__name__)


class SearchService:
    """Consults the search engine only when there is query text.

    A blank query yields the base scope's listing as-is (defaulting to
    ``current``), so archived articles stay out of default searches.
    """

    def __init__(
        self,
        repository: ArticleRepository,
        engine: SearchEngine,
        weights: SearchWeights = SearchWeights(),
    ):
        self._repository = repository
        self._engine = engine
        self._weights = weights

    async def text_search(
        self,
        query: str | None,
        scope: ArticleScope | None = None,
        *,
        now: datetime | None = None,
        limit: int = 50,
    ) -> list[SearchHit]:
        scope = scope or scopes.current()

        if query is None or not query.strip():
            articles = await self._repository.find(scope, now=now, limit=limit)
            return [SearchHit(article=article) for article in articles]

        hits = await self._engine.search(
            query.strip(), scope, weights=self._weights, now=now, limit=limit
        )
        logger.debug("Search %r in scope %s → %d hits", query, scope.name, len(hits))
        return hits
