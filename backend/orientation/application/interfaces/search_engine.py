"""Port for the full-text search engine."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from orientation.domain.entities import SearchHit
from orientation.domain.scopes import ArticleScope


@dataclass(frozen=True)
class SearchWeights:
    """Relative field weights, in PostgreSQL's A (highest) … D (lowest) classes."""

    title: str = "A"
    content: str = "B"


class SearchEngine(ABC):
    """Ranks articles for a text query within a base scope."""

    @abstractmethod
    async def search(
        self,
        query: str,
        scope: ArticleScope,
        *,
        weights: SearchWeights = SearchWeights(),
        now: datetime | None = None,
        limit: int = 50,
    ) -> list[SearchHit]:
        """Return ranked hits with highlighted excerpts."""
        ...
