"""Domain value objects for full-text search results."""

from dataclasses import dataclass

from orientation.domain.entities.article import Article


@dataclass
class SearchHit:
    """An article matched by a text search, with highlighted excerpts.

    Listings served without a query are wrapped as hits with no highlights
    and no rank, so callers handle a single result shape.
    """

    article: Article
    rank: float | None = None
    title_highlight: str | None = None
    content_highlight: str | None = None
