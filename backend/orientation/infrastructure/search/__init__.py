"""Search infrastructure — concrete SearchEngine implementations."""

from .pg_search_engine import PgArticleSearchEngine, prefix_tsquery

__all__ = [
    "PgArticleSearchEngine",
    "prefix_tsquery",
]
