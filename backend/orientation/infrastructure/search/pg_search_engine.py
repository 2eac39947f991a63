"""PostgreSQL full-text + trigram implementation of the SearchEngine port."""

import logging
import re
from datetime import datetime

from sqlalchemy import ColumnElement, bindparam, func, literal_column, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from orientation.application.interfaces import SearchEngine, SearchWeights
from orientation.domain import lifecycle
from orientation.domain.entities import SearchHit
from orientation.domain.scopes import ArticleScope
from orientation.infrastructure.database.models import ArticleModel
from orientation.infrastructure.database.repositories.article_repository import (
    article_to_entity,
    load_tags,
)
from orientation.infrastructure.database.scope_sql import apply_scope, scope_ordering

logger = logging.getLogger(__name__)

_WORD = re.compile(r"\w+", re.UNICODE)
_LANGUAGE = re.compile(r"^[a-z_]+$")
_WEIGHT_CLASSES = frozenset("ABCD")

TITLE_HIGHLIGHT_OPTIONS = "StartSel=<mark>, StopSel=</mark>, HighlightAll=true"
HIGHLIGHT_OPTIONS = "StartSel=<mark>, StopSel=</mark>, MaxFragments=2, MaxWords=30, MinWords=10"


def prefix_tsquery(query: str) -> str | None:
    """Turn free text into a tsquery that prefix-matches every word.

    ``"postgr repl"`` → ``"postgr:* & repl:*"``. Only word characters survive,
    so tsquery operators in user input never reach the parser.
    """
    words = _WORD.findall(query.lower())
    if not words:
        return None
    return " & ".join(f"{word}:*" for word in words)


class PgArticleSearchEngine(SearchEngine):
    """Ranks articles by ``ts_rank`` over a weighted title/content vector plus
    ``pg_trgm`` similarity, so misspellings and partial words still match.

    Requires the ``pg_trgm`` extension (created at startup).
    """

    def __init__(
        self,
        session: AsyncSession,
        *,
        language: str = "english",
        trigram_threshold: float = 0.3,
    ):
        if not _LANGUAGE.match(language):
            raise ValueError(f"Invalid text search configuration: {language!r}")
        self._session = session
        self._regconfig = literal_column(f"'{language}'::regconfig")
        self._threshold = trigram_threshold

    def _weighted(self, column, weight: str) -> ColumnElement:
        if weight not in _WEIGHT_CLASSES:
            raise ValueError(f"Invalid search weight: {weight!r}")
        return func.setweight(
            func.to_tsvector(self._regconfig, func.coalesce(column, "")),
            literal_column(f"'{weight}'"),
        )

    async def search(
        self,
        query: str,
        scope: ArticleScope,
        *,
        weights: SearchWeights = SearchWeights(),
        now: datetime | None = None,
        limit: int = 50,
    ) -> list[SearchHit]:
        now = now or lifecycle.utcnow()
        document = self._weighted(ArticleModel.title, weights.title).op("||")(
            self._weighted(ArticleModel.content, weights.content)
        )
        searchable = func.concat_ws(" ", ArticleModel.title, ArticleModel.content)
        raw_query = bindparam("raw_query", query)
        trigram = func.similarity(searchable, raw_query)

        conditions = [trigram >= self._threshold]
        tsquery_text = prefix_tsquery(query)
        if tsquery_text is not None:
            tsquery = func.to_tsquery(self._regconfig, bindparam("tsquery", tsquery_text))
            conditions.append(document.op("@@")(tsquery))
            lexical_rank = func.ts_rank(document, tsquery)
            highlight_query = tsquery
        else:
            lexical_rank = literal_column("0")
            highlight_query = func.plainto_tsquery(self._regconfig, raw_query)

        rank = (lexical_rank + trigram).label("rank")
        title_highlight = func.ts_headline(
            self._regconfig, ArticleModel.title, highlight_query, TITLE_HIGHLIGHT_OPTIONS
        ).label("title_highlight")
        content_highlight = func.ts_headline(
            self._regconfig, ArticleModel.content, highlight_query, HIGHLIGHT_OPTIONS
        ).label("content_highlight")

        stmt = apply_scope(
            select(ArticleModel, rank, title_highlight, content_highlight).where(or_(*conditions)),
            scope,
            now,
            ordered=False,
        )
        stmt = stmt.order_by(rank.desc(), *scope_ordering(scope)).limit(limit)

        result = await self._session.execute(stmt.execution_options(populate_existing=True))
        rows = result.all()
        tags = await load_tags(self._session, [row.ArticleModel.id for row in rows])

        logger.debug("tsquery=%r trigram>=%.2f → %d rows", tsquery_text, self._threshold, len(rows))
        return [
            SearchHit(
                article=article_to_entity(row.ArticleModel, tags.get(row.ArticleModel.id)),
                rank=float(row.rank),
                title_highlight=row.title_highlight,
                content_highlight=row.content_highlight,
            )
            for row in rows
        ]
