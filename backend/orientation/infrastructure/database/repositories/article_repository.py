"""Concrete repository implementation backed by SQLAlchemy."""

import logging
from collections import defaultdict
from datetime import datetime, timezone

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from orientation.application.interfaces import ArticleRepository
from orientation.domain import lifecycle
from orientation.domain.entities import Article, Tag
from orientation.domain.scopes import ArticleScope
from orientation.infrastructure.database.models import (
    ArticleEndorsementModel,
    ArticleModel,
    ArticleSubscriptionModel,
    ArticleTagModel,
    TagModel,
)
from orientation.infrastructure.database.scope_sql import apply_scope

logger = logging.getLogger(__name__)


def _aware(value: datetime | None) -> datetime | None:
    """SQLite hands back naive datetimes; everything in the domain is UTC-aware."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def article_to_entity(model: ArticleModel, tags: list[Tag] | None = None) -> Article:
    """Map ORM model → domain entity."""
    return Article(
        id=model.id,
        title=model.title,
        content=model.content,
        guide=model.guide,
        author_id=model.author_id,
        editor_id=model.editor_id,
        rot_reporter_id=model.rot_reporter_id,
        created_at=_aware(model.created_at),
        updated_at=_aware(model.updated_at),
        archived_at=_aware(model.archived_at),
        rotted_at=_aware(model.rotted_at),
        last_notified_author_at=_aware(model.last_notified_author_at),
        tags=list(tags or []),
        tags_count=model.tags_count,
        endorsements_count=model.endorsements_count,
        subscriptions_count=model.subscriptions_count,
        visits=model.visits,
    )


async def load_tags(session: AsyncSession, article_ids: list[int]) -> dict[int, list[Tag]]:
    """Fetch tags for many articles in one query, keyed by article id."""
    if not article_ids:
        return {}
    result = await session.execute(
        select(ArticleTagModel.article_id, TagModel.id, TagModel.name)
        .join(TagModel, TagModel.id == ArticleTagModel.tag_id)
        .where(ArticleTagModel.article_id.in_(article_ids))
        .order_by(ArticleTagModel.id)
    )
    tags: dict[int, list[Tag]] = defaultdict(list)
    for article_id, tag_id, name in result.all():
        tags[article_id].append(Tag(id=tag_id, name=name))
    return tags


class SQLAlchemyArticleRepository(ArticleRepository):
    """Implements the ArticleRepository port using SQLAlchemy async sessions.

    Counter columns are never written from the entity; they only move through
    single-statement UPDATEs so concurrent writers cannot lose increments.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    def _to_model(self, entity: Article) -> ArticleModel:
        """Map domain entity → ORM model (for creation)."""
        return ArticleModel(
            title=entity.title,
            content=entity.content,
            guide=entity.guide,
            author_id=entity.author_id,
            editor_id=entity.editor_id,
            rot_reporter_id=entity.rot_reporter_id,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
            archived_at=entity.archived_at,
            rotted_at=entity.rotted_at,
            last_notified_author_at=entity.last_notified_author_at,
        )

    async def get_by_id(self, article_id: int) -> Article | None:
        model = await self._session.get(ArticleModel, article_id, populate_existing=True)
        if model is None:
            return None
        tags = await load_tags(self._session, [model.id])
        return article_to_entity(model, tags.get(model.id))

    async def find(
        self,
        scope: ArticleScope,
        *,
        now: datetime | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[Article]:
        stmt = apply_scope(select(ArticleModel), scope, now or lifecycle.utcnow())
        result = await self._session.execute(
            stmt.offset(skip).limit(limit).execution_options(populate_existing=True)
        )
        models = result.scalars().all()
        tags = await load_tags(self._session, [m.id for m in models])
        return [article_to_entity(m, tags.get(m.id)) for m in models]

    async def create(self, article: Article) -> Article:
        model = self._to_model(article)
        self._session.add(model)
        await self._session.flush()
        article.id = model.id
        return article

    async def update(self, article: Article) -> Article:
        model = await self._session.get(ArticleModel, article.id)
        if model is None:
            raise ValueError(f"Article {article.id} not found in database")
        model.title = article.title
        model.content = article.content
        model.guide = article.guide
        model.editor_id = article.editor_id
        model.updated_at = article.updated_at
        model.archived_at = article.archived_at
        model.rotted_at = article.rotted_at
        model.rot_reporter_id = article.rot_reporter_id
        model.last_notified_author_at = article.last_notified_author_at
        await self._session.flush()
        return article

    async def delete(self, article_id: int) -> bool:
        model = await self._session.get(ArticleModel, article_id)
        if model is None:
            return False
        # Owned rows go first; shared tags stay
        for owned in (ArticleTagModel, ArticleEndorsementModel, ArticleSubscriptionModel):
            await self._session.execute(delete(owned).where(owned.article_id == article_id))
        await self._session.delete(model)
        await self._session.flush()
        return True

    async def replace_tags(self, article_id: int, tag_ids: list[int]) -> int:
        unique_ids = list(dict.fromkeys(tag_ids))
        await self._session.execute(
            delete(ArticleTagModel).where(ArticleTagModel.article_id == article_id)
        )
        if unique_ids:
            await self._session.execute(
                insert(ArticleTagModel),
                [{"article_id": article_id, "tag_id": tag_id} for tag_id in unique_ids],
            )
        await self._session.execute(
            update(ArticleModel)
            .where(ArticleModel.id == article_id)
            .values(tags_count=len(unique_ids))
            .execution_options(synchronize_session=False)
        )
        await self._session.flush()
        return len(unique_ids)

    async def increment_visits(self, article_id: int) -> bool:
        result = await self._session.execute(
            update(ArticleModel)
            .where(ArticleModel.id == article_id)
            .values(visits=ArticleModel.visits + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    async def reset_tags_counts(self) -> int:
        counted = (
            select(func.count(ArticleTagModel.id))
            .where(ArticleTagModel.article_id == ArticleModel.id)
            .scalar_subquery()
        )
        result = await self._session.execute(
            update(ArticleModel)
            .values(tags_count=counted)
            .execution_options(synchronize_session=False)
        )
        logger.info("Reset tags_count on %d article(s)", result.rowcount)
        return result.rowcount
