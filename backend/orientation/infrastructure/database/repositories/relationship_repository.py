"""SQLAlchemy implementations of the RelationshipRepository (endorsements, subscriptions)."""

import logging
from datetime import timezone

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from orientation.application.interfaces import RelationshipRepository
from orientation.domain.entities import (
    ArticleRelationship,
    Endorsement,
    RelationshipKind,
    Subscription,
)
from orientation.domain.exceptions import DuplicateRelationshipError
from orientation.infrastructure.database.models import (
    ArticleEndorsementModel,
    ArticleModel,
    ArticleSubscriptionModel,
)
from orientation.infrastructure.database.upsert import insert_ignoring_conflicts

logger = logging.getLogger(__name__)


class _SQLAlchemyRelationshipRepository(RelationshipRepository):
    """Shared implementation; subclasses pick the table, entity and counter column.

    Creation is an insert that yields to the (article_id, user_id) unique
    constraint, so a lost race degrades to reading the winner's row.
    The article's counter moves in the same transaction as the row.
    """

    model: type[ArticleEndorsementModel] | type[ArticleSubscriptionModel]
    entity: type[ArticleRelationship]
    counter: str

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(self, article_id: int, user_id: int) -> ArticleRelationship | None:
        result = await self._session.execute(
            select(self.model).where(
                self.model.article_id == article_id,
                self.model.user_id == user_id,
            )
        )
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_or_create(
        self, article_id: int, user_id: int
    ) -> tuple[ArticleRelationship, bool]:
        existing = await self.get(article_id, user_id)
        if existing is not None:
            return existing, False

        stmt = insert_ignoring_conflicts(
            self._session, self.model, ["article_id", "user_id"]
        ).values(article_id=article_id, user_id=user_id)
        result = await self._session.execute(stmt.returning(self.model.id))
        if result.scalar_one_or_none() is None:
            existing = await self.get(article_id, user_id)
            if existing is None:
                raise DuplicateRelationshipError(self.kind.value, article_id, user_id)
            logger.debug(
                "Concurrent %s for article=%s user=%s resolved to existing row",
                self.kind.value,
                article_id,
                user_id,
            )
            return existing, False

        await self._adjust_counter(article_id, +1)
        return await self.get(article_id, user_id), True

    async def remove(self, article_id: int, user_id: int) -> bool:
        result = await self._session.execute(
            delete(self.model).where(
                self.model.article_id == article_id,
                self.model.user_id == user_id,
            )
        )
        if result.rowcount == 0:
            return False
        await self._adjust_counter(article_id, -1)
        return True

    async def list_for_article(self, article_id: int) -> list[ArticleRelationship]:
        result = await self._session.execute(
            select(self.model)
            .where(self.model.article_id == article_id)
            .order_by(self.model.id)
        )
        return [self._to_entity(m) for m in result.scalars().all()]

    async def _adjust_counter(self, article_id: int, delta: int) -> None:
        column = getattr(ArticleModel, self.counter)
        await self._session.execute(
            update(ArticleModel)
            .where(ArticleModel.id == article_id)
            .values({self.counter: column + delta})
            .execution_options(synchronize_session=False)
        )

    def _to_entity(self, model) -> ArticleRelationship:
        created_at = model.created_at
        if created_at is not None and created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return self.entity(
            id=model.id,
            article_id=model.article_id,
            user_id=model.user_id,
            created_at=created_at,
        )


class SQLAlchemyEndorsementRepository(_SQLAlchemyRelationshipRepository):
    kind = RelationshipKind.ENDORSEMENT
    model = ArticleEndorsementModel
    entity = Endorsement
    counter = "endorsements_count"


class SQLAlchemySubscriptionRepository(_SQLAlchemyRelationshipRepository):
    kind = RelationshipKind.SUBSCRIPTION
    model = ArticleSubscriptionModel
    entity = Subscription
    counter = "subscriptions_count"
