"""SQLAlchemy implementation of the TagRepository."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orientation.application.interfaces import TagRepository
from orientation.domain.entities import Tag
from orientation.domain.exceptions import DuplicateEntityError
from orientation.infrastructure.database.models import TagModel
from orientation.infrastructure.database.upsert import insert_ignoring_conflicts


class SQLAlchemyTagRepository(TagRepository):
    """Concrete tag repository. The unique index on ``name`` arbitrates concurrent creates."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def find_by_names(self, names: list[str]) -> list[Tag]:
        if not names:
            return []
        result = await self._session.execute(select(TagModel).where(TagModel.name.in_(names)))
        return [Tag(id=m.id, name=m.name) for m in result.scalars().all()]

    async def get_or_create(self, name: str) -> Tag:
        existing = await self._get_by_name(name)
        if existing is not None:
            return existing

        stmt = insert_ignoring_conflicts(self._session, TagModel, ["name"]).values(name=name)
        result = await self._session.execute(stmt.returning(TagModel.id))
        tag_id = result.scalar_one_or_none()
        if tag_id is not None:
            return Tag(id=tag_id, name=name)

        # Another writer created it between our read and insert
        existing = await self._get_by_name(name)
        if existing is None:
            raise DuplicateEntityError("Tag", "name", name)
        return existing

    async def _get_by_name(self, name: str) -> Tag | None:
        result = await self._session.execute(select(TagModel).where(TagModel.name == name))
        model = result.scalar_one_or_none()
        return Tag(id=model.id, name=model.name) if model else None
