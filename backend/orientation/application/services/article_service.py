"""Application service (use case) for Article operations."""

import logging
from collections.abc import Iterable
from datetime import datetime

from orientation.application.interfaces import ArticleRepository, JobRunner
from orientation.application.schemas import ArticleCreate, ArticleUpdate
from orientation.application.services.relationship_service import RelationshipSet
from orientation.application.services.tag_resolver import TagResolver
from orientation.domain import lifecycle, scopes
from orientation.domain.entities import (
    Article,
    ArticleRelationship,
    JobKind,
)
from orientation.domain.exceptions import EntityNotFoundError
from orientation.domain.scopes import ArticleScope

logger = logging.getLogger(__name__)

STALE_REMINDER_BATCH = 500


class ArticleService:
    """Orchestrates article business logic. Depends on the repository ports (DI).

    Every mutation persists first and then schedules its fan-out jobs through
    the ``JobRunner``, inside the caller's transaction: the jobs only become
    visible to the worker once the mutation commits.
    """

    def __init__(
        self,
        repository: ArticleRepository,
        tag_resolver: TagResolver,
        endorsements: RelationshipSet,
        subscriptions: RelationshipSet,
        job_runner: JobRunner,
    ):
        self._repository = repository
        self._tags = tag_resolver
        self._endorsements = endorsements
        self._subscriptions = subscriptions
        self._jobs = job_runner

    # ── Queries ─────────────────────────────────────────────────────

    async def get_article(self, article_id: int) -> Article:
        article = await self._repository.get_by_id(article_id)
        if article is None:
            raise EntityNotFoundError("Article", article_id)
        return article

    async def list_articles(
        self,
        scope: ArticleScope | None = None,
        *,
        now: datetime | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[Article]:
        return await self._repository.find(
            scope or scopes.current(), now=now, skip=skip, limit=limit
        )

    async def contributors(self, article_id: int, excluding: int | None = None) -> list[int]:
        article = await self.get_article(article_id)
        return article.contributors(excluding=excluding)

    # ── Authoring ───────────────────────────────────────────────────

    async def create_article(
        self, data: ArticleCreate, author_id: int | None = None, *, now: datetime | None = None
    ) -> Article:
        article = Article.create(
            title=data.title,
            content=data.content,
            author_id=author_id,
            guide=data.guide,
            now=now,
        )
        await self._repository.create(article)
        if data.tags is not None:
            await self._replace_tags(article, data.tags)
        await self._publish(article)
        return article

    async def update_article(
        self,
        article_id: int,
        data: ArticleUpdate,
        editor_id: int | None = None,
        *,
        now: datetime | None = None,
    ) -> Article:
        article = await self.get_article(article_id)
        article.edit(
            editor_id,
            title=data.title,
            content=data.content,
            guide=data.guide,
            now=now,
        )
        await self._save(article)
        if data.tags is not None:
            await self._replace_tags(article, data.tags)
        return article

    async def set_tags(self, article_id: int, tokens: str | Iterable[str]) -> Article:
        """Replace the article's tags with the tags named by ``tokens``."""
        article = await self.get_article(article_id)
        await self._replace_tags(article, tokens)
        return article

    async def delete_article(self, article_id: int) -> bool:
        article = await self.get_article(article_id)
        article.mark_destroyed()
        events = article.pull_events()
        deleted = await self._repository.delete(article_id)
        for event in events:
            await self._jobs.schedule(JobKind.ARTICLE_CHANGED, event.to_payload())
        logger.info("Destroyed article %s (%r)", article_id, article.title)
        return deleted

    # ── Lifecycle transitions ───────────────────────────────────────

    async def archive(self, article_id: int, *, now: datetime | None = None) -> Article:
        article = await self.get_article(article_id)
        article.archive(now)
        return await self._save(article)

    async def unarchive(self, article_id: int, *, now: datetime | None = None) -> Article:
        article = await self.get_article(article_id)
        article.unarchive(now)
        return await self._save(article)

    async def rot(
        self, article_id: int, reporter_id: int, *, now: datetime | None = None
    ) -> Article:
        """Flag as rotten and schedule the author's notice (fire-and-forget)."""
        article = await self.get_article(article_id)
        article.rot(reporter_id, now)
        await self._save(article)
        if article.author_id is not None:
            await self._jobs.schedule(
                JobKind.ROTTEN_ARTICLE,
                {
                    "article_id": article.id,
                    "author_id": article.author_id,
                    "reporter_id": reporter_id,
                },
            )
        return article

    async def refresh(self, article_id: int, *, now: datetime | None = None) -> Article:
        article = await self.get_article(article_id)
        article.refresh(now)
        return await self._save(article)

    async def count_visit(self, article_id: int) -> bool:
        """Atomic +1 on ``visits``; False if the article does not exist."""
        return await self._repository.increment_visits(article_id)

    # ── Relationships ───────────────────────────────────────────────

    async def endorse(self, article_id: int, user_id: int) -> ArticleRelationship:
        await self.get_article(article_id)
        return await self._endorsements.add(article_id, user_id)

    async def unendorse(self, article_id: int, user_id: int) -> bool:
        return await self._endorsements.remove(article_id, user_id)

    async def subscribe(self, article_id: int, user_id: int) -> ArticleRelationship:
        await self.get_article(article_id)
        return await self._subscriptions.add(article_id, user_id)

    async def unsubscribe(self, article_id: int, user_id: int) -> bool:
        return await self._subscriptions.remove(article_id, user_id)

    # ── Maintenance ─────────────────────────────────────────────────

    async def notify_stale_authors(
        self, *, now: datetime | None = None, batch_size: int = STALE_REMINDER_BATCH
    ) -> list[int]:
        """Schedule staleness reminders for authors not reminded in the last week.

        Pages through every due article; each one reminded is stamped and so
        drops out of the next page. Returns the IDs of the articles whose
        authors were scheduled a notice.
        """
        now = now or lifecycle.utcnow()
        scope = scopes.awaiting_stale_reminder()
        notified: list[int] = []
        seen: set[int] = set()
        while True:
            batch = await self._repository.find(scope, now=now, limit=batch_size)
            pending = [article for article in batch if article.id not in seen]
            if not pending:
                break
            for article in pending:
                seen.add(article.id)
                if article.author_id is None or not article.ready_to_notify_author_of_staleness(now):
                    continue
                await self._jobs.schedule(
                    JobKind.STALE_ARTICLE,
                    {"article_id": article.id, "author_id": article.author_id},
                )
                article.mark_author_notified(now)
                await self._repository.update(article)
                notified.append(article.id)

        if notified:
            logger.info("Scheduled %d staleness reminder(s)", len(notified))
        return notified

    async def reset_tag_counts(self) -> int:
        return await self._repository.reset_tags_counts()

    # ── Internals ───────────────────────────────────────────────────

    async def _save(self, article: Article) -> Article:
        await self._repository.update(article)
        await self._publish(article)
        return article

    async def _publish(self, article: Article) -> None:
        for event in article.pull_events():
            await self._jobs.schedule(JobKind.ARTICLE_CHANGED, event.to_payload())

    async def _replace_tags(self, article: Article, tokens: str | Iterable[str]) -> None:
        tags = await self._tags.resolve(tokens)
        count = await self._repository.replace_tags(article.id, [tag.id for tag in tags])
        article.assign_tags(tags)
        article.tags_count = count
