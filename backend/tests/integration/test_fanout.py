"""End-to-end fan-out: a committed mutation schedules jobs the worker delivers."""

import pytest

from orientation.application.interfaces import AnnounceChannel, NotificationSink
from orientation.application.schemas import ArticleCreate, ArticleUpdate
from orientation.application.services import JobWorker, NotificationDispatcher
from orientation.domain.entities import JobStatus
from orientation.domain.events import ArticleEvent
from orientation.infrastructure.database.repositories import (
    SQLAlchemyJobRepository,
    SQLAlchemySubscriptionRepository,
)
from orientation.infrastructure.dependencies import build_article_service


class RecordingChannel(AnnounceChannel):
    def __init__(self):
        self.events: list[ArticleEvent] = []

    @property
    def channel_name(self) -> str:
        return "recording"

    async def announce(self, event: ArticleEvent) -> None:
        self.events.append(event)


class RecordingSink(NotificationSink):
    def __init__(self):
        self.sent: list[tuple] = []

    async def send_update(self, user_id, article_id):
        self.sent.append(("update", user_id, article_id))

    async def send_rotten_notice(self, author_id, article_id, reporter_id):
        self.sent.append(("rotten", author_id, article_id, reporter_id))

    async def send_stale_notice(self, author_id, article_id):
        self.sent.append(("stale", author_id, article_id))


@pytest.mark.asyncio
async def test_committed_changes_are_announced_and_delivered(session_factory):
    async with session_factory() as session:
        service = build_article_service(session)
        article = await service.create_article(ArticleCreate(title="Deploying", tags="ops"), author_id=1)
        await service.subscribe(article.id, 10)
        await service.subscribe(article.id, 20)
        await service.update_article(article.id, ArticleUpdate(content="Use make."), editor_id=20)
        await service.rot(article.id, reporter_id=30)
        await session.commit()

    channel, sink = RecordingChannel(), RecordingSink()
    worker = JobWorker(
        session_factory=session_factory,
        repository_factory=SQLAlchemyJobRepository,
        dispatcher_factory=lambda s: NotificationDispatcher(
            channel, sink, SQLAlchemySubscriptionRepository(s)
        ),
    )

    processed = await worker.run_once()

    assert len(processed) == 4
    assert all(job.status == JobStatus.COMPLETED for job in processed)
    assert [e.kind.value for e in channel.events] == ["created", "updated", "rotten"]
    # user 20 hears about the creation but not about their own edit or the rot that followed it
    assert sink.sent.count(("update", 20, article.id)) == 1
    assert sink.sent.count(("update", 10, article.id)) == 3
    assert ("rotten", 1, article.id, 30) in sink.sent


@pytest.mark.asyncio
async def test_rolled_back_changes_schedule_nothing(session_factory):
    async with session_factory() as session:
        service = build_article_service(session)
        await service.create_article(ArticleCreate(title="Never mind"))
        await session.rollback()

    worker = JobWorker(
        session_factory=session_factory,
        repository_factory=SQLAlchemyJobRepository,
        dispatcher_factory=lambda s: NotificationDispatcher(
            RecordingChannel(), RecordingSink(), SQLAlchemySubscriptionRepository(s)
        ),
    )
    assert await worker.run_once() == []
