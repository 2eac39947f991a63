"""Unit tests for the NotificationDispatcher fan-out."""

import pytest

from orientation.application.interfaces import (
    AnnounceChannel,
    NotificationSink,
    RelationshipRepository,
)
from orientation.application.services import NotificationDispatcher
from orientation.domain.entities import Job, JobKind, RelationshipKind, Subscription
from orientation.domain.events import ArticleEvent, TransitionKind
from orientation.domain.exceptions import NotificationDeliveryError


# ── Fakes ────────────────────────────────────────────────────────────


class FakeAnnounceChannel(AnnounceChannel):
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.announced: list[ArticleEvent] = []

    @property
    def channel_name(self) -> str:
        return "fake"

    async def announce(self, event: ArticleEvent) -> None:
        if self.fail:
            raise NotificationDeliveryError("fake", "room is closed", status_code=410)
        self.announced.append(event)


class FakeNotificationSink(NotificationSink):
    def __init__(self, failing_users: set[int] | None = None):
        self.failing_users = failing_users or set()
        self.sent: list[tuple] = []

    async def send_update(self, user_id: int, article_id: int) -> None:
        if user_id in self.failing_users:
            raise NotificationDeliveryError("fake", "mailbox full")
        self.sent.append(("update", user_id, article_id))

    async def send_rotten_notice(self, author_id, article_id, reporter_id) -> None:
        if author_id in self.failing_users:
            raise NotificationDeliveryError("fake", "mailbox full")
        self.sent.append(("rotten", author_id, article_id, reporter_id))

    async def send_stale_notice(self, author_id, article_id) -> None:
        self.sent.append(("stale", author_id, article_id))


class FakeSubscriptions(RelationshipRepository):
    kind = RelationshipKind.SUBSCRIPTION

    def __init__(self, user_ids: list[int]):
        self._rows = [Subscription(article_id=1, user_id=u, id=i) for i, u in enumerate(user_ids)]

    async def get(self, article_id, user_id):
        return None

    async def get_or_create(self, article_id, user_id):
        raise NotImplementedError

    async def remove(self, article_id, user_id):
        return False

    async def list_for_article(self, article_id):
        return [r for r in self._rows if r.article_id == article_id]


def _dispatcher(subscribers=(), *, announce_fails=False, failing_users=None):
    channel = FakeAnnounceChannel(fail=announce_fails)
    sink = FakeNotificationSink(failing_users)
    dispatcher = NotificationDispatcher(channel, sink, FakeSubscriptions(list(subscribers)))
    return dispatcher, channel, sink


def _event(kind=TransitionKind.UPDATED, editor_id=None) -> ArticleEvent:
    return ArticleEvent(kind=kind, article_id=1, title="Deploying", editor_id=editor_id)


# ── Tests ────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_save_announces_and_skips_the_editor():
    dispatcher, channel, sink = _dispatcher([10, 20, 30])

    report = await dispatcher.dispatch(_event(editor_id=20))

    assert report.announced is True
    assert len(channel.announced) == 1
    assert sink.sent == [("update", 10, 1), ("update", 30, 1)]
    assert report.notified == [10, 30]


@pytest.mark.asyncio
async def test_destroy_only_announces():
    dispatcher, channel, sink = _dispatcher([10])

    report = await dispatcher.dispatch(_event(TransitionKind.DESTROYED))

    assert report.announced is True
    assert sink.sent == []


@pytest.mark.asyncio
async def test_one_failing_recipient_does_not_block_the_rest():
    dispatcher, _, sink = _dispatcher([10, 20, 30], failing_users={20})

    report = await dispatcher.dispatch(_event())

    assert report.notified == [10, 30]
    assert report.failed == [20]
    assert [s[1] for s in sink.sent] == [10, 30]


@pytest.mark.asyncio
async def test_announce_failure_still_updates_subscribers():
    dispatcher, _, sink = _dispatcher([10], announce_fails=True)

    report = await dispatcher.dispatch(_event(TransitionKind.CREATED))

    assert report.announced is False
    assert sink.sent == [("update", 10, 1)]


@pytest.mark.asyncio
async def test_handle_routes_jobs_by_kind():
    dispatcher, channel, sink = _dispatcher([10])

    await dispatcher.handle(Job(kind=JobKind.ARTICLE_CHANGED, payload=_event().to_payload()))
    await dispatcher.handle(
        Job(kind=JobKind.ROTTEN_ARTICLE, payload={"article_id": 1, "author_id": 4, "reporter_id": 9})
    )
    await dispatcher.handle(Job(kind=JobKind.STALE_ARTICLE, payload={"article_id": 1, "author_id": 4}))

    assert len(channel.announced) == 1
    assert sink.sent == [("update", 10, 1), ("rotten", 4, 1, 9), ("stale", 4, 1)]


@pytest.mark.asyncio
async def test_rotten_notice_failure_is_reported_not_raised():
    dispatcher, _, _ = _dispatcher(failing_users={4})

    report = await dispatcher.notify_author_of_rot(article_id=1, author_id=4, reporter_id=9)

    assert report.failed == [4]
    assert report.notified == []


@pytest.mark.asyncio
async def test_subscribers_to_update_without_editor_includes_everyone():
    dispatcher, _, _ = _dispatcher([10, 20])
    subscribers = await dispatcher.subscribers_to_update(_event(editor_id=None))
    assert [s.user_id for s in subscribers] == [10, 20]
