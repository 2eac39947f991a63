"""Repository tests against a real (SQLite) database."""

from datetime import datetime, timedelta, timezone

import pytest
from dateutil.relativedelta import relativedelta
from sqlalchemy import func, select

from orientation.domain import scopes
from orientation.domain.entities import Article, Job, JobKind, JobStatus
from orientation.infrastructure.database.models import (
    ArticleEndorsementModel,
    ArticleSubscriptionModel,
    ArticleTagModel,
)
from orientation.infrastructure.database.repositories import (
    SQLAlchemyArticleRepository,
    SQLAlchemyEndorsementRepository,
    SQLAlchemyJobRepository,
    SQLAlchemySubscriptionRepository,
    SQLAlchemyTagRepository,
)
from orientation.infrastructure.dependencies import build_article_service

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


async def _add(repository: SQLAlchemyArticleRepository, title: str, **kwargs) -> Article:
    updated = kwargs.pop("updated", NOW)
    article = Article(title=title, created_at=updated, updated_at=updated, **kwargs)
    return await repository.create(article)


@pytest.mark.asyncio
async def test_create_and_get_round_trips_timestamps(session):
    repository = SQLAlchemyArticleRepository(session)
    created = await _add(repository, "Deploying", author_id=3, guide=True)

    loaded = await repository.get_by_id(created.id)

    assert loaded.title == "Deploying"
    assert loaded.author_id == 3
    assert loaded.guide is True
    assert loaded.updated_at == NOW
    assert loaded.updated_at.tzinfo is not None
    assert await repository.get_by_id(9999) is None


@pytest.mark.asyncio
async def test_current_scope_in_sql_matches_in_memory_order(session):
    repository = SQLAlchemyArticleRepository(session)
    older = await _add(repository, "Older", updated=NOW - timedelta(days=2))
    newer = await _add(repository, "Newer")
    rotted = await _add(repository, "Rotted", rotted_at=NOW - timedelta(days=1))
    await _add(repository, "Shelved", archived_at=NOW)

    found = await repository.find(scopes.current(), now=NOW)

    assert [a.id for a in found] == [newer.id, older.id, rotted.id]


@pytest.mark.asyncio
async def test_fresh_and_stale_filters(session):
    repository = SQLAlchemyArticleRepository(session)
    fresh = await _add(repository, "Fresh", updated=NOW - timedelta(days=1))
    ancient = await _add(repository, "Ancient", updated=NOW - relativedelta(months=7))
    await _add(repository, "Rotten", rotted_at=NOW)

    assert [a.id for a in await repository.find(scopes.fresh(), now=NOW)] == [fresh.id]
    assert [a.id for a in await repository.find(scopes.stale(), now=NOW)] == [ancient.id]


@pytest.mark.asyncio
async def test_update_persists_lifecycle_fields(session):
    repository = SQLAlchemyArticleRepository(session)
    article = await _add(repository, "Wiki")
    article.rot(reporter_id=8, now=NOW)
    article.archive(NOW)

    await repository.update(article)
    loaded = await repository.get_by_id(article.id)

    assert loaded.rotten and loaded.archived
    assert loaded.rot_reporter_id == 8


@pytest.mark.asyncio
async def test_tags_are_shared_and_counted(session):
    articles = SQLAlchemyArticleRepository(session)
    tags = SQLAlchemyTagRepository(session)
    first = await _add(articles, "First")
    second = await _add(articles, "Second")

    ruby = await tags.get_or_create("ruby")
    assert (await tags.get_or_create("ruby")).id == ruby.id
    go = await tags.get_or_create("go")

    assert await articles.replace_tags(first.id, [ruby.id, go.id, ruby.id]) == 2
    await articles.replace_tags(second.id, [ruby.id])
    await articles.replace_tags(first.id, [go.id])

    loaded = await articles.get_by_id(first.id)
    assert [t.name for t in loaded.tags] == ["go"]
    assert loaded.tags_count == 1
    assert [t.name for t in (await articles.get_by_id(second.id)).tags] == ["ruby"]


@pytest.mark.asyncio
async def test_reset_tags_counts_recomputes_from_associations(session):
    articles = SQLAlchemyArticleRepository(session)
    tags = SQLAlchemyTagRepository(session)
    article = await _add(articles, "Drifted")
    ruby = await tags.get_or_create("ruby")
    await articles.replace_tags(article.id, [ruby.id])
    session.add(ArticleTagModel(article_id=article.id, tag_id=(await tags.get_or_create("go")).id))
    await session.flush()

    await articles.reset_tags_counts()

    assert (await articles.get_by_id(article.id)).tags_count == 2


@pytest.mark.asyncio
async def test_increment_visits(session):
    repository = SQLAlchemyArticleRepository(session)
    article = await _add(repository, "Popular")

    assert await repository.increment_visits(article.id) is True
    assert await repository.increment_visits(article.id) is True
    assert await repository.increment_visits(9999) is False
    assert (await repository.get_by_id(article.id)).visits == 2


@pytest.mark.asyncio
async def test_relationships_are_idempotent_and_move_counters(session):
    articles = SQLAlchemyArticleRepository(session)
    endorsements = SQLAlchemyEndorsementRepository(session)
    article = await _add(articles, "Good stuff")

    row, created = await endorsements.get_or_create(article.id, 5)
    again, created_again = await endorsements.get_or_create(article.id, 5)
    await endorsements.get_or_create(article.id, 6)

    assert created is True and created_again is False
    assert again.id == row.id
    assert (await articles.get_by_id(article.id)).endorsements_count == 2

    assert await endorsements.remove(article.id, 5) is True
    assert await endorsements.remove(article.id, 5) is False
    assert (await articles.get_by_id(article.id)).endorsements_count == 1


@pytest.mark.asyncio
async def test_delete_removes_owned_rows(session):
    articles = SQLAlchemyArticleRepository(session)
    tags = SQLAlchemyTagRepository(session)
    subscriptions = SQLAlchemySubscriptionRepository(session)
    article = await _add(articles, "Doomed")
    ruby = await tags.get_or_create("ruby")
    await articles.replace_tags(article.id, [ruby.id])
    await subscriptions.get_or_create(article.id, 5)

    assert await articles.delete(article.id) is True
    assert await articles.delete(article.id) is False

    remaining = await session.scalar(select(func.count()).select_from(ArticleTagModel))
    assert remaining == 0
    assert await subscriptions.list_for_article(article.id) == []
    assert (await tags.find_by_names(["ruby"]))[0].id == ruby.id


@pytest.mark.asyncio
async def test_job_queue_is_fifo(session):
    repository = SQLAlchemyJobRepository(session)
    first = await repository.create(
        Job(kind=JobKind.STALE_ARTICLE, payload={"article_id": 1}, created_at=NOW)
    )
    await repository.create(
        Job(kind=JobKind.ROTTEN_ARTICLE, payload={"article_id": 2}, created_at=NOW + timedelta(seconds=1))
    )

    queued = await repository.get_queued(limit=1)
    assert [j.id for j in queued] == [first.id]

    first.mark_processing()
    first.mark_completed()
    await repository.update(first)

    loaded = await repository.get_by_id(first.id)
    assert loaded.status == JobStatus.COMPLETED
    assert loaded.payload == {"article_id": 1}
    assert [j.kind for j in await repository.get_queued()] == [JobKind.ROTTEN_ARTICLE]


@pytest.mark.asyncio
async def test_job_queue_reclaims_processing_jobs_past_their_lease(session):
    repository = SQLAlchemyJobRepository(session)
    abandoned = await repository.create(
        Job(kind=JobKind.STALE_ARTICLE, payload={"article_id": 1}, created_at=NOW)
    )
    abandoned.mark_processing()
    abandoned.started_at = NOW - timedelta(minutes=10)
    await repository.update(abandoned)
    in_flight = await repository.create(
        Job(kind=JobKind.STALE_ARTICLE, payload={"article_id": 2}, created_at=NOW)
    )
    in_flight.mark_processing()
    in_flight.started_at = NOW
    await repository.update(in_flight)

    assert await repository.get_queued() == []
    reclaimed = await repository.get_queued(reclaim_before=NOW - timedelta(minutes=5))
    assert [j.id for j in reclaimed] == [abandoned.id]


@pytest.mark.asyncio
async def test_purge_finished_deletes_only_old_finished_jobs(session):
    repository = SQLAlchemyJobRepository(session)
    old = await repository.create(Job(kind=JobKind.STALE_ARTICLE, created_at=NOW))
    old.mark_completed()
    old.completed_at = NOW - timedelta(days=30)
    await repository.update(old)
    recent = await repository.create(Job(kind=JobKind.STALE_ARTICLE, created_at=NOW))
    recent.mark_completed()
    recent.completed_at = NOW
    await repository.update(recent)
    queued = await repository.create(Job(kind=JobKind.STALE_ARTICLE, created_at=NOW))

    assert await repository.purge_finished(NOW - timedelta(days=7)) == 1
    assert await repository.get_by_id(old.id) is None
    assert await repository.get_by_id(recent.id) is not None
    assert await repository.get_by_id(queued.id) is not None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "repository_class, model, counter",
    [
        (SQLAlchemyEndorsementRepository, ArticleEndorsementModel, "endorsements_count"),
        (SQLAlchemySubscriptionRepository, ArticleSubscriptionModel, "subscriptions_count"),
    ],
)
async def test_losing_a_creation_race_yields_the_winning_row(
    session_factory, repository_class, model, counter
):
    async with session_factory() as setup:
        article = await _add(SQLAlchemyArticleRepository(setup), "Contested")
        await setup.commit()

    async with session_factory() as late_session:
        late = repository_class(late_session)
        read_committed = late.get
        reads = 0

        async def get_before_the_other_writer(article_id, user_id):
            # the first lookup happens before the other session commits
            nonlocal reads
            reads += 1
            if reads == 1:
                return None
            return await read_committed(article_id, user_id)

        late.get = get_before_the_other_writer

        async with session_factory() as early_session:
            winner, won = await repository_class(early_session).get_or_create(article.id, 5)
            await early_session.commit()

        row, created = await late.get_or_create(article.id, 5)
        await late_session.commit()

    assert won is True
    assert created is False
    assert row.id == winner.id

    async with session_factory() as check:
        rows = await check.scalar(
            select(func.count()).select_from(model).where(model.article_id == article.id)
        )
        loaded = await SQLAlchemyArticleRepository(check).get_by_id(article.id)
    assert rows == 1
    assert getattr(loaded, counter) == 1


@pytest.mark.asyncio
async def test_stale_reminder_scope_in_sql(session):
    repository = SQLAlchemyArticleRepository(session)
    old = NOW - relativedelta(months=7)
    due = await _add(repository, "Due", updated=old, author_id=4)
    reminded_long_ago = await _add(
        repository, "Long ago", updated=old, author_id=4, last_notified_author_at=NOW - timedelta(days=9)
    )
    await _add(repository, "Just reminded", updated=old, author_id=4, last_notified_author_at=NOW - timedelta(days=2))
    await _add(repository, "Authorless", updated=old)
    await _add(repository, "Shelved", updated=old, author_id=4, archived_at=old)

    found = await repository.find(scopes.awaiting_stale_reminder(), now=NOW)

    assert [a.id for a in found] == [due.id, reminded_long_ago.id]


@pytest.mark.asyncio
async def test_stale_reminders_cover_more_than_one_page(session):
    repository = SQLAlchemyArticleRepository(session)
    old = NOW - relativedelta(months=7)
    ids = [(await _add(repository, f"Old {n}", updated=old, author_id=4)).id for n in range(5)]
    service = build_article_service(session)

    assert await service.notify_stale_authors(now=NOW, batch_size=2) == ids
    assert await service.notify_stale_authors(now=NOW + timedelta(days=1), batch_size=2) == []
    assert await service.notify_stale_authors(now=NOW + timedelta(days=8), batch_size=2) == ids
