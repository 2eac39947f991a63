"""Unit tests for named article scopes evaluated in memory."""

from datetime import datetime, timedelta, timezone

import pytest
from dateutil.relativedelta import relativedelta

from orientation.domain import scopes
from orientation.domain.entities import Article
from orientation.domain.scopes import ArticleScope, OrderKey

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


def _article(id: int, title: str = "", *, updated=NOW, **kwargs) -> Article:
    return Article(
        id=id,
        title=title or f"Article {id}",
        created_at=kwargs.pop("created", updated),
        updated_at=updated,
        **kwargs,
    )


def test_current_excludes_archived_and_puts_never_rotten_first():
    fresh_one = _article(1, updated=NOW - timedelta(days=1))
    newest = _article(2, updated=NOW)
    rotted_long_ago = _article(3, updated=NOW, rotted_at=NOW - timedelta(days=9))
    rotted_recently = _article(4, updated=NOW, rotted_at=NOW - timedelta(days=1))
    shelved = _article(5, archived_at=NOW)

    result = scopes.current().apply(
        [rotted_long_ago, fresh_one, shelved, rotted_recently, newest], NOW
    )

    assert [a.id for a in result] == [2, 1, 4, 3]


def test_current_breaks_ties_on_created_at():
    older = _article(1, created=NOW - timedelta(days=2))
    younger = _article(2, created=NOW - timedelta(days=1))
    assert [a.id for a in scopes.current().apply([older, younger], NOW)] == [2, 1]


def test_fresh_scope():
    fresh = _article(1, updated=NOW - timedelta(days=2))
    old = _article(2, updated=NOW - timedelta(days=8))
    rotten = _article(3, rotted_at=NOW)
    archived = _article(4, archived_at=NOW)

    result = scopes.fresh().apply([fresh, old, rotten, archived], NOW)

    assert [a.id for a in result] == [1]


def test_stale_scope_ignores_flags():
    ancient = _article(1, updated=NOW - relativedelta(months=7), archived_at=NOW)
    recent = _article(2, updated=NOW - relativedelta(months=5))
    assert [a.id for a in scopes.stale().apply([ancient, recent], NOW)] == [1]


def test_popular_orders_by_endorsements_then_subscriptions_then_visits():
    a = _article(1, endorsements_count=1, subscriptions_count=5, visits=100)
    b = _article(2, endorsements_count=3)
    c = _article(3, endorsements_count=1, subscriptions_count=5, visits=200)
    d = _article(4, endorsements_count=1, subscriptions_count=9)

    assert [x.id for x in scopes.popular().apply([a, b, c, d], NOW)] == [2, 4, 3, 1]


def test_alphabetical_archived_rotten_guide():
    b = _article(1, "Beta", guide=True)
    a = _article(2, "Alpha", rotted_at=NOW)
    c = _article(3, "Gamma", archived_at=NOW)

    assert [x.id for x in scopes.alphabetical().apply([b, a, c], NOW)] == [2, 1, 3]
    assert [x.id for x in scopes.archived().apply([b, a, c], NOW)] == [3]
    assert [x.id for x in scopes.rotten().apply([b, a, c], NOW)] == [2]
    assert [x.id for x in scopes.guide().apply([b, a, c], NOW)] == [1]


def test_merge_combines_filters_and_orderings():
    merged = scopes.current().merge(scopes.guide())
    assert merged.archived is False
    assert merged.guide is True
    assert merged.ordering == scopes.CURRENT_ORDER


def test_merge_right_filter_wins():
    merged = scopes.archived().merge(ArticleScope(archived=False))
    assert merged.archived is False


def test_unknown_scope_name():
    with pytest.raises(ValueError):
        scopes.by_name("trending")


def test_unknown_order_field():
    with pytest.raises(ValueError):
        OrderKey("author_id")


def test_every_named_scope_builds():
    for name in scopes.NAMED_SCOPES:
        assert isinstance(scopes.by_name(name), ArticleScope)


def test_awaiting_stale_reminder():
    old = NOW - relativedelta(months=7)
    due = _article(1, updated=old, author_id=4)
    reminded_long_ago = _article(2, updated=old, author_id=4, last_notified_author_at=NOW - timedelta(days=9))
    reminded_recently = _article(3, updated=old, author_id=4, last_notified_author_at=NOW - timedelta(days=2))
    authorless = _article(4, updated=old)
    shelved = _article(5, updated=old, author_id=4, archived_at=old)
    recent = _article(6, author_id=4)
    articles = [due, reminded_long_ago, reminded_recently, authorless, shelved, recent]

    found = scopes.awaiting_stale_reminder().apply(articles, NOW)

    assert [a.id for a in found] == [1, 2]
