"""Translates domain ``ArticleScope`` definitions into SQLAlchemy clauses."""

from datetime import datetime

from sqlalchemy import ColumnElement, Select, UnaryExpression, or_

from orientation.domain import lifecycle
from orientation.domain.scopes import ArticleScope, OrderKey
from orientation.infrastructure.database.models import ArticleModel

_COLUMNS = {
    "rotted_at": ArticleModel.rotted_at,
    "updated_at": ArticleModel.updated_at,
    "created_at": ArticleModel.created_at,
    "endorsements_count": ArticleModel.endorsements_count,
    "subscriptions_count": ArticleModel.subscriptions_count,
    "visits": ArticleModel.visits,
    "title": ArticleModel.title,
}


def scope_filters(scope: ArticleScope, now: datetime) -> list[ColumnElement[bool]]:
    conditions: list[ColumnElement[bool]] = []

    if scope.archived is True:
        conditions.append(ArticleModel.archived_at.is_not(None))
    elif scope.archived is False:
        conditions.append(ArticleModel.archived_at.is_(None))

    if scope.rotten is True:
        conditions.append(ArticleModel.rotted_at.is_not(None))
    elif scope.rotten is False:
        conditions.append(ArticleModel.rotted_at.is_(None))

    if scope.guide is not None:
        conditions.append(ArticleModel.guide == scope.guide)
    if scope.authored is True:
        conditions.append(ArticleModel.author_id.is_not(None))
    elif scope.authored is False:
        conditions.append(ArticleModel.author_id.is_(None))

    if scope.within_freshness:
        conditions.append(ArticleModel.updated_at >= lifecycle.freshness_cutoff(now))
    if scope.stale:
        conditions.append(ArticleModel.updated_at < lifecycle.staleness_cutoff(now))
    if scope.reminder_due:
        conditions.append(
            or_(
                ArticleModel.last_notified_author_at.is_(None),
                ArticleModel.last_notified_author_at < lifecycle.reminder_cutoff(now),
            )
        )

    return conditions


def order_clause(key: OrderKey) -> UnaryExpression:
    column = _COLUMNS[key.field]
    clause = column.desc() if key.descending else column.asc()
    return clause.nulls_first() if key.places_nulls_first else clause.nulls_last()


def scope_ordering(scope: ArticleScope) -> list[UnaryExpression]:
    """Scope ordering plus the primary key as a final, deterministic tiebreak."""
    return [order_clause(key) for key in scope.ordering] + [ArticleModel.id.asc()]


def apply_scope(stmt: Select, scope: ArticleScope, now: datetime, *, ordered: bool = True) -> Select:
    for condition in scope_filters(scope, now):
        stmt = stmt.where(condition)
    if ordered:
        stmt = stmt.order_by(*scope_ordering(scope))
    return stmt
