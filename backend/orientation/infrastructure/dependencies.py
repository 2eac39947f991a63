"""FastAPI dependency injection — wires infrastructure to application layer."""

from collections.abc import AsyncGenerator

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from orientation.config import get_settings
from orientation.application.interfaces import AnnounceChannel, NotificationSink, SearchWeights
from orientation.application.services import (
    ArticleService,
    NotificationDispatcher,
    RelationshipSet,
    RepositoryJobRunner,
    SearchService,
    TagResolver,
)
from orientation.infrastructure.database.session import get_db_session
from orientation.infrastructure.database.repositories import (
    SQLAlchemyArticleRepository,
    SQLAlchemyEndorsementRepository,
    SQLAlchemyJobRepository,
    SQLAlchemySubscriptionRepository,
    SQLAlchemyTagRepository,
)
from orientation.infrastructure.notifications import (
    LoggingAnnounceChannel,
    LoggingNotificationSink,
    WebhookAnnounceChannel,
    WebhookNotificationSink,
)
from orientation.infrastructure.search import PgArticleSearchEngine


def build_article_service(session: AsyncSession) -> ArticleService:
    """Assemble an ArticleService whose repositories and job runner share ``session``."""
    return ArticleService(
        repository=SQLAlchemyArticleRepository(session),
        tag_resolver=TagResolver(SQLAlchemyTagRepository(session)),
        endorsements=RelationshipSet(SQLAlchemyEndorsementRepository(session)),
        subscriptions=RelationshipSet(SQLAlchemySubscriptionRepository(session)),
        job_runner=RepositoryJobRunner(SQLAlchemyJobRepository(session)),
    )


def build_announce_channel() -> AnnounceChannel:
    settings = get_settings()
    if settings.announce_webhook_url.strip():
        return WebhookAnnounceChannel(
            settings.announce_webhook_url, timeout=settings.announce_timeout
        )
    return LoggingAnnounceChannel()


def build_notification_sink() -> NotificationSink:
    settings = get_settings()
    if settings.notification_webhook_url.strip():
        return WebhookNotificationSink(
            settings.notification_webhook_url, timeout=settings.announce_timeout
        )
    return LoggingNotificationSink()


def build_dispatcher(session: AsyncSession) -> NotificationDispatcher:
    """Dispatcher for one job; the worker passes the job's own session."""
    return NotificationDispatcher(
        announce_channel=build_announce_channel(),
        notification_sink=build_notification_sink(),
        subscriptions=SQLAlchemySubscriptionRepository(session),
    )


async def get_article_service(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[ArticleService, None]:
    """Provides an ArticleService bound to the request's session."""
    yield build_article_service(session)


async def get_search_service(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[SearchService, None]:
    """Provides a SearchService backed by PostgreSQL full-text search."""
    settings = get_settings()
    engine = PgArticleSearchEngine(
        session,
        language=settings.search_language,
        trigram_threshold=settings.search_trigram_threshold,
    )
    weights = SearchWeights(
        title=settings.search_title_weight,
        content=settings.search_content_weight,
    )
    yield SearchService(SQLAlchemyArticleRepository(session), engine, weights)


async def get_current_user_id(
    x_user_id: int | None = Header(None, description="Acting user's id"),
) -> int | None:
    """The acting user, if the caller identified one."""
    return x_user_id


async def require_user_id(
    user_id: int | None = Depends(get_current_user_id),
) -> int:
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-User-Id header is required for this action",
        )
    return user_id
