"""Article endpoints — listing, search, authoring, lifecycle and relationships."""

from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import APIRouter, Depends, HTTPException, Query, status

from orientation.application.schemas import (
    ArticleCreate,
    ArticleResponse,
    ArticleUpdate,
    RelationshipRemovedResponse,
    RelationshipResponse,
    SearchHitResponse,
)
from orientation.application.services import ArticleService, SearchService
from orientation.domain import lifecycle, scopes
from orientation.domain.entities import ArticleRelationship
from orientation.domain.exceptions import (
    DuplicateEntityError,
    EntityNotFoundError,
    ValidationError,
)
from orientation.infrastructure.dependencies import (
    get_article_service,
    get_current_user_id,
    get_search_service,
    require_user_id,
)

router = APIRouter(prefix="/articles", tags=["Articles"])


@contextmanager
def _domain_errors() -> Iterator[None]:
    """Map domain exceptions onto HTTP status codes."""
    try:
        yield
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except DuplicateEntityError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


def _relationship(relationship: ArticleRelationship) -> RelationshipResponse:
    return RelationshipResponse(
        kind=relationship.kind.value,
        article_id=relationship.article_id,
        user_id=relationship.user_id,
        created_at=relationship.created_at,
    )


# ── Listing & search ────────────────────────────────────────────────


@router.get("", response_model=list[ArticleResponse])
async def list_articles(
    scope: str = Query("current", description="One of: " + ", ".join(scopes.NAMED_SCOPES)),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    service: ArticleService = Depends(get_article_service),
) -> list[ArticleResponse]:
    """Retrieve a page of articles from a named scope."""
    try:
        selected = scopes.by_name(scope)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    now = lifecycle.utcnow()
    articles = await service.list_articles(selected, now=now, skip=skip, limit=limit)
    return [ArticleResponse.from_entity(a, now) for a in articles]


@router.get("/search", response_model=list[SearchHitResponse])
async def search_articles(
    q: str = Query("", description="Free text; blank returns the scope unchanged"),
    scope: str = Query("current"),
    limit: int = Query(50, ge=1, le=200),
    service: SearchService = Depends(get_search_service),
) -> list[SearchHitResponse]:
    """Ranked full-text + fuzzy search with highlighted excerpts."""
    try:
        selected = scopes.by_name(scope)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    now = lifecycle.utcnow()
    hits = await service.text_search(q, selected, now=now, limit=limit)
    return [
        SearchHitResponse(
            article=ArticleResponse.from_entity(hit.article, now),
            rank=hit.rank,
            title_highlight=hit.title_highlight,
            content_highlight=hit.content_highlight,
        )
        for hit in hits
    ]


# ── Authoring ───────────────────────────────────────────────────────


@router.get("/{article_id}", response_model=ArticleResponse)
async def get_article(
    article_id: int,
    service: ArticleService = Depends(get_article_service),
) -> ArticleResponse:
    """Retrieve a single article by ID."""
    with _domain_errors():
        article = await service.get_article(article_id)
    return ArticleResponse.from_entity(article)


@router.post("", response_model=ArticleResponse, status_code=status.HTTP_201_CREATED)
async def create_article(
    data: ArticleCreate,
    user_id: int | None = Depends(get_current_user_id),
    service: ArticleService = Depends(get_article_service),
) -> ArticleResponse:
    """Create a new article; the acting user becomes its author."""
    with _domain_errors():
        article = await service.create_article(data, author_id=user_id)
    return ArticleResponse.from_entity(article)


@router.put("/{article_id}", response_model=ArticleResponse)
async def update_article(
    article_id: int,
    data: ArticleUpdate,
    user_id: int | None = Depends(get_current_user_id),
    service: ArticleService = Depends(get_article_service),
) -> ArticleResponse:
    """Edit title, content, guide flag and/or tags."""
    with _domain_errors():
        article = await service.update_article(article_id, data, editor_id=user_id)
    return ArticleResponse.from_entity(article)


@router.delete("/{article_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_article(
    article_id: int,
    service: ArticleService = Depends(get_article_service),
) -> None:
    """Delete an article by ID."""
    with _domain_errors():
        await service.delete_article(article_id)


# ── Lifecycle ───────────────────────────────────────────────────────


@router.post("/{article_id}/archive", response_model=ArticleResponse)
async def archive_article(
    article_id: int,
    service: ArticleService = Depends(get_article_service),
) -> ArticleResponse:
    with _domain_errors():
        article = await service.archive(article_id)
    return ArticleResponse.from_entity(article)


@router.post("/{article_id}/unarchive", response_model=ArticleResponse)
async def unarchive_article(
    article_id: int,
    service: ArticleService = Depends(get_article_service),
) -> ArticleResponse:
    with _domain_errors():
        article = await service.unarchive(article_id)
    return ArticleResponse.from_entity(article)


@router.post("/{article_id}/rot", response_model=ArticleResponse)
async def rot_article(
    article_id: int,
    user_id: int = Depends(require_user_id),
    service: ArticleService = Depends(get_article_service),
) -> ArticleResponse:
    """Flag an article as rotten; its author is notified in the background."""
    with _domain_errors():
        article = await service.rot(article_id, reporter_id=user_id)
    return ArticleResponse.from_entity(article)


@router.post("/{article_id}/refresh", response_model=ArticleResponse)
async def refresh_article(
    article_id: int,
    service: ArticleService = Depends(get_article_service),
) -> ArticleResponse:
    """Clear the rotten flag and mark the article as just updated."""
    with _domain_errors():
        article = await service.refresh(article_id)
    return ArticleResponse.from_entity(article)


@router.post("/{article_id}/visits", status_code=status.HTTP_204_NO_CONTENT)
async def count_visit(
    article_id: int,
    service: ArticleService = Depends(get_article_service),
) -> None:
    if not await service.count_visit(article_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Article with id '{article_id}' not found",
        )


# ── Endorsements & subscriptions ────────────────────────────────────


@router.post("/{article_id}/endorsements", response_model=RelationshipResponse)
async def endorse_article(
    article_id: int,
    user_id: int = Depends(require_user_id),
    service: ArticleService = Depends(get_article_service),
) -> RelationshipResponse:
    with _domain_errors():
        endorsement = await service.endorse(article_id, user_id)
    return _relationship(endorsement)


@router.delete("/{article_id}/endorsements", response_model=RelationshipRemovedResponse)
async def unendorse_article(
    article_id: int,
    user_id: int = Depends(require_user_id),
    service: ArticleService = Depends(get_article_service),
) -> RelationshipRemovedResponse:
    """``removed`` is false when there was no endorsement to begin with."""
    return RelationshipRemovedResponse(removed=await service.unendorse(article_id, user_id))


@router.post("/{article_id}/subscriptions", response_model=RelationshipResponse)
async def subscribe_to_article(
    article_id: int,
    user_id: int = Depends(require_user_id),
    service: ArticleService = Depends(get_article_service),
) -> RelationshipResponse:
    with _domain_errors():
        subscription = await service.subscribe(article_id, user_id)
    return _relationship(subscription)


@router.delete("/{article_id}/subscriptions", response_model=RelationshipRemovedResponse)
async def unsubscribe_from_article(
    article_id: int,
    user_id: int = Depends(require_user_id),
    service: ArticleService = Depends(get_article_service),
) -> RelationshipRemovedResponse:
    return RelationshipRemovedResponse(removed=await service.unsubscribe(article_id, user_id))


# ── Maintenance ─────────────────────────────────────────────────────


@router.post("/maintenance/stale-notices", response_model=list[int])
async def notify_stale_authors(
    service: ArticleService = Depends(get_article_service),
) -> list[int]:
    """Schedule staleness reminders; returns the article ids covered."""
    return await service.notify_stale_authors()


@router.post("/maintenance/tag-counts", response_model=dict)
async def reset_tag_counts(
    service: ArticleService = Depends(get_article_service),
) -> dict:
    """Recompute every article's tags_count from its associations."""
    return {"updated": await service.reset_tag_counts()}
