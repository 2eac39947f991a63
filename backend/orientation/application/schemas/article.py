"""Pydantic DTOs (Data Transfer Objects) for the Article feature."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from orientation.domain.entities import Article


class ArticleCreate(BaseModel):
    """Schema for creating a new article."""

    title: str = Field(..., min_length=1, max_length=255, examples=["Getting Started"])
    content: str = Field("", examples=["This is a knowledge base article."])
    guide: bool = False
    tags: list[str] | None = Field(
        None, description="Free-text tag tokens; replaces the article's tags.", examples=[["ruby", "go"]]
    )

    @field_validator("tags", mode="before")
    @classmethod
    def _split_token_string(cls, value: object) -> object:
        if isinstance(value, str):
            return value.split(",")
        return value


class ArticleUpdate(BaseModel):
    """Schema for updating an existing article — all fields optional."""

    title: str | None = Field(None, min_length=1, max_length=255)
    content: str | None = None
    guide: bool | None = None
    tags: list[str] | None = None

    @field_validator("tags", mode="before")
    @classmethod
    def _split_token_string(cls, value: object) -> object:
        if isinstance(value, str):
            return value.split(",")
        return value


class ArticleResponse(BaseModel):
    """Schema returned to the client. Lifecycle flags are evaluated at response time."""

    id: int
    title: str
    content: str
    guide: bool
    author_id: int | None
    editor_id: int | None
    rot_reporter_id: int | None
    created_at: datetime
    updated_at: datetime
    archived_at: datetime | None
    rotted_at: datetime | None
    tags: list[str]
    tags_count: int
    endorsements_count: int
    subscriptions_count: int
    visits: int
    fresh: bool
    stale: bool
    rotten: bool
    archived: bool
    states: list[str]

    @classmethod
    def from_entity(cls, article: Article, now: datetime | None = None) -> "ArticleResponse":
        return cls(
            id=article.id,
            title=article.title,
            content=article.content,
            guide=article.guide,
            author_id=article.author_id,
            editor_id=article.editor_id,
            rot_reporter_id=article.rot_reporter_id,
            created_at=article.created_at,
            updated_at=article.updated_at,
            archived_at=article.archived_at,
            rotted_at=article.rotted_at,
            tags=[tag.name for tag in article.tags],
            tags_count=article.tags_count,
            endorsements_count=article.endorsements_count,
            subscriptions_count=article.subscriptions_count,
            visits=article.visits,
            fresh=article.is_fresh(now),
            stale=article.is_stale(now),
            rotten=article.rotten,
            archived=article.archived,
            states=article.state_descriptions(now),
        )


class SearchHitResponse(BaseModel):
    """A search result: the article plus highlighted excerpts when a query was given."""

    article: ArticleResponse
    rank: float | None = None
    title_highlight: str | None = None
    content_highlight: str | None = None


class RelationshipResponse(BaseModel):
    """An endorsement or subscription row."""

    kind: str
    article_id: int
    user_id: int
    created_at: datetime


class RelationshipRemovedResponse(BaseModel):
    removed: bool
