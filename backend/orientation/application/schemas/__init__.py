from .article import (
    ArticleCreate,
    ArticleUpdate,
    ArticleResponse,
    SearchHitResponse,
    RelationshipResponse,
    RelationshipRemovedResponse,
)

__all__ = [
    "ArticleCreate",
    "ArticleUpdate",
    "ArticleResponse",
    "SearchHitResponse",
    "RelationshipResponse",
    "RelationshipRemovedResponse",
]
