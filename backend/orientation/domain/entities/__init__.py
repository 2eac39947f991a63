from .article import Article
from .tag import Tag, normalize_label, parse_tag_tokens
from .relationship import (
    ArticleRelationship,
    Endorsement,
    Subscription,
    RelationshipKind,
    subscribers_to_update,
)
from .job import Job, JobKind, JobStatus
from .search import SearchHit

__all__ = [
    "Article",
    "Tag",
    "normalize_label",
    "parse_tag_tokens",
    "ArticleRelationship",
    "Endorsement",
    "Subscription",
    "RelationshipKind",
    "subscribers_to_update",
    "Job",
    "JobKind",
    "JobStatus",
    "SearchHit",
]
