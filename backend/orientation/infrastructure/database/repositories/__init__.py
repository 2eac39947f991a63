from .article_repository import SQLAlchemyArticleRepository
from .tag_repository import SQLAlchemyTagRepository
from .relationship_repository import (
    SQLAlchemyEndorsementRepository,
    SQLAlchemySubscriptionRepository,
)
from .job_repository import SQLAlchemyJobRepository

__all__ = [
    "SQLAlchemyArticleRepository",
    "SQLAlchemyTagRepository",
    "SQLAlchemyEndorsementRepository",
    "SQLAlchemySubscriptionRepository",
    "SQLAlchemyJobRepository",
]
