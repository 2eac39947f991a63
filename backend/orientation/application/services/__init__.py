from .article_service import ArticleService
from .tag_resolver import TagResolver
from .relationship_service import RelationshipSet
from .notification_dispatcher import NotificationDispatcher, DispatchReport
from .search_service import SearchService
from .job_scheduler import RepositoryJobRunner
from .job_worker import JobWorker

__all__ = [
    "ArticleService",
    "TagResolver",
    "RelationshipSet",
    "NotificationDispatcher",
    "DispatchReport",
    "SearchService",
    "RepositoryJobRunner",
    "JobWorker",
]
