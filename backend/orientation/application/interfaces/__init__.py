from .article_repository import ArticleRepository
from .tag_repository import TagRepository
from .relationship_repository import RelationshipRepository
from .search_engine import SearchEngine, SearchWeights
from .job_repository import JobRepository
from .job_runner import JobRunner
from .announce_channel import AnnounceChannel
from .notification_sink import NotificationSink

__all__ = [
    "ArticleRepository",
    "TagRepository",
    "RelationshipRepository",
    "SearchEngine",
    "SearchWeights",
    "JobRepository",
    "JobRunner",
    "AnnounceChannel",
    "NotificationSink",
]
