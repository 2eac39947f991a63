from .article import ArticleModel, ArticleTagModel, TagModel
from .relationship_models import ArticleEndorsementModel, ArticleSubscriptionModel
from .job_models import JobModel

__all__ = [
    "ArticleModel",
    "ArticleTagModel",
    "TagModel",
    "ArticleEndorsementModel",
    "ArticleSubscriptionModel",
    "JobModel",
]
