"""Port for per-user notices (update, rotten, stale)."""

from abc import ABC, abstractmethod


class NotificationSink(ABC):
    """Delivers notices to individual users. At-least-once."""

    @abstractmethod
    async def send_update(self, user_id: int, article_id: int) -> None:
        """Tell a subscriber the article changed."""
        ...

    @abstractmethod
    async def send_rotten_notice(
        self, author_id: int, article_id: int, reporter_id: int | None
    ) -> None:
        """Tell the author someone flagged their article as rotten."""
        ...

    @abstractmethod
    async def send_stale_notice(self, author_id: int, article_id: int) -> None:
        """Remind the author their article has gone stale."""
        ...
