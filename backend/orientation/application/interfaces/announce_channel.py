"""Port for the external announce channel (e.g. a team chat room)."""

from abc import ABC, abstractmethod

from orientation.domain.events import ArticleEvent


class AnnounceChannel(ABC):
    """Best-effort broadcast of article transitions."""

    @property
    @abstractmethod
    def channel_name(self) -> str:
        ...

    @abstractmethod
    async def announce(self, event: ArticleEvent) -> None:
        """Announce a transition. Raises NotificationDeliveryError on failure."""
        ...
