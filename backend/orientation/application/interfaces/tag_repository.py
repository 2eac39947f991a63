"""Abstract repository interface (port) for tags."""

from abc import ABC, abstractmethod

from orientation.domain.entities import Tag


class TagRepository(ABC):
    """Port for tag persistence. Tag names are stored normalised and unique."""

    @abstractmethod
    async def find_by_names(self, names: list[str]) -> list[Tag]:
        """Retrieve the existing tags among the given normalised names."""
        ...

    @abstractmethod
    async def get_or_create(self, name: str) -> Tag:
        """Return the tag with this normalised name, creating it if needed."""
        ...
