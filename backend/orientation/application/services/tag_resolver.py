"""Resolves free-text tag input into canonical tags."""

import logging
from collections.abc import Iterable

from orientation.application.interfaces import TagRepository
from orientation.domain.entities import Tag, normalize_label, parse_tag_tokens

logger = logging.getLogger(__name__)


class TagResolver:
    """Maps tokens to tag identities, creating missing tags on the way.

    Tokens that normalise to the same label collapse into one tag, so the
    result is a set (kept in first-seen order) suitable for a full replace of
    an article's associations.
    """

    def __init__(self, repository: TagRepository):
        self._repository = repository

    async def resolve(self, tokens: str | Iterable[str]) -> list[Tag]:
        names = self.normalize(tokens)
        if not names:
            return []

        existing = {tag.name: tag for tag in await self._repository.find_by_names(names)}
        resolved: list[Tag] = []
        for name in names:
            tag = existing.get(name)
            if tag is None:
                tag = await self._repository.get_or_create(name)
                logger.info("Created tag '%s' (id=%s)", tag.name, tag.id)
            resolved.append(tag)
        return resolved

    @staticmethod
    def normalize(tokens: str | Iterable[str]) -> list[str]:
        """Normalised, de-duplicated labels in first-seen order."""
        names: list[str] = []
        for token in parse_tag_tokens(tokens):
            name = normalize_label(token)
            if name and name not in names:
                names.append(name)
        return names
