"""Domain entity for tags — shared labels attached to many articles."""

import re
from collections.abc import Iterable
from dataclasses import dataclass

_WHITESPACE = re.compile(r"\s+")


def normalize_label(label: str) -> str:
    """Canonical form used for tag lookups: trimmed, single-spaced, case-folded."""
    return _WHITESPACE.sub(" ", label).strip().casefold()


def parse_tag_tokens(tokens: str | Iterable[str]) -> list[str]:
    """Split free-text tag input into non-blank tokens, preserving input order.

    Accepts either a comma-separated string ("ruby, go") or a sequence of
    tokens. Duplicates are kept; they collapse later on normalisation.
    """
    if isinstance(tokens, str):
        tokens = tokens.split(",")
    return [token.strip() for token in tokens if token and token.strip()]


@dataclass
class Tag:
    """A tag label. ``name`` is stored normalised and is unique."""

    name: str
    id: int | None = None

    def __post_init__(self) -> None:
        self.name = normalize_label(self.name)

    def __str__(self) -> str:
        return self.name
