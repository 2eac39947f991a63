"""Named, composable article scopes — filters and orderings as plain data.

A scope is handed to the repository, which translates it to SQL; the same
scope can be evaluated in memory with ``apply()`` (used by fakes and tests).

    scope = scopes.current().merge(scopes.guide())
    articles = await repository.find(scope, now=now)
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from datetime import datetime

from orientation.domain import lifecycle
from orientation.domain.entities.article import Article

SORTABLE_FIELDS = frozenset({
    "rotted_at",
    "updated_at",
    "created_at",
    "endorsements_count",
    "subscriptions_count",
    "visits",
    "title",
})


@dataclass(frozen=True)
class OrderKey:
    """One ordering term. ``nulls_first`` mirrors PostgreSQL: DESC puts NULLs first."""

    field: str
    descending: bool = False
    nulls_first: bool | None = None

    def __post_init__(self) -> None:
        if self.field not in SORTABLE_FIELDS:
            raise ValueError(f"Cannot order articles by '{self.field}'")

    @property
    def places_nulls_first(self) -> bool:
        if self.nulls_first is None:
            return self.descending
        return self.nulls_first


@dataclass(frozen=True)
class ArticleScope:
    """Filter + ordering definition over articles.

    ``None`` on a filter means "don't care". ``within_freshness`` keeps
    articles updated within FRESHNESS_LIMIT; ``stale`` keeps articles updated
    strictly before STALENESS_LIMIT ago. ``reminder_due`` keeps articles whose
    author may be sent another staleness reminder.
    """

    name: str = "all"
    archived: bool | None = None
    rotten: bool | None = None
    guide: bool | None = None
    authored: bool | None = None
    within_freshness: bool = False
    stale: bool = False
    reminder_due: bool = False
    ordering: tuple[OrderKey, ...] = ()

    def merge(self, other: "ArticleScope") -> "ArticleScope":
        """Combine two scopes; ``other``'s filters win where both set one.

        Orderings are concatenated, ``self`` first, so the left scope decides
        the primary sort and the right one breaks ties.
        """
        return ArticleScope(
            name=f"{self.name}+{other.name}",
            archived=other.archived if other.archived is not None else self.archived,
            rotten=other.rotten if other.rotten is not None else self.rotten,
            guide=other.guide if other.guide is not None else self.guide,
            authored=other.authored if other.authored is not None else self.authored,
            within_freshness=self.within_freshness or other.within_freshness,
            stale=self.stale or other.stale,
            reminder_due=self.reminder_due or other.reminder_due,
            ordering=self.ordering + tuple(k for k in other.ordering if k not in self.ordering),
        )

    def order_by(self, *keys: OrderKey) -> "ArticleScope":
        return replace(self, ordering=tuple(keys))

    # ── In-memory evaluation ────────────────────────────────────────

    def matches(self, article: Article, now: datetime) -> bool:
        if self.archived is not None and article.archived != self.archived:
            return False
        if self.rotten is not None and article.rotten != self.rotten:
            return False
        if self.guide is not None and article.guide != self.guide:
            return False
        if self.authored is not None and (article.author_id is not None) != self.authored:
            return False
        if self.within_freshness and article.updated_at < lifecycle.freshness_cutoff(now):
            return False
        if self.stale and not lifecycle.is_stale(now, article.updated_at):
            return False
        if self.reminder_due and not article.ready_to_notify_author_of_staleness(now):
            return False
        return True

    def sort(self, articles: Iterable[Article]) -> list[Article]:
        """Stable multi-key sort honouring each key's direction and NULL placement."""
        result = list(articles)
        for key in reversed(self.ordering):
            getter: Callable[[Article], object] = lambda a, f=key.field: getattr(a, f)
            present = [a for a in result if getter(a) is not None]
            missing = [a for a in result if getter(a) is None]
            present.sort(key=getter, reverse=key.descending)
            result = missing + present if key.places_nulls_first else present + missing
        return result

    def apply(self, articles: Iterable[Article], now: datetime) -> list[Article]:
        return self.sort(a for a in articles if self.matches(a, now))


# ── Named scopes ────────────────────────────────────────────────────

CURRENT_ORDER = (
    OrderKey("rotted_at", descending=True, nulls_first=True),
    OrderKey("updated_at", descending=True),
    OrderKey("created_at", descending=True),
)

POPULAR_ORDER = (
    OrderKey("endorsements_count", descending=True),
    OrderKey("subscriptions_count", descending=True),
    OrderKey("visits", descending=True),
)


def all_articles() -> ArticleScope:
    return ArticleScope()


def current() -> ArticleScope:
    """Unarchived; never-rotten first, then recency."""
    return ArticleScope(name="current", archived=False, ordering=CURRENT_ORDER)


def fresh() -> ArticleScope:
    return ArticleScope(
        name="fresh",
        archived=False,
        rotten=False,
        within_freshness=True,
        ordering=CURRENT_ORDER,
    )


def stale() -> ArticleScope:
    """Time-only: archived and rotten articles are included."""
    return ArticleScope(name="stale", stale=True)


def popular() -> ArticleScope:
    return ArticleScope(name="popular", ordering=POPULAR_ORDER)


def alphabetical() -> ArticleScope:
    return ArticleScope(name="alphabetical", ordering=(OrderKey("title"),))


def archived() -> ArticleScope:
    return ArticleScope(name="archived", archived=True)


def rotten() -> ArticleScope:
    return ArticleScope(name="rotten", rotten=True)


def guide() -> ArticleScope:
    return ArticleScope(name="guide", guide=True)


def awaiting_stale_reminder() -> ArticleScope:
    """Stale, unarchived, authored articles whose author is due a reminder."""
    return ArticleScope(
        name="awaiting_stale_reminder",
        archived=False,
        authored=True,
        stale=True,
        reminder_due=True,
    )


NAMED_SCOPES: dict[str, Callable[[], ArticleScope]] = {
    "all": all_articles,
    "current": current,
    "fresh": fresh,
    "stale": stale,
    "popular": popular,
    "alphabetical": alphabetical,
    "archived": archived,
    "rotten": rotten,
    "guide": guide,
}


def by_name(name: str) -> ArticleScope:
    try:
        return NAMED_SCOPES[name]()
    except KeyError:
        raise ValueError(f"Unknown article scope '{name}'") from None
