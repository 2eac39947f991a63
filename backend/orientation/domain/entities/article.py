"""Domain entities — pure Python business objects, no framework dependencies."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta

from orientation.domain import lifecycle
from orientation.domain.entities.tag import Tag
from orientation.domain.events import ArticleEvent, TransitionKind
from orientation.domain.exceptions import ValidationError


@dataclass
class Article:
    """Core domain entity representing a knowledge article.

    Lifecycle state lives on two orthogonal axes, rotten/active and
    archived/unarchived, all four combinations being valid. Freshness and
    staleness are derived from timestamps at read time (see ``lifecycle``).

    Every transition method records a pending ``TransitionKind``; the service
    layer drains them with ``pull_events()`` once the change is persisted.
    """

    title: str
    content: str = ""
    author_id: int | None = None
    editor_id: int | None = None
    id: int | None = None
    guide: bool = False
    created_at: datetime = field(default_factory=lifecycle.utcnow)
    updated_at: datetime = field(default_factory=lifecycle.utcnow)
    archived_at: datetime | None = None
    rotted_at: datetime | None = None
    rot_reporter_id: int | None = None
    last_notified_author_at: datetime | None = None
    tags: list[Tag] = field(default_factory=list)
    tags_count: int = 0
    endorsements_count: int = 0
    subscriptions_count: int = 0
    visits: int = 0
    _pending: list[tuple[TransitionKind, datetime]] = field(
        default_factory=list, repr=False, compare=False
    )

    def __str__(self) -> str:
        return self.title

    # ── Construction & validation ───────────────────────────────────

    @classmethod
    def create(
        cls,
        title: str,
        content: str = "",
        *,
        author_id: int | None = None,
        guide: bool = False,
        now: datetime | None = None,
    ) -> "Article":
        """Build a new, validated article whose first event is ``created``."""
        now = now or lifecycle.utcnow()
        article = cls(
            title=title,
            content=content,
            author_id=author_id,
            guide=guide,
            created_at=now,
            updated_at=now,
        )
        article.validate()
        article._record(TransitionKind.CREATED, now)
        return article

    def validate(self) -> None:
        if not self.title or not self.title.strip():
            raise ValidationError("title", "can't be blank")

    # ── Transitions ─────────────────────────────────────────────────

    def edit(
        self,
        editor_id: int | None,
        *,
        title: str | None = None,
        content: str | None = None,
        guide: bool | None = None,
        now: datetime | None = None,
    ) -> None:
        """Apply a content edit on behalf of ``editor_id``."""
        now = now or lifecycle.utcnow()
        if title is not None:
            self.title = title
        if content is not None:
            self.content = content
        if guide is not None:
            self.guide = guide
        self.validate()
        if editor_id is not None:
            self.editor_id = editor_id
        self._touch(now)
        self._record(TransitionKind.UPDATED, now)

    def archive(self, now: datetime | None = None) -> None:
        """Re-archiving overwrites the timestamp."""
        now = now or lifecycle.utcnow()
        self.archived_at = now
        self._record(TransitionKind.ARCHIVED, now)

    def unarchive(self, now: datetime | None = None) -> None:
        self.archived_at = None
        self._record(TransitionKind.UPDATED, now or lifecycle.utcnow())

    def rot(self, reporter_id: int, now: datetime | None = None) -> None:
        """Flag the article as needing an update; reporter and timestamp travel together."""
        now = now or lifecycle.utcnow()
        self.rotted_at = now
        self.rot_reporter_id = reporter_id
        self._record(TransitionKind.ROTTEN, now)

    def refresh(self, now: datetime | None = None) -> None:
        """Clear the rotten flag and count as an update; rot_reporter_id is left as is."""
        now = now or lifecycle.utcnow()
        self.rotted_at = None
        self._touch(now)
        self._record(TransitionKind.UPDATED, now)

    def mark_destroyed(self, now: datetime | None = None) -> None:
        self._record(TransitionKind.DESTROYED, now or lifecycle.utcnow())

    def record_visit(self) -> None:
        self.visits += 1

    def assign_tags(self, tags: list[Tag]) -> None:
        """Replace the tag set; the cached count always equals its size."""
        self.tags = list(tags)
        self.tags_count = len(self.tags)

    def mark_author_notified(self, now: datetime | None = None) -> None:
        self.last_notified_author_at = now or lifecycle.utcnow()

    # ── Derived state ───────────────────────────────────────────────

    @property
    def archived(self) -> bool:
        return lifecycle.is_archived(self.archived_at)

    @property
    def rotten(self) -> bool:
        return lifecycle.is_rotten(self.rotted_at)

    def is_fresh(self, now: datetime | None = None) -> bool:
        return lifecycle.is_fresh(
            now or lifecycle.utcnow(), self.updated_at, self.archived_at, self.rotted_at
        )

    def is_stale(self, now: datetime | None = None) -> bool:
        return lifecycle.is_stale(now or lifecycle.utcnow(), self.updated_at)

    def is_author(self, user_id: int | None) -> bool:
        return user_id is not None and self.author_id == user_id

    def is_edited(self) -> bool:
        return self.editor_id is not None

    def has_different_editor(self) -> bool:
        return self.author_id != self.editor_id

    def never_notified_author(self) -> bool:
        return self.last_notified_author_at is None

    def recently_notified_author(self, now: datetime | None = None) -> bool:
        return lifecycle.recently_notified(
            now or lifecycle.utcnow(), self.last_notified_author_at
        )

    def ready_to_notify_author_of_staleness(self, now: datetime | None = None) -> bool:
        return lifecycle.ready_to_notify(
            now or lifecycle.utcnow(), self.last_notified_author_at
        )

    def state_descriptions(self, now: datetime | None = None) -> list[str]:
        """Human-readable notes for every lifecycle state the article is in."""
        now = now or lifecycle.utcnow()
        notes: list[str] = []
        if self.is_fresh(now):
            notes.append(lifecycle.FRESHNESS)
        if self.is_stale(now):
            notes.append(lifecycle.STALENESS)
        if self.rotten:
            notes.append(lifecycle.ROTTENNESS)
        if self.endorsements_count and self.subscriptions_count and self.visits:
            notes.append(lifecycle.POPULARITY)
        if self.archived:
            notes.append(lifecycle.ARCHIVAL)
        return notes

    def contributors(self, excluding: int | None = None) -> list[int]:
        """Author and editor, deduplicated, minus ``excluding``.

        Used to avoid notifying someone about something they did themselves.
        """
        result: list[int] = []
        for user_id in (self.author_id, self.editor_id):
            if user_id is None or user_id == excluding or user_id in result:
                continue
            result.append(user_id)
        return result

    # ── Events ──────────────────────────────────────────────────────

    def pull_events(self) -> list[ArticleEvent]:
        """Drain pending transitions as events bound to the persisted identity."""
        if self.id is None:
            raise ValueError("Article must be persisted before its events are published")
        events = [
            ArticleEvent(
                kind=kind,
                article_id=self.id,
                title=self.title,
                editor_id=self.editor_id,
                occurred_at=occurred_at,
            )
            for kind, occurred_at in self._pending
        ]
        self._pending.clear()
        return events

    def _record(self, kind: TransitionKind, now: datetime) -> None:
        self._pending.append((kind, now))

    def _touch(self, now: datetime) -> None:
        # updated_at must move forward even when two writes share a clock tick
        if now <= self.updated_at:
            now = self.updated_at + timedelta(microseconds=1)
        self.updated_at = now
