"""Notification dispatcher — fans committed article transitions out to people.

Runs inside background jobs, never inside the request that made the change.
Every outbound call is isolated: a failing recipient (or a failing announce
channel) is logged and skipped, and the remaining recipients still get their
notice.
"""

import logging
from dataclasses import dataclass, field

from orientation.application.interfaces import (
    AnnounceChannel,
    NotificationSink,
    RelationshipRepository,
)
from orientation.domain.entities import Job, JobKind, Subscription, subscribers_to_update
from orientation.domain.events import ArticleEvent, TransitionKind

logger = logging.getLogger(__name__)


@dataclass
class DispatchReport:
    """Outcome of fanning out a single job."""

    kind: str
    article_id: int
    announced: bool = False
    notified: list[int] = field(default_factory=list)
    failed: list[int] = field(default_factory=list)


class NotificationDispatcher:
    """Announces transitions and pushes update notices to subscribers.

    The editor who made a change is never notified about it.
    """

    def __init__(
        self,
        announce_channel: AnnounceChannel,
        notification_sink: NotificationSink,
        subscriptions: RelationshipRepository,
    ):
        self._announce_channel = announce_channel
        self._sink = notification_sink
        self._subscriptions = subscriptions

    async def handle(self, job: Job) -> DispatchReport:
        """Route a job to the matching fan-out."""
        payload = job.payload
        if job.kind == JobKind.ARTICLE_CHANGED:
            return await self.dispatch(ArticleEvent.from_payload(payload))
        if job.kind == JobKind.ROTTEN_ARTICLE:
            return await self.notify_author_of_rot(
                article_id=int(payload["article_id"]),
                author_id=int(payload["author_id"]),
                reporter_id=payload.get("reporter_id"),
            )
        if job.kind == JobKind.STALE_ARTICLE:
            return await self.notify_author_of_staleness(
                article_id=int(payload["article_id"]),
                author_id=int(payload["author_id"]),
            )
        raise ValueError(f"Unknown job kind: {job.kind}")

    async def dispatch(self, event: ArticleEvent) -> DispatchReport:
        """Announce the transition, then update subscribers for saves."""
        report = DispatchReport(kind=event.kind.value, article_id=event.article_id)
        report.announced = await self._announce(event)

        if event.is_save:
            await self._update_subscribers(event, report)

        logger.info(
            "Dispatched %s for article %s — announced=%s notified=%d failed=%d",
            event.kind.value,
            event.article_id,
            report.announced,
            len(report.notified),
            len(report.failed),
        )
        return report

    async def subscribers_to_update(self, event: ArticleEvent) -> list[Subscription]:
        subscriptions = await self._subscriptions.list_for_article(event.article_id)
        return subscribers_to_update(subscriptions, event.editor_id)

    async def notify_author_of_rot(
        self, article_id: int, author_id: int, reporter_id: int | None
    ) -> DispatchReport:
        report = DispatchReport(kind=TransitionKind.ROTTEN.value, article_id=article_id)
        try:
            await self._sink.send_rotten_notice(author_id, article_id, reporter_id)
            report.notified.append(author_id)
        except Exception:
            logger.exception(
                "Rotten notice to author %s for article %s failed", author_id, article_id
            )
            report.failed.append(author_id)
        return report

    async def notify_author_of_staleness(self, article_id: int, author_id: int) -> DispatchReport:
        report = DispatchReport(kind="stale", article_id=article_id)
        try:
            await self._sink.send_stale_notice(author_id, article_id)
            report.notified.append(author_id)
        except Exception:
            logger.exception(
                "Stale notice to author %s for article %s failed", author_id, article_id
            )
            report.failed.append(author_id)
        return report

    # ── Internals ───────────────────────────────────────────────────

    async def _announce(self, event: ArticleEvent) -> bool:
        try:
            await self._announce_channel.announce(event)
        except Exception:
            logger.exception(
                "Announcing %s for article %s on %s failed",
                event.kind.value,
                event.article_id,
                self._announce_channel.channel_name,
            )
            return False
        return True

    async def _update_subscribers(self, event: ArticleEvent, report: DispatchReport) -> None:
        for subscription in await self.subscribers_to_update(event):
            try:
                await self._sink.send_update(subscription.user_id, event.article_id)
                report.notified.append(subscription.user_id)
            except Exception:
                logger.exception(
                    "Update notice to user %s for article %s failed",
                    subscription.user_id,
                    event.article_id,
                )
                report.failed.append(subscription.user_id)
