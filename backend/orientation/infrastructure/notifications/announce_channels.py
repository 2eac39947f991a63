"""Announce channel adapters — a chat-room webhook and a log-only fallback.

The webhook posts a short Slack-compatible ``{"text": ...}`` message for every
article transition. Delivery failures surface as NotificationDeliveryError;
the dispatcher decides what to do with them.
"""

import logging

import httpx

from orientation.application.interfaces import AnnounceChannel
from orientation.domain.events import ArticleEvent, TransitionKind
from orientation.domain.exceptions import NotificationDeliveryError

logger = logging.getLogger(__name__)

_VERBS = {
    TransitionKind.CREATED: "created",
    TransitionKind.UPDATED: "updated",
    TransitionKind.ARCHIVED: "archived",
    TransitionKind.ROTTEN: "marked as rotten",
    TransitionKind.DESTROYED: "deleted",
}


def announcement_text(event: ArticleEvent) -> str:
    """Human-readable one-liner for an article transition."""
    verb = _VERBS[event.kind]
    text = f'Article "{event.title}" was {verb}'
    if event.editor_id is not None and event.kind is not TransitionKind.DESTROYED:
        text += f" by user {event.editor_id}"
    return text + "."


class WebhookAnnounceChannel(AnnounceChannel):
    """Posts announcements to an incoming-webhook URL (Slack, Mattermost, …)."""

    def __init__(
        self,
        webhook_url: str,
        *,
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._webhook_url = webhook_url
        self._timeout = timeout
        self._http_client = http_client

    @property
    def channel_name(self) -> str:
        return "webhook"

    async def _get_client(self) -> httpx.AsyncClient:
        """Return the injected client or create a new one."""
        if self._http_client is not None:
            return self._http_client
        return httpx.AsyncClient(timeout=self._timeout)

    async def announce(self, event: ArticleEvent) -> None:
        payload = {"text": announcement_text(event)}

        client = await self._get_client()
        should_close = self._http_client is None

        try:
            try:
                response = await client.post(self._webhook_url, json=payload)
            except httpx.HTTPError as exc:
                raise NotificationDeliveryError(self.channel_name, str(exc)) from exc

            if not response.is_success:
                raise NotificationDeliveryError(
                    self.channel_name,
                    response.text[:200] or response.reason_phrase,
                    status_code=response.status_code,
                )
            logger.debug("Announced %s for article %s", event.kind.value, event.article_id)
        finally:
            if should_close:
                await client.aclose()


class LoggingAnnounceChannel(AnnounceChannel):
    """Writes announcements to the log; used when no webhook is configured."""

    @property
    def channel_name(self) -> str:
        return "log"

    async def announce(self, event: ArticleEvent) -> None:
        logger.info("📣 %s", announcement_text(event))
