"""Per-user notification sinks — a JSON webhook and a log-only fallback."""

import logging
from typing import Any

import httpx

from orientation.application.interfaces import NotificationSink
from orientation.domain.exceptions import NotificationDeliveryError

logger = logging.getLogger(__name__)


class WebhookNotificationSink(NotificationSink):
    """POSTs one JSON notice per recipient to a delivery service.

    Body: ``{"type": "update" | "rotten" | "stale", "user_id": …, "article_id": …}``
    plus ``reporter_id`` for rotten notices. Any non-2xx status is a failed
    delivery for that recipient only.
    """

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

    async def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is not None:
            return self._http_client
        return httpx.AsyncClient(timeout=self._timeout)

    async def _deliver(self, notice: dict[str, Any]) -> None:
        client = await self._get_client()
        should_close = self._http_client is None

        try:
            try:
                response = await client.post(self._webhook_url, json=notice)
            except httpx.HTTPError as exc:
                raise NotificationDeliveryError("notifications", str(exc)) from exc

            if not response.is_success:
                raise NotificationDeliveryError(
                    "notifications",
                    response.text[:200] or response.reason_phrase,
                    status_code=response.status_code,
                )
        finally:
            if should_close:
                await client.aclose()

    async def send_update(self, user_id: int, article_id: int) -> None:
        await self._deliver({"type": "update", "user_id": user_id, "article_id": article_id})

    async def send_rotten_notice(
        self, author_id: int, article_id: int, reporter_id: int | None
    ) -> None:
        await self._deliver(
            {
                "type": "rotten",
                "user_id": author_id,
                "article_id": article_id,
                "reporter_id": reporter_id,
            }
        )

    async def send_stale_notice(self, author_id: int, article_id: int) -> None:
        await self._deliver({"type": "stale", "user_id": author_id, "article_id": article_id})


class LoggingNotificationSink(NotificationSink):
    """Logs each notice instead of delivering it."""

    async def send_update(self, user_id: int, article_id: int) -> None:
        logger.info("🔔 update → user %s (article %s)", user_id, article_id)

    async def send_rotten_notice(
        self, author_id: int, article_id: int, reporter_id: int | None
    ) -> None:
        logger.info(
            "🍂 rotten → author %s (article %s, reported by %s)", author_id, article_id, reporter_id
        )

    async def send_stale_notice(self, author_id: int, article_id: int) -> None:
        logger.info("⏳ stale → author %s (article %s)", author_id, article_id)
