"""Notification infrastructure — announce channels and per-user sinks."""

from .announce_channels import LoggingAnnounceChannel, WebhookAnnounceChannel, announcement_text
from .notification_sinks import LoggingNotificationSink, WebhookNotificationSink

__all__ = [
    "LoggingAnnounceChannel",
    "LoggingNotificationSink",
    "WebhookAnnounceChannel",
    "WebhookNotificationSink",
    "announcement_text",
]
