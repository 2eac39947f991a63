"""Lifecycle clock — pure, timestamp-driven article state classification.

Nothing here is cached or persisted: every predicate is evaluated against the
``now`` it is given, so an article can stop being fresh with no write at all.
"""

from datetime import datetime, time, timedelta, timezone

from dateutil.relativedelta import relativedelta

FRESHNESS_LIMIT = timedelta(days=7)
STALENESS_LIMIT = relativedelta(months=6)
NOTIFICATION_INTERVAL = timedelta(weeks=1)

FRESHNESS = "Updated in the last 7 days."
STALENESS = "Updated over 6 months ago."
ROTTENNESS = "Deemed in need of an update."
POPULARITY = "Endorsed, subscribed, & visited."
ARCHIVAL = "Outdated & ignored in searches."


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def freshness_cutoff(now: datetime) -> datetime:
    """Oldest ``updated_at`` that still counts as fresh."""
    return now - FRESHNESS_LIMIT


def staleness_cutoff(now: datetime) -> datetime:
    """``updated_at`` values strictly before this are stale."""
    return now - STALENESS_LIMIT


def is_archived(archived_at: datetime | None) -> bool:
    return archived_at is not None


def is_rotten(rotted_at: datetime | None) -> bool:
    return rotted_at is not None


def is_fresh(
    now: datetime,
    updated_at: datetime,
    archived_at: datetime | None,
    rotted_at: datetime | None,
) -> bool:
    """Fresh = not archived, not rotten, and updated within FRESHNESS_LIMIT."""
    if is_archived(archived_at) or is_rotten(rotted_at):
        return False
    return now - updated_at <= FRESHNESS_LIMIT


def is_stale(now: datetime, updated_at: datetime) -> bool:
    """Stale is a time-only condition; archived/rotten flags are ignored."""
    return updated_at < staleness_cutoff(now)


def start_of_day(moment: datetime) -> datetime:
    return datetime.combine(moment.date(), time.min, tzinfo=moment.tzinfo)


def recently_notified(now: datetime, last_notified_at: datetime | None) -> bool:
    """True if at most a week has passed since the start of the notified day."""
    if last_notified_at is None:
        return False
    return now - start_of_day(last_notified_at) <= NOTIFICATION_INTERVAL


def ready_to_notify(now: datetime, last_notified_at: datetime | None) -> bool:
    return last_notified_at is None or not recently_notified(now, last_notified_at)


def reminder_cutoff(now: datetime) -> datetime:
    """``last_notified_at`` values strictly before this are ready for another notice.

    Same rule as ``ready_to_notify``, expressed as a single bound so storage
    can filter on it: the week is measured from the start of the notified day.
    """
    boundary = now - NOTIFICATION_INTERVAL
    day = start_of_day(boundary)
    return day if day == boundary else day + timedelta(days=1)
