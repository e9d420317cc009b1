from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from sqlalchemy.orm import Session

from eventdrop.core.errors import InvalidSubmission, NotFound, NotPublishable
from eventdrop.db.models.event_analytics import ANALYTICS_TYPES
from eventdrop.db.repositories import ElevatedEventRepository
from eventdrop.services.analytics.rate_limiter import AnalyticsKey, RecencyLimiter

logger = logging.getLogger(__name__)

ALREADY_TRACKED_MESSAGE = "Already tracked recently"


@dataclass(frozen=True)
class TrackResult:
    recorded: bool
    message: str | None = None


def track_event(
    session: Session,
    limiter: RecencyLimiter,
    *,
    event_id: UUID,
    kind: str,
    source: str,
    now: datetime,
) -> TrackResult:
    if kind not in ANALYTICS_TYPES:
        raise InvalidSubmission("Invalid type")

    key = AnalyticsKey(source=source or "unknown", event_id=event_id, kind=kind)
    if limiter.seen_recently(key):
        logger.info("Rate limited analytics source=%s event_id=%s kind=%s", key.source, event_id, kind)
        return TrackResult(recorded=False, message=ALREADY_TRACKED_MESSAGE)

    repo = ElevatedEventRepository(session)
    event = repo.get(event_id)
    if event is None:
        raise NotFound()
    if not event.is_published:
        raise NotPublishable()

    repo.record_analytics(event_id, kind, created_at=now)
    repo.commit()
    limiter.mark(key)

    logger.info("Analytics tracked kind=%s event_id=%s", kind, event_id)
    return TrackResult(recorded=True)


def client_source(forwarded_for: str | None, client_host: str | None) -> str:
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first
    return client_host or "unknown"
