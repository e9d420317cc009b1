from __future__ import annotations

import logging
from typing import Any

from eventdrop.db.models.event import Event
from eventdrop.db.repositories import ElevatedEventRepository
from eventdrop.domain.schemas.event import ExtractionResult
from eventdrop.services.extract.date_normalizer import NormalizedDates
from eventdrop.services.moderation.arbiter import ModerationOutcome

logger = logging.getLogger(__name__)


def extraction_fields(
    result: ExtractionResult,
    dates: NormalizedDates,
    moderation: ModerationOutcome | None = None,
) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "title": result.title,
        "start_at": dates.start_at,
        "end_at": dates.end_at,
        "timezone": result.timezone,
        "city": result.city,
        "venue": result.venue,
        "address": result.address,
        "description": result.description,
        "ticket_url": result.ticket_url,
        "tags": result.tags,
        "confidence_overall": dates.confidence.get("overall"),
        "confidence_json": dates.confidence,
        "evidence_json": dates.evidence,
        "age_restriction": result.age_restriction,
        "content_flags": result.content_flags,
    }
    if moderation is not None:
        fields["moderation_status"] = moderation.status
        fields["moderation_notes"] = moderation.notes
    return fields


def store_extraction(
    repo: ElevatedEventRepository,
    event: Event,
    result: ExtractionResult,
    dates: NormalizedDates,
    moderation: ModerationOutcome | None = None,
    extra: dict[str, Any] | None = None,
) -> Event:
    fields = extraction_fields(result, dates, moderation)
    if extra:
        fields.update(extra)
    repo.update_fields(event, fields)
    logger.info(
        "Stored extraction event_id=%s placeholder=%s past_date=%s moderation=%s",
        event.id,
        result.is_placeholder,
        dates.start_in_past,
        fields.get("moderation_status", event.moderation_status),
    )
    return event
