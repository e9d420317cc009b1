from __future__ import annotations

import logging
from datetime import datetime, timedelta

from pydantic import ValidationError

from eventdrop.core.errors import UpstreamUnavailable
from eventdrop.domain.schemas.event import DEFAULT_TIMEZONE, DEFAULT_TITLE, ExtractionResult
from eventdrop.services.llm.client import ModelGateway, image_part
from eventdrop.services.llm.parse import Parsed, parse_model_json

logger = logging.getLogger(__name__)

PLACEHOLDER_CONFIDENCE = 0.3
PLACEHOLDER_START_OFFSET = timedelta(days=7)
EXPECTED_KEYS = {"title", "start_at", "city", "venue", "description"}

SCHEMA = """{
  "title": "event title",
  "start_at": "ISO datetime string",
  "end_at": "ISO datetime string or null",
  "timezone": "Europe/Berlin",
  "city": "city name",
  "venue": "venue name or null",
  "address": "full address or null",
  "description": "event description or null",
  "ticket_url": "ticket URL or null",
  "tags": ["tag1", "tag2"] or null,
  "confidence": { "overall": 0.0-1.0, "title": 0.0-1.0, "start_at": 0.0-1.0, "city": 0.0-1.0, "venue": 0.0-1.0, "ticket_url": 0.0-1.0, "description": 0.0-1.0 },
  "evidence": { "fieldName": "exact text from the source that supports this field" },
  "age_restriction": "all_ages" | "16+" | "18+" | "21+",
  "content_flags": ["nightclub", "alcohol", "adult", "cannabis", "gambling", "tobacco"] or [],
  "moderation_warning": "string if illegal/harmful content detected, otherwise null"
}"""


def build_prompt(current_year: int, from_page: bool = False) -> str:
    subject = "this webpage content" if from_page else "this poster image"
    return (
        f"Extract event details from {subject}. Return ONLY valid JSON matching this schema:\n"
        f"{SCHEMA}\n\n"
        f"IMPORTANT: The current year is {current_year}. If no year is visible, assume {current_year}. "
        "Do not move dates into the future yourself; report the year you actually see. "
        "Always use Europe/Berlin timezone unless clearly indicated otherwise. "
        "If you can't determine a field, use null and a low confidence."
    )


def extract_event_fields(
    gateway: ModelGateway | None,
    *,
    now: datetime,
    image_url: str | None = None,
    page_text: str | None = None,
) -> ExtractionResult:
    """Read event fields from a poster image or pre-fetched page text.

    Always returns a complete record. Anything that prevents a usable model
    answer produces the placeholder, which the submitter verifies by hand.
    """
    if gateway is None:
        return placeholder_result(now, reason="model gateway not configured")

    if image_url:
        content = [{"type": "text", "text": build_prompt(now.year)}, image_part(image_url)]
    elif page_text:
        content = f"{build_prompt(now.year, from_page=True)}\n\nPage content:\n{page_text}"
    else:
        return placeholder_result(now, reason="no source to extract from")

    try:
        reply = gateway.complete(content)
    except UpstreamUnavailable as exc:
        return placeholder_result(now, reason=f"gateway error: {exc.message}")
    except Exception as exc:  # noqa: BLE001
        return placeholder_result(now, reason=f"unexpected gateway failure: {exc!r}")

    parsed = parse_model_json(reply)
    if not isinstance(parsed, Parsed):
        return placeholder_result(now, reason=parsed.reason)
    if not EXPECTED_KEYS & parsed.payload.keys():
        return placeholder_result(now, reason="reply has none of the expected fields")

    try:
        result = ExtractionResult.model_validate(parsed.payload)
    except ValidationError as exc:
        return placeholder_result(now, reason=f"invalid fields ({exc.error_count()} errors)")

    logger.info(
        "Extraction parsed title=%s start_at=%s overall=%s warning=%s",
        result.title,
        result.start_at,
        result.overall_confidence,
        bool(result.moderation_warning),
    )
    return result


def placeholder_result(now: datetime, reason: str) -> ExtractionResult:
    logger.warning("Using placeholder extraction reason=%s", reason)
    fields = ("overall", "title", "start_at", "city", "venue", "ticket_url", "description")
    return ExtractionResult(
        title=DEFAULT_TITLE,
        start_at=(now + PLACEHOLDER_START_OFFSET).isoformat(),
        end_at=None,
        timezone=DEFAULT_TIMEZONE,
        city="",
        description="Event details could not be extracted automatically. Please verify and edit.",
        confidence={name: PLACEHOLDER_CONFIDENCE for name in fields},
        evidence={
            "title": "Placeholder - please update",
            "start_at": "Placeholder date - please verify",
            "city": "Could not extract city - please verify",
        },
        is_placeholder=True,
    )
