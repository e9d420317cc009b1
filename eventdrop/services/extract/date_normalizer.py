"""Repair or flag the dates an extraction produced.

Pure functions only. Unreadable start dates are replaced by a placeholder a
week out; dates that read fine but lie in the past are kept as-is and flagged
with a capped confidence so the reviewer corrects them. The year is never
advanced automatically.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from eventdrop.domain.schemas.event import DEFAULT_TIMEZONE, ExtractionResult

UNPARSEABLE_START_OFFSET = timedelta(days=7)
UNPARSEABLE_CONFIDENCE = 0.2
PAST_DATE_CONFIDENCE_CAP = 0.4
UNPARSEABLE_EVIDENCE = "Could not parse date - please verify"


@dataclass(frozen=True)
class NormalizedDates:
    start_at: datetime
    end_at: datetime | None
    confidence: dict[str, float]
    evidence: dict[str, str]
    start_parsed: bool
    start_in_past: bool


def normalize_dates(
    start_raw: Any,
    end_raw: Any,
    *,
    confidence: dict[str, float],
    evidence: dict[str, str],
    now: datetime,
    timezone_name: str = DEFAULT_TIMEZONE,
) -> NormalizedDates:
    now = _aware(now)
    tz = resolve_timezone(timezone_name)
    confidence = dict(confidence)
    evidence = dict(evidence)

    start = parse_timestamp(start_raw, tz)
    start_parsed = start is not None
    start_in_past = False

    if start is None:
        start = now + UNPARSEABLE_START_OFFSET
        confidence["start_at"] = UNPARSEABLE_CONFIDENCE
        evidence["start_at"] = UNPARSEABLE_EVIDENCE
    elif _is_past(start, start_raw, now, tz):
        start_in_past = True
        for key in ("start_at", "overall"):
            confidence[key] = min(confidence.get(key, PAST_DATE_CONFIDENCE_CAP), PAST_DATE_CONFIDENCE_CAP)
        note = f"(date appears to be in the past: year {start.year} - please verify)"
        existing = evidence.get("start_at", "")
        evidence["start_at"] = f"{existing} {note}".strip()

    end = parse_timestamp(end_raw, tz)

    return NormalizedDates(
        start_at=start,
        end_at=end,
        confidence=confidence,
        evidence=evidence,
        start_parsed=start_parsed,
        start_in_past=start_in_past,
    )


def normalize_extraction(result: ExtractionResult, now: datetime) -> tuple[ExtractionResult, NormalizedDates]:
    dates = normalize_dates(
        result.start_at,
        result.end_at,
        confidence=result.confidence,
        evidence=result.evidence,
        now=now,
        timezone_name=result.timezone,
    )
    normalized = result.model_copy(
        update={
            "start_at": dates.start_at.isoformat(),
            "end_at": dates.end_at.isoformat() if dates.end_at else None,
            "confidence": dates.confidence,
            "evidence": dates.evidence,
        }
    )
    return normalized, dates


def parse_timestamp(value: Any, tz: ZoneInfo) -> datetime | None:
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)

    return parsed


def resolve_timezone(name: str | None) -> ZoneInfo:
    try:
        return ZoneInfo(name or DEFAULT_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        return ZoneInfo(DEFAULT_TIMEZONE)


def _aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _is_date_only(value: Any) -> bool:
    if not isinstance(value, str) or not value.strip():
        return False
    try:
        date.fromisoformat(value.strip())
    except ValueError:
        return False
    return True


def _is_past(start: datetime, start_raw: Any, now: datetime, tz: ZoneInfo) -> bool:
    # a bare date means the whole day, so only earlier calendar days count as past
    if _is_date_only(start_raw):
        return start.date() < now.astimezone(tz).date()
    return start < now
