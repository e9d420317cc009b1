from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from eventdrop.db.models.event import ADDRESS_LENGTH, SHORT_TEXT_LENGTH, TIMEZONE_LENGTH, URL_LENGTH

AgeRestriction = Literal["all_ages", "16+", "18+", "21+"]
ModerationStatus = Literal["pending", "approved", "rejected"]

DEFAULT_TITLE = "Untitled Event"
DEFAULT_TIMEZONE = "Europe/Berlin"

_AGE_ALIASES = {
    "all_ages": "all_ages",
    "all ages": "all_ages",
    "all-ages": "all_ages",
    "16+": "16+",
    "18+": "18+",
    "21+": "21+",
}
_NULL_STRINGS = {"", "null", "none", "n/a"}


class ExtractionResult(BaseModel):
    """Candidate event fields read from a poster or event page.

    Validators are lenient: whatever the model returns is coerced into the
    nearest valid value instead of failing the whole record.
    """

    title: str = DEFAULT_TITLE
    start_at: str | None = None
    end_at: str | None = None
    timezone: str = DEFAULT_TIMEZONE
    city: str = ""
    venue: str | None = None
    address: str | None = None
    description: str | None = None
    ticket_url: str | None = None
    tags: list[str] | None = None
    confidence: dict[str, float] = Field(default_factory=dict)
    evidence: dict[str, str] = Field(default_factory=dict)
    age_restriction: AgeRestriction = "all_ages"
    content_flags: list[str] = Field(default_factory=list)
    moderation_warning: str | None = None
    is_placeholder: bool = False

    @field_validator("title", mode="before")
    @classmethod
    def _title(cls, value: Any) -> str:
        return _bounded(_clean_str(value), SHORT_TEXT_LENGTH) or DEFAULT_TITLE

    @field_validator("timezone", mode="before")
    @classmethod
    def _timezone(cls, value: Any) -> str:
        name = _clean_str(value)
        if not name or len(name) > TIMEZONE_LENGTH:
            return DEFAULT_TIMEZONE
        return name

    @field_validator("city", mode="before")
    @classmethod
    def _city(cls, value: Any) -> str:
        return _bounded(_clean_str(value), SHORT_TEXT_LENGTH) or ""

    @field_validator("venue", mode="before")
    @classmethod
    def _venue(cls, value: Any) -> str | None:
        return _bounded(_clean_str(value), SHORT_TEXT_LENGTH)

    @field_validator("address", mode="before")
    @classmethod
    def _address(cls, value: Any) -> str | None:
        return _bounded(_clean_str(value), ADDRESS_LENGTH)

    @field_validator("ticket_url", mode="before")
    @classmethod
    def _ticket_url(cls, value: Any) -> str | None:
        url = _clean_str(value)
        # over-long URLs are dropped, never truncated
        if url and len(url) > URL_LENGTH:
            return None
        return url

    @field_validator("start_at", "end_at", "description", "moderation_warning", mode="before")
    @classmethod
    def _optional_str(cls, value: Any) -> str | None:
        return _clean_str(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _tags(cls, value: Any) -> list[str] | None:
        if not isinstance(value, list):
            return None
        tags = [tag for tag in (_clean_str(item) for item in value) if tag]
        return tags or None

    @field_validator("confidence", mode="before")
    @classmethod
    def _confidence(cls, value: Any) -> dict[str, float]:
        if not isinstance(value, dict):
            return {}
        cleaned: dict[str, float] = {}
        for key, raw in value.items():
            score = _as_score(raw)
            if score is not None:
                cleaned[str(key)] = score
        return cleaned

    @field_validator("evidence", mode="before")
    @classmethod
    def _evidence(cls, value: Any) -> dict[str, str]:
        if not isinstance(value, dict):
            return {}
        return {str(key): str(raw).strip() for key, raw in value.items() if raw is not None and str(raw).strip()}

    @field_validator("age_restriction", mode="before")
    @classmethod
    def _age_restriction(cls, value: Any) -> str:
        if not isinstance(value, str):
            return "all_ages"
        return _AGE_ALIASES.get(value.strip().lower(), "all_ages")

    @field_validator("content_flags", mode="before")
    @classmethod
    def _content_flags(cls, value: Any) -> list[str]:
        if not isinstance(value, list):
            return []
        flags: list[str] = []
        for item in value:
            flag = _clean_str(item)
            if flag and flag.lower() not in flags:
                flags.append(flag.lower())
        return flags

    @property
    def overall_confidence(self) -> float | None:
        return self.confidence.get("overall")


def _clean_str(value: Any) -> str | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        value = str(value)
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    if stripped.lower() in _NULL_STRINGS:
        return None
    return stripped


def _as_score(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            return None
    if not isinstance(value, (int, float)):
        return None
    if value != value:  # NaN
        return None
    return min(1.0, max(0.0, float(value)))


def _bounded(value: str | None, limit: int) -> str | None:
    if value is None or len(value) <= limit:
        return value
    return value[:limit].rstrip()
