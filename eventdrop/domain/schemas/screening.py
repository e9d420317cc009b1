from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, field_validator

from eventdrop.domain.schemas.event import ModerationStatus

Safety = Literal["safe", "unsafe", "unclear"]


class ScreeningVerdict(BaseModel):
    is_poster: bool = True
    poster_score: int
    safety: Safety = "unclear"
    reason: str = ""

    @field_validator("poster_score", mode="before")
    @classmethod
    def _score(cls, value: Any) -> int:
        if isinstance(value, bool) or not isinstance(value, (int, float, str)):
            raise ValueError("poster_score must be a number")
        try:
            score = round(float(value))
        except (ValueError, OverflowError) as exc:
            raise ValueError(f"poster_score is not numeric: {value!r}") from exc
        return min(10, max(1, score))

    @field_validator("safety", mode="before")
    @classmethod
    def _safety(cls, value: Any) -> str:
        if isinstance(value, str) and value.strip().lower() in {"safe", "unsafe", "unclear"}:
            return value.strip().lower()
        return "unclear"

    @field_validator("reason", mode="before")
    @classmethod
    def _reason(cls, value: Any) -> str:
        return value.strip() if isinstance(value, str) else ""

    @classmethod
    def conservative(cls) -> "ScreeningVerdict":
        return cls(
            is_poster=True,
            poster_score=5,
            safety="unclear",
            reason="Could not determine content type",
        )


class ScreeningDecision(BaseModel):
    accepted: bool
    reason: str
    moderation_status: ModerationStatus | None = None
    moderation_notes: str | None = None
