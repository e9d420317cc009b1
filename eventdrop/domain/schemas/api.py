from __future__ import annotations

from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from eventdrop.domain.schemas.event import ExtractionResult


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class SubmitPosterRequest(_CamelModel):
    image_base64: str | None = Field(default=None, alias="imageBase64")
    image_url: str | None = Field(default=None, alias="imageUrl")


class SubmitPosterResponse(_CamelModel):
    status: Literal["rejected", "accepted", "pending_review"]
    reason: str | None = None
    event_id: UUID | None = Field(default=None, alias="eventId")
    edit_token: str | None = Field(default=None, alias="editToken")
    message: str | None = None


class ReextractRequest(_CamelModel):
    event_id: UUID = Field(alias="eventId")
    image_url: str | None = Field(default=None, alias="imageUrl")
    source_url: str | None = Field(default=None, alias="sourceUrl")


class ReextractResponse(BaseModel):
    success: bool = True
    data: ExtractionResult


class TrackAnalyticsRequest(BaseModel):
    event_id: UUID
    type: Literal["view", "ticket_click"]


class TrackAnalyticsResponse(BaseModel):
    success: bool = True
    message: str | None = None


class AdminNotifyRequest(_CamelModel):
    event_id: UUID = Field(alias="eventId")
    event_title: str | None = Field(default=None, alias="eventTitle")
    moderation_reason: str | None = Field(default=None, alias="moderationReason")


class AdminNotifyResponse(BaseModel):
    success: bool = True
    notified: int


class PublishResponse(BaseModel):
    success: bool = True
    slug: str


class ModerationDecisionRequest(BaseModel):
    decision: Literal["approved", "rejected"]
    notes: str | None = None


class ModerationDecisionResponse(BaseModel):
    success: bool = True
    moderation_status: str
