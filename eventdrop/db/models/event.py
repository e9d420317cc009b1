from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

from sqlalchemy import JSON, Float, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eventdrop.db.base import Base
from eventdrop.db.types import AwareDateTime

if TYPE_CHECKING:
    from eventdrop.db.models.event_analytics import EventAnalytics

STATUS_DRAFT = "draft"
STATUS_PUBLISHED = "published"

MODERATION_PENDING = "pending"
MODERATION_APPROVED = "approved"
MODERATION_REJECTED = "rejected"

SHORT_TEXT_LENGTH = 255
ADDRESS_LENGTH = 500
URL_LENGTH = 1000
TIMEZONE_LENGTH = 64


class Event(Base):
    __tablename__ = "events"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    owner_id: Mapped[UUID | None] = mapped_column(Uuid(as_uuid=True), nullable=True, index=True)
    edit_token: Mapped[str | None] = mapped_column(String(64), nullable=True, unique=True)
    status: Mapped[str] = mapped_column(String(20), default=STATUS_DRAFT)
    moderation_status: Mapped[str] = mapped_column(String(20), default=MODERATION_PENDING)
    moderation_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    title: Mapped[str] = mapped_column(String(SHORT_TEXT_LENGTH), default="Untitled Event")
    start_at: Mapped[datetime] = mapped_column(AwareDateTime())
    end_at: Mapped[datetime | None] = mapped_column(AwareDateTime(), nullable=True)
    timezone: Mapped[str] = mapped_column(String(TIMEZONE_LENGTH), default="Europe/Berlin")
    city: Mapped[str] = mapped_column(String(SHORT_TEXT_LENGTH), default="")
    venue: Mapped[str | None] = mapped_column(String(SHORT_TEXT_LENGTH), nullable=True)
    address: Mapped[str | None] = mapped_column(String(ADDRESS_LENGTH), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    ticket_url: Mapped[str | None] = mapped_column(String(URL_LENGTH), nullable=True)
    tags: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)

    poster_path: Mapped[str | None] = mapped_column(String(500), nullable=True)
    poster_public_url: Mapped[str | None] = mapped_column(String(URL_LENGTH), nullable=True)
    source_url: Mapped[str | None] = mapped_column(String(URL_LENGTH), nullable=True)

    confidence_overall: Mapped[float | None] = mapped_column(Float, nullable=True)
    confidence_json: Mapped[dict[str, float] | None] = mapped_column(JSON, nullable=True)
    evidence_json: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    age_restriction: Mapped[str] = mapped_column(String(10), default="all_ages")
    content_flags: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)

    slug: Mapped[str | None] = mapped_column(String(100), nullable=True, unique=True)
    created_at: Mapped[datetime] = mapped_column(
        AwareDateTime(),
        default=lambda: datetime.now(tz=timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        AwareDateTime(),
        default=lambda: datetime.now(tz=timezone.utc),
        onupdate=lambda: datetime.now(tz=timezone.utc),
    )

    analytics: Mapped[list[EventAnalytics]] = relationship(
        back_populates="event",
        cascade="all, delete-orphan",
    )

    @property
    def is_published(self) -> bool:
        return self.status == STATUS_PUBLISHED
