from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eventdrop.db.base import Base
from eventdrop.db.types import AwareDateTime

if TYPE_CHECKING:
    from eventdrop.db.models.event import Event

ANALYTICS_TYPES = ("view", "ticket_click")


class EventAnalytics(Base):
    __tablename__ = "event_analytics"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    event_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("events.id", ondelete="CASCADE"),
        index=True,
    )
    type: Mapped[str] = mapped_column(String(20))
    created_at: Mapped[datetime] = mapped_column(
        AwareDateTime(),
        default=lambda: datetime.now(tz=timezone.utc),
    )

    event: Mapped[Event] = relationship(back_populates="analytics")
