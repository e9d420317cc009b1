
"""Two narrow views over the events table.

``ScopedEventRepository`` is the only read allowed before authorization. It
exposes nothing but the ownership of an event id (no event content), and only
when there is a caller to compare it with; a foreign owner is reported as-is
so the guard can answer Forbidden rather than NotFound.
``ElevatedEventRepository`` reads and writes full rows, bypassing per-caller
checks, and must only be used once authorization has been decided.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from eventdrop.db.models.event import Event
from eventdrop.db.models.event_analytics import EventAnalytics


@dataclass(frozen=True)
class EventOwnership:
    event_id: UUID
    owner_id: UUID | None


class ScopedEventRepository:
    def __init__(self, session: Session, caller_id: UUID | None) -> None:
        self._session = session
        self._caller_id = caller_id

    @property
    def caller_id(self) -> UUID | None:
        return self._caller_id

    def ownership_of(self, event_id: UUID) -> EventOwnership | None:
        if self._caller_id is None:
            return None
        row = self._session.execute(
            select(Event.id, Event.owner_id).where(Event.id == event_id)
        ).first()
        if row is None:
            return None
        return EventOwnership(event_id=row.id, owner_id=row.owner_id)


class ElevatedEventRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, event_id: UUID) -> Event | None:
        return self._session.get(Event, event_id)

    def create_draft(self, **fields: Any) -> Event:
        event = Event(**fields)
        self._session.add(event)
        self._session.flush()
        return event

    def update_fields(self, event: Event, fields: dict[str, Any]) -> Event:
        for name, value in fields.items():
            setattr(event, name, value)
        self._session.add(event)
        self._session.flush()
        return event

    def slug_exists(self, slug: str) -> bool:
        return self._session.scalar(select(Event.id).where(Event.slug == slug)) is not None

    def record_analytics(self, event_id: UUID, kind: str, created_at: datetime) -> EventAnalytics:
        row = EventAnalytics(event_id=event_id, type=kind, created_at=created_at)
        self._session.add(row)
        self._session.flush()
        return row

    def commit(self) -> None:
        self._session.commit()
