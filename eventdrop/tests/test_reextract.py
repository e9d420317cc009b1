import json
from datetime import datetime, timezone
from uuid import uuid4

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from eventdrop.core.auth import Caller
from eventdrop.core.errors import FetchFailed, Forbidden, ForbiddenHost, NotFound, Unauthenticated
from eventdrop.db.base import Base
from eventdrop.db.models.event import Event
from eventdrop.db.repositories import ScopedEventRepository
from eventdrop.services.auth.ownership import ensure_owner
from eventdrop.services.extract.reextract import reextract_event
from eventdrop.services.storage.poster_store import PosterStore

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def _make_session():
    engine = create_engine("sqlite:///:memory:", future=True)
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, future=True)()


class _FakeGateway:
    def __init__(self, reply: str) -> None:
        self.reply = reply
        self.calls: list = []

    def complete(self, content) -> str:
        self.calls.append(content)
        return self.reply


def _extraction(**fields) -> str:
    payload = {"title": "Flea Market", "start_at": "2026-05-02T09:00:00", "city": "Munich", "confidence": {"overall": 0.8}}
    payload.update(fields)
    return json.dumps(payload)


def _add_draft(session, **fields) -> Event:
    values = {"title": "Untitled Event", "start_at": NOW, "city": "", "moderation_status": "approved"}
    values.update(fields)
    event = Event(**values)
    session.add(event)
    session.commit()
    return event


def test_owner_reextracts_from_image_url(tmp_path) -> None:
    session = _make_session()
    owner = Caller(user_id=uuid4())
    event = _add_draft(session, owner_id=owner.user_id)
    gateway = _FakeGateway(_extraction())

    result = reextract_event(
        session, owner, gateway, PosterStore(tmp_path), event_id=event.id, now=NOW,
        image_url="https://cdn.example.com/flyer.jpg",
    )

    assert result.title == "Flea Market"
    assert event.title == "Flea Market"
    assert event.city == "Munich"
    assert gateway.calls[0][1]["image_url"]["url"] == "https://cdn.example.com/flyer.jpg"


def test_other_user_is_forbidden_and_nothing_is_written(tmp_path) -> None:
    session = _make_session()
    event = _add_draft(session, owner_id=uuid4())
    gateway = _FakeGateway(_extraction())

    with pytest.raises(Forbidden):
        reextract_event(
            session, Caller(user_id=uuid4()), gateway, PosterStore(tmp_path), event_id=event.id, now=NOW,
            image_url="https://cdn.example.com/flyer.jpg",
        )

    assert gateway.calls == []
    session.expire_all()
    assert session.get(Event, event.id).title == "Untitled Event"


def test_anonymous_caller_is_unauthenticated(tmp_path) -> None:
    session = _make_session()
    event = _add_draft(session, owner_id=uuid4())

    with pytest.raises(Unauthenticated):
        reextract_event(session, None, _FakeGateway(_extraction()), PosterStore(tmp_path), event_id=event.id, now=NOW)


def test_missing_event_is_not_found(tmp_path) -> None:
    session = _make_session()

    with pytest.raises(NotFound):
        reextract_event(
            session, Caller(user_id=uuid4()), _FakeGateway(_extraction()), PosterStore(tmp_path), event_id=uuid4(), now=NOW
        )


def test_stored_poster_is_sent_inline(tmp_path) -> None:
    session = _make_session()
    store = PosterStore(tmp_path, "http://localhost:8000")
    relative, public_url = store.save(PNG, extension="png")
    owner = Caller(user_id=uuid4())
    event = _add_draft(session, owner_id=owner.user_id, poster_path=relative, poster_public_url=public_url)
    gateway = _FakeGateway(_extraction())

    reextract_event(session, owner, gateway, store, event_id=event.id, now=NOW)

    assert gateway.calls[0][1]["image_url"]["url"].startswith("data:image/png;base64,")


def test_source_url_is_fetched_and_recorded(tmp_path) -> None:
    session = _make_session()
    owner = Caller(user_id=uuid4())
    event = _add_draft(session, owner_id=owner.user_id)
    gateway = _FakeGateway(_extraction())
    fetched: list = []

    def fetcher(url, timeout=10.0, max_bytes=0):
        fetched.append(url)
        return "<html><body><h1>Flea Market</h1><script>x()</script></body></html>", None, 200

    reextract_event(
        session, owner, gateway, PosterStore(tmp_path), event_id=event.id, now=NOW,
        source_url="https://events.example.com/flea", fetcher=fetcher,
    )

    assert fetched == ["https://events.example.com/flea"]
    assert gateway.calls[0].endswith("Flea Market")
    assert event.source_url == "https://events.example.com/flea"


def test_source_url_fetch_failure_raises(tmp_path) -> None:
    session = _make_session()
    owner = Caller(user_id=uuid4())
    event = _add_draft(session, owner_id=owner.user_id)

    def fetcher(url, timeout=10.0, max_bytes=0):
        return None, "404", 404

    with pytest.raises(FetchFailed):
        reextract_event(
            session, owner, _FakeGateway(_extraction()), PosterStore(tmp_path), event_id=event.id, now=NOW,
            source_url="https://events.example.com/gone", fetcher=fetcher,
        )


def test_internal_source_url_is_refused(tmp_path) -> None:
    session = _make_session()
    owner = Caller(user_id=uuid4())
    event = _add_draft(session, owner_id=owner.user_id)

    with pytest.raises(ForbiddenHost):
        reextract_event(
            session, owner, _FakeGateway(_extraction()), PosterStore(tmp_path), event_id=event.id, now=NOW,
            source_url="http://127.0.0.1:5432/",
        )


def test_warning_raises_approved_draft_to_pending(tmp_path) -> None:
    session = _make_session()
    owner = Caller(user_id=uuid4())
    event = _add_draft(session, owner_id=owner.user_id)
    alerts: list = []

    reextract_event(
        session, owner, _FakeGateway(_extraction(moderation_warning="Sells weapons")), PosterStore(tmp_path),
        event_id=event.id, now=NOW, image_url="https://cdn.example.com/flyer.jpg", dispatch_alert=alerts.append,
    )

    assert event.moderation_status == "pending"
    assert event.moderation_notes == "Sells weapons"
    assert len(alerts) == 1


def test_rejected_draft_stays_rejected(tmp_path) -> None:
    session = _make_session()
    owner = Caller(user_id=uuid4())
    event = _add_draft(session, owner_id=owner.user_id, moderation_status="rejected")

    reextract_event(
        session, owner, _FakeGateway(_extraction()), PosterStore(tmp_path), event_id=event.id, now=NOW,
        image_url="https://cdn.example.com/flyer.jpg",
    )

    assert event.moderation_status == "rejected"


def test_ensure_owner_distinguishes_missing_from_foreign() -> None:
    session = _make_session()
    owner_id = uuid4()
    event = _add_draft(session, owner_id=owner_id)
    anonymous = _add_draft(session, owner_id=None)

    assert ensure_owner(ScopedEventRepository(session, owner_id), event.id).owner_id == owner_id
    with pytest.raises(NotFound):
        ensure_owner(ScopedEventRepository(session, owner_id), uuid4())
    with pytest.raises(Forbidden):
        ensure_owner(ScopedEventRepository(session, uuid4()), event.id)
    with pytest.raises(Forbidden):
        ensure_owner(ScopedEventRepository(session, owner_id), anonymous.id)
    with pytest.raises(Unauthenticated):
        ensure_owner(ScopedEventRepository(session, None), event.id)


def test_ownership_lookup_needs_a_caller() -> None:
    session = _make_session()
    owner_id = uuid4()
    event = _add_draft(session, owner_id=owner_id)

    assert ScopedEventRepository(session, None).ownership_of(event.id) is None
    ownership = ScopedEventRepository(session, owner_id).ownership_of(event.id)
    assert ownership is not None
    assert ownership.owner_id == owner_id

    foreign = ScopedEventRepository(session, uuid4()).ownership_of(event.id)
    assert foreign is not None
    assert foreign.owner_id == owner_id
