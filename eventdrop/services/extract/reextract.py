from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from uuid import UUID

from sqlalchemy.orm import Session

from eventdrop.config import settings
from eventdrop.core.auth import Caller
from eventdrop.core.errors import FetchFailed, NotFound
from eventdrop.core.urls import validate_external_url
from eventdrop.db.models.event import Event
from eventdrop.db.repositories import ElevatedEventRepository, ScopedEventRepository
from eventdrop.domain.schemas.event import ExtractionResult
from eventdrop.services.auth.ownership import ensure_owner
from eventdrop.services.extract.date_normalizer import normalize_extraction
from eventdrop.services.extract.llm_event_extractor import extract_event_fields
from eventdrop.services.extract.store_extracted_events import store_extraction
from eventdrop.services.fetch.http_fetcher import fetch_url_text, html_to_text
from eventdrop.services.llm.client import ModelGateway, image_data_url
from eventdrop.services.moderation.arbiter import arbitrate
from eventdrop.services.notify.admin_notifier import AdminAlert
from eventdrop.services.storage.poster_store import PosterStore, sniff_image_type

logger = logging.getLogger(__name__)

Fetcher = Callable[..., tuple[str | None, str | None, int | None]]


def reextract_event(
    session: Session,
    caller: Caller | None,
    gateway: ModelGateway | None,
    store: PosterStore,
    *,
    event_id: UUID,
    now: datetime,
    image_url: str | None = None,
    source_url: str | None = None,
    fetcher: Fetcher = fetch_url_text,
    dispatch_alert: Callable[[AdminAlert], None] | None = None,
) -> ExtractionResult:
    """Re-run extraction on a draft owned by ``caller`` and persist the result."""
    scoped = ScopedEventRepository(session, caller.user_id if caller else None)
    ensure_owner(scoped, event_id)

    repo = ElevatedEventRepository(session)
    event = repo.get(event_id)
    if event is None:
        raise NotFound()

    model_image: str | None = None
    page_text: str | None = None
    used_source_url: str | None = None
    if gateway is not None:
        model_image, page_text, used_source_url = _resolve_source(
            event, store, image_url=image_url, source_url=source_url, fetcher=fetcher
        )

    result = extract_event_fields(gateway, now=now, image_url=model_image, page_text=page_text)
    normalized, dates = normalize_extraction(result, now)
    moderation = arbitrate(
        event.moderation_status,
        event.moderation_status,
        notes=event.moderation_notes,
        moderation_warning=normalized.moderation_warning,
    )

    extra = {"source_url": used_source_url} if used_source_url else None
    store_extraction(repo, event, normalized, dates, moderation, extra=extra)
    repo.commit()

    if moderation.notify and dispatch_alert is not None:
        dispatch_alert(AdminAlert(event_id=event.id, title=normalized.title, reason=moderation.notes))

    return normalized


def _resolve_source(
    event: Event,
    store: PosterStore,
    *,
    image_url: str | None,
    source_url: str | None,
    fetcher: Fetcher,
) -> tuple[str | None, str | None, str | None]:
    if image_url:
        return _model_image_url(event, store, image_url), None, None
    if source_url:
        return None, _fetch_page_text(source_url, fetcher), validate_external_url(source_url)

    if event.poster_path or event.poster_public_url:
        return _model_image_url(event, store, event.poster_public_url or ""), None, None
    if event.source_url:
        return None, _fetch_page_text(event.source_url, fetcher), None
    return None, None, None


def _model_image_url(event: Event, store: PosterStore, image_url: str) -> str:
    # posters we stored ourselves go to the model inline, not by URL
    if event.poster_path and (not image_url or image_url == event.poster_public_url):
        data = store.load(event.poster_path)
        kind = sniff_image_type(data)
        return image_data_url(data, kind[0] if kind else "image/jpeg")
    return validate_external_url(image_url)


def _fetch_page_text(url: str, fetcher: Fetcher) -> str:
    validated = validate_external_url(url)
    text, error, status = fetcher(validated, settings.FETCH_TIMEOUT_S, settings.FETCH_MAX_BYTES)
    if error or not text:
        logger.warning("Failed to fetch event page url=%s status=%s error=%s", validated, status, error)
        raise FetchFailed()
    return html_to_text(text)
