from __future__ import annotations

import logging
import secrets
from urllib.parse import urlparse
from uuid import UUID

from sqlalchemy.orm import Session

from eventdrop.core.errors import Forbidden, NotFound, PublishBlocked
from eventdrop.db.models.event import MODERATION_APPROVED, MODERATION_REJECTED, STATUS_PUBLISHED, Event
from eventdrop.db.repositories import ElevatedEventRepository, ScopedEventRepository
from eventdrop.domain.schemas.submission import AuthenticatedSubmitter, SubmissionContext
from eventdrop.services.auth.ownership import ensure_owner
from eventdrop.services.drafts.slug import generate_slug

logger = logging.getLogger(__name__)

SLUG_ATTEMPTS = 5


def publish_draft(
    session: Session,
    event_id: UUID,
    submitter: SubmissionContext,
) -> str:
    """Publish a draft and return its slug.

    Publishing requires the core fields to be filled in and the draft to be
    approved by moderation; a pending or rejected draft stays private.
    """
    repo = ElevatedEventRepository(session)
    event = _authorize(session, repo, event_id, submitter)

    if event.status == STATUS_PUBLISHED and event.slug:
        return event.slug

    missing = missing_publish_fields(event)
    if missing:
        raise PublishBlocked(f"Missing or invalid fields: {', '.join(missing)}")
    if event.moderation_status == MODERATION_REJECTED:
        raise PublishBlocked("This event was rejected by moderation and cannot be published")
    if event.moderation_status != MODERATION_APPROVED:
        raise PublishBlocked("This event is awaiting moderation review")

    slug = event.slug or _unique_slug(repo, event.title)
    repo.update_fields(event, {"status": STATUS_PUBLISHED, "slug": slug})
    repo.commit()

    logger.info("Published event event_id=%s slug=%s via=%s", event.id, slug, submitter.kind)
    return slug


def missing_publish_fields(event: Event) -> list[str]:
    missing: list[str] = []
    if not (event.title or "").strip():
        missing.append("title")
    if event.start_at is None:
        missing.append("start_at")
    if not (event.city or "").strip():
        missing.append("city")
    if event.ticket_url and not is_valid_url(event.ticket_url):
        missing.append("ticket_url")
    return missing


def is_valid_url(value: str) -> bool:
    parsed = urlparse(value.strip())
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def _authorize(
    session: Session,
    repo: ElevatedEventRepository,
    event_id: UUID,
    submitter: SubmissionContext,
) -> Event:
    if isinstance(submitter, AuthenticatedSubmitter):
        ensure_owner(ScopedEventRepository(session, submitter.owner_id), event_id)
        event = repo.get(event_id)
        if event is None:
            raise NotFound()
        return event

    event = repo.get(event_id)
    if event is None:
        raise NotFound()
    if not event.edit_token or not secrets.compare_digest(event.edit_token.encode(), submitter.edit_token.encode()):
        raise Forbidden("Invalid edit token")
    return event


def _unique_slug(repo: ElevatedEventRepository, title: str) -> str:
    for _ in range(SLUG_ATTEMPTS):
        slug = generate_slug(title)
        if not repo.slug_exists(slug):
            return slug
    raise PublishBlocked("Could not assign a unique slug, please retry")
