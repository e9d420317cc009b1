"""Anonymous poster submission.

Stages run strictly in order: screen, create the draft, extract, normalize
dates, arbitrate moderation, persist, alert reviewers. Screening may reject
the submission outright, in which case nothing is stored.
"""

from __future__ import annotations

import base64
import binascii
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from eventdrop.core.errors import InvalidSubmission, UpstreamUnavailable
from eventdrop.core.urls import validate_external_url
from eventdrop.db.models.event import MODERATION_PENDING, STATUS_DRAFT
from eventdrop.db.repositories import ElevatedEventRepository
from eventdrop.domain.schemas.event import DEFAULT_TIMEZONE, DEFAULT_TITLE
from eventdrop.domain.schemas.submission import AnonymousSubmitter
from eventdrop.services.extract.date_normalizer import normalize_extraction
from eventdrop.services.extract.llm_event_extractor import extract_event_fields
from eventdrop.services.extract.store_extracted_events import store_extraction
from eventdrop.services.llm.client import ModelGateway, image_data_url
from eventdrop.services.moderation.arbiter import ModerationOutcome, arbitrate
from eventdrop.services.notify.admin_notifier import AdminAlert
from eventdrop.services.screening.screener import decide, screen_poster
from eventdrop.services.storage.poster_store import PosterStore, sniff_image_type

logger = logging.getLogger(__name__)

MAX_POSTER_BYTES = 10 * 1024 * 1024

ACCEPTED_MESSAGE = "Your poster has been accepted!"
PENDING_MESSAGE = "Your poster has been submitted and is pending review."


@dataclass(frozen=True)
class SubmissionOutcome:
    status: str
    reason: str | None = None
    event_id: UUID | None = None
    edit_token: str | None = None
    message: str | None = None


@dataclass(frozen=True)
class PosterUpload:
    data: bytes
    mime_type: str
    extension: str


def decode_poster(image_base64: str) -> PosterUpload:
    payload = image_base64.strip()
    if payload.startswith("data:") and "," in payload:
        payload = payload.split(",", 1)[1]
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidSubmission("imageBase64 is not valid base64") from exc

    if not data:
        raise InvalidSubmission("imageBase64 is empty")
    if len(data) > MAX_POSTER_BYTES:
        raise InvalidSubmission(f"Image exceeds {MAX_POSTER_BYTES // (1024 * 1024)}MB limit")

    kind = sniff_image_type(data)
    if kind is None:
        raise InvalidSubmission("Unsupported image type")
    return PosterUpload(data=data, mime_type=kind[0], extension=kind[1])


def submit_poster(
    session: Session,
    gateway: ModelGateway | None,
    store: PosterStore,
    *,
    now: datetime,
    image_base64: str | None = None,
    image_url: str | None = None,
    dispatch_alert: Callable[[AdminAlert], None] | None = None,
) -> SubmissionOutcome:
    if not image_base64 and not image_url:
        raise InvalidSubmission("imageUrl or imageBase64 is required")
    if image_base64 and image_url:
        raise InvalidSubmission("Provide either imageUrl or imageBase64, not both")
    if gateway is None:
        raise UpstreamUnavailable("AI screening is not configured")

    upload: PosterUpload | None = None
    if image_url:
        model_image = validate_external_url(image_url)
    else:
        upload = decode_poster(image_base64 or "")
        model_image = image_data_url(upload.data, upload.mime_type)

    logger.info("Starting content screening source=%s", "url" if image_url else "upload")
    verdict = screen_poster(gateway, model_image)
    decision = decide(verdict)
    logger.info(
        "Screening verdict score=%s safety=%s accepted=%s",
        verdict.poster_score,
        verdict.safety,
        decision.accepted,
    )
    if not decision.accepted:
        return SubmissionOutcome(status="rejected", reason=decision.reason)

    poster_path: str | None = None
    poster_public_url = model_image if image_url else ""
    if upload is not None:
        poster_path, poster_public_url = store.save(upload.data, extension=upload.extension)

    submitter = AnonymousSubmitter.issue()
    repo = ElevatedEventRepository(session)
    event = repo.create_draft(
        owner_id=None,
        edit_token=submitter.edit_token,
        status=STATUS_DRAFT,
        title=DEFAULT_TITLE,
        start_at=now,
        timezone=DEFAULT_TIMEZONE,
        city="",
        poster_path=poster_path,
        poster_public_url=poster_public_url,
        moderation_status=decision.moderation_status,
        moderation_notes=decision.moderation_notes,
    )
    repo.commit()
    logger.info("Created anonymous event event_id=%s moderation_status=%s", event.id, decision.moderation_status)

    moderation = _extract_and_store(session, repo, gateway, event, model_image, decision, now)

    if moderation.notify and dispatch_alert is not None:
        dispatch_alert(AdminAlert(event_id=event.id, title=event.title, reason=moderation.notes or verdict.reason))

    pending = moderation.status == MODERATION_PENDING
    return SubmissionOutcome(
        status="pending_review" if pending else "accepted",
        event_id=event.id,
        edit_token=submitter.edit_token,
        message=PENDING_MESSAGE if pending else ACCEPTED_MESSAGE,
    )


def _extract_and_store(session, repo, gateway, event, model_image, decision, now) -> ModerationOutcome:
    result = extract_event_fields(gateway, now=now, image_url=model_image)
    normalized, dates = normalize_extraction(result, now)
    moderation = arbitrate(
        None,
        decision.moderation_status,
        notes=decision.moderation_notes,
        moderation_warning=normalized.moderation_warning,
    )
    try:
        store_extraction(repo, event, normalized, dates, moderation)
        repo.commit()
    except SQLAlchemyError as exc:
        # the draft row already exists; the submitter fills the fields in by hand
        session.rollback()
        logger.error("Extraction could not be stored event_id=%s: %s", event.id, exc)
        return arbitrate(None, decision.moderation_status, notes=decision.moderation_notes)
    return moderation
