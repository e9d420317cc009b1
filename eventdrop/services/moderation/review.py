from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from eventdrop.core.auth import Caller
from eventdrop.core.errors import Forbidden, InvalidSubmission, NotFound
from eventdrop.db.models.event import MODERATION_APPROVED, MODERATION_REJECTED, STATUS_DRAFT, STATUS_PUBLISHED
from eventdrop.db.models.user_role import ROLE_ADMIN, has_role
from eventdrop.db.repositories import ElevatedEventRepository

logger = logging.getLogger(__name__)


def review_event(
    session: Session,
    caller: Caller,
    event_id: UUID,
    decision: str,
    notes: str | None = None,
) -> str:
    if not has_role(session, caller.user_id, ROLE_ADMIN):
        raise Forbidden("Administrator role required")
    if decision not in (MODERATION_APPROVED, MODERATION_REJECTED):
        raise InvalidSubmission(f"Unknown moderation decision: {decision}")

    repo = ElevatedEventRepository(session)
    event = repo.get(event_id)
    if event is None:
        raise NotFound()

    fields: dict = {"moderation_status": decision, "moderation_notes": notes or event.moderation_notes}
    if decision == MODERATION_REJECTED and event.status == STATUS_PUBLISHED:
        # a rejected event must not stay publicly visible
        fields["status"] = STATUS_DRAFT
    repo.update_fields(event, fields)
    repo.commit()

    logger.info("Moderation decision event_id=%s decision=%s admin=%s", event_id, decision, caller.user_id)
    return decision
