from __future__ import annotations

import logging
from uuid import UUID

from eventdrop.core.errors import Forbidden, NotFound, Unauthenticated
from eventdrop.db.repositories import EventOwnership, ScopedEventRepository

logger = logging.getLogger(__name__)


def ensure_owner(scoped: ScopedEventRepository, event_id: UUID) -> EventOwnership:
    """Allow the call through only for the authenticated owner of ``event_id``.

    Ownership is read through the caller-scoped repository; the elevated
    repository must not be touched before this returns.
    """
    caller_id = scoped.caller_id
    if caller_id is None:
        raise Unauthenticated()

    ownership = scoped.ownership_of(event_id)
    if ownership is None:
        raise NotFound()

    if ownership.owner_id is None or ownership.owner_id != caller_id:
        logger.warning("Ownership check failed event_id=%s caller=%s", event_id, caller_id)
        raise Forbidden()

    return ownership
