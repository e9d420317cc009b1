from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from eventdrop.core.auth import Caller, get_current_caller
from eventdrop.db.session import get_session
from eventdrop.domain.schemas.api import ModerationDecisionRequest, ModerationDecisionResponse
from eventdrop.services.moderation.review import review_event

router = APIRouter(prefix="/admin")


@router.post("/events/{event_id}/moderation", response_model=ModerationDecisionResponse)
def moderate_event(
    event_id: UUID,
    body: ModerationDecisionRequest,
    caller: Caller = Depends(get_current_caller),
    session: Session = Depends(get_session),
) -> ModerationDecisionResponse:
    status = review_event(session, caller, event_id, body.decision, body.notes)
    return ModerationDecisionResponse(moderation_status=status)
