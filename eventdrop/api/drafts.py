from uuid import UUID

from fastapi import APIRouter, Depends, Header
from sqlalchemy.orm import Session

from eventdrop.core.auth import Caller, get_optional_caller
from eventdrop.core.errors import Unauthenticated
from eventdrop.db.session import get_session
from eventdrop.domain.schemas.api import PublishResponse
from eventdrop.domain.schemas.submission import AnonymousSubmitter, AuthenticatedSubmitter
from eventdrop.services.drafts.publish import publish_draft

router = APIRouter(prefix="/events")


@router.post("/{event_id}/publish", response_model=PublishResponse)
def publish_endpoint(
    event_id: UUID,
    caller: Caller | None = Depends(get_optional_caller),
    edit_token: str | None = Header(default=None, alias="X-Edit-Token"),
    session: Session = Depends(get_session),
) -> PublishResponse:
    if caller is not None:
        submitter = AuthenticatedSubmitter(owner_id=caller.user_id)
    elif edit_token:
        submitter = AnonymousSubmitter(edit_token=edit_token)
    else:
        raise Unauthenticated("A bearer token or edit token is required")

    slug = publish_draft(session, event_id, submitter)
    return PublishResponse(slug=slug)
