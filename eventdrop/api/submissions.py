from collections.abc import Callable
from datetime import datetime

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from eventdrop.api.deps import get_clock, get_gateway, get_notifier, get_poster_store
from eventdrop.db.session import get_session
from eventdrop.domain.schemas.api import SubmitPosterRequest, SubmitPosterResponse
from eventdrop.services.intake.submit_poster import submit_poster
from eventdrop.services.llm.client import ModelGateway
from eventdrop.services.notify.admin_notifier import AdminNotifier
from eventdrop.services.storage.poster_store import PosterStore

router = APIRouter()


@router.post("/submit-poster", response_model=SubmitPosterResponse, response_model_exclude_none=True)
def submit_poster_endpoint(
    body: SubmitPosterRequest,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
    gateway: ModelGateway | None = Depends(get_gateway),
    store: PosterStore = Depends(get_poster_store),
    notifier: AdminNotifier = Depends(get_notifier),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> SubmitPosterResponse:
    outcome = submit_poster(
        session,
        gateway,
        store,
        now=clock(),
        image_base64=body.image_base64,
        image_url=body.image_url,
        dispatch_alert=lambda alert: background_tasks.add_task(notifier.notify, alert),
    )
    return SubmitPosterResponse(
        status=outcome.status,
        reason=outcome.reason,
        event_id=outcome.event_id,
        edit_token=outcome.edit_token,
        message=outcome.message,
    )
