from collections.abc import Callable
from datetime import datetime

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from eventdrop.api.deps import get_clock, get_gateway, get_notifier, get_poster_store
from eventdrop.core.auth import Caller, get_optional_caller
from eventdrop.db.session import get_session
from eventdrop.domain.schemas.api import ReextractRequest, ReextractResponse
from eventdrop.services.extract.reextract import reextract_event
from eventdrop.services.llm.client import ModelGateway
from eventdrop.services.notify.admin_notifier import AdminNotifier
from eventdrop.services.storage.poster_store import PosterStore

router = APIRouter()


@router.post("/extract", response_model=ReextractResponse)
def reextract_endpoint(
    body: ReextractRequest,
    background_tasks: BackgroundTasks,
    caller: Caller | None = Depends(get_optional_caller),
    session: Session = Depends(get_session),
    gateway: ModelGateway | None = Depends(get_gateway),
    store: PosterStore = Depends(get_poster_store),
    notifier: AdminNotifier = Depends(get_notifier),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> ReextractResponse:
    data = reextract_event(
        session,
        caller,
        gateway,
        store,
        event_id=body.event_id,
        now=clock(),
        image_url=body.image_url,
        source_url=body.source_url,
        dispatch_alert=lambda alert: background_tasks.add_task(notifier.notify, alert),
    )
    return ReextractResponse(data=data)
