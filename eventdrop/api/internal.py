from fastapi import APIRouter, Depends

from eventdrop.api.deps import get_notifier
from eventdrop.core.auth import require_service_key
from eventdrop.core.errors import EventDropError
from eventdrop.domain.schemas.api import AdminNotifyRequest, AdminNotifyResponse
from eventdrop.services.notify.admin_notifier import AdminAlert, AdminNotifier

router = APIRouter(prefix="/internal", dependencies=[Depends(require_service_key)])


@router.post("/notify-admin-moderation", response_model=AdminNotifyResponse)
def notify_admin_moderation(
    body: AdminNotifyRequest,
    notifier: AdminNotifier = Depends(get_notifier),
) -> AdminNotifyResponse:
    if not notifier.is_configured:
        raise EventDropError("Email service not configured")
    notified = notifier.notify(
        AdminAlert(event_id=body.event_id, title=body.event_title, reason=body.moderation_reason)
    )
    return AdminNotifyResponse(notified=notified)
