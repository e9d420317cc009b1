from collections.abc import Callable
from datetime import datetime

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from eventdrop.api.deps import get_clock, get_rate_limiter
from eventdrop.db.session import get_session
from eventdrop.domain.schemas.api import TrackAnalyticsRequest, TrackAnalyticsResponse
from eventdrop.services.analytics.rate_limiter import RecencyLimiter
from eventdrop.services.analytics.track import client_source, track_event

router = APIRouter()


@router.post("/track-analytics", response_model=TrackAnalyticsResponse, response_model_exclude_none=True)
def track_analytics_endpoint(
    body: TrackAnalyticsRequest,
    request: Request,
    session: Session = Depends(get_session),
    limiter: RecencyLimiter = Depends(get_rate_limiter),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> TrackAnalyticsResponse:
    source = client_source(
        request.headers.get("x-forwarded-for"),
        request.client.host if request.client else None,
    )
    result = track_event(
        session,
        limiter,
        event_id=body.event_id,
        kind=body.type,
        source=source,
        now=clock(),
    )
    return TrackAnalyticsResponse(message=result.message)
