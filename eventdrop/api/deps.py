from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone

from eventdrop.config import settings
from eventdrop.db.session import SessionLocal
from eventdrop.services.analytics.rate_limiter import RecencyLimiter
from eventdrop.services.llm.client import ModelGateway, build_gateway
from eventdrop.services.notify.admin_notifier import AdminNotifier
from eventdrop.services.storage.poster_store import PosterStore

# process-local; see eventdrop.services.analytics.rate_limiter
_rate_limiter = RecencyLimiter(window_s=settings.ANALYTICS_WINDOW_S)


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def get_clock() -> Callable[[], datetime]:
    return utc_now


def get_gateway() -> ModelGateway | None:
    return build_gateway()


def get_poster_store() -> PosterStore:
    return PosterStore()


def get_notifier() -> AdminNotifier:
    return AdminNotifier(session_factory=SessionLocal)


def get_rate_limiter() -> RecencyLimiter:
    return _rate_limiter
