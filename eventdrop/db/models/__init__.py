from eventdrop.db.models.event import Event
from eventdrop.db.models.event_analytics import EventAnalytics
from eventdrop.db.models.user import User
from eventdrop.db.models.user_role import UserRole

__all__ = [
    "Event",
    "EventAnalytics",
    "User",
    "UserRole",
]
