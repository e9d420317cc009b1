"""Error taxonomy shared by the pipeline and the HTTP layer.

Every error carries the status code the API renders it with; the handler in
``eventdrop.main`` turns them into ``{"error": message}`` bodies.
"""

from __future__ import annotations


class EventDropError(Exception):
    status_code = 500
    default_message = "Something went wrong"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidUrl(EventDropError):
    status_code = 400
    default_message = "Invalid URL"


class ForbiddenHost(EventDropError):
    status_code = 400
    default_message = "URL host is not allowed"


class InvalidSubmission(EventDropError):
    status_code = 400
    default_message = "Invalid request"


class FetchFailed(EventDropError):
    status_code = 400
    default_message = "Failed to fetch event page"


class NotPublishable(EventDropError):
    status_code = 400
    default_message = "Event not published"


class Unauthenticated(EventDropError):
    status_code = 401
    default_message = "Authentication required"


class Forbidden(EventDropError):
    status_code = 403
    default_message = "You do not have access to this event"


class NotFound(EventDropError):
    status_code = 404
    default_message = "Event not found"


class PublishBlocked(EventDropError):
    status_code = 409
    default_message = "Event cannot be published yet"


class UpstreamUnavailable(EventDropError):
    status_code = 503
    default_message = "Service temporarily unavailable."

    def __init__(self, message: str | None = None, upstream_status: int | None = None) -> None:
        super().__init__(message)
        self.upstream_status = upstream_status
        if upstream_status == 429:
            self.status_code = 429


class ParseFailure(EventDropError):
    default_message = "Model response could not be parsed"


class StorageFailure(EventDropError):
    default_message = "Failed to store image"
