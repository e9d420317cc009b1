from __future__ import annotations

import secrets
from dataclasses import dataclass
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from eventdrop.config import settings
from eventdrop.core.errors import Forbidden, Unauthenticated
from eventdrop.core.jwt import verify_access_token

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Caller:
    user_id: UUID
    email: str | None = None


def caller_from_token(token: str | None) -> Caller | None:
    if not token:
        return None
    payload = verify_access_token(token)
    if payload is None:
        return None
    subject = payload.get("sub")
    if not subject:
        return None
    try:
        user_id = UUID(str(subject))
    except ValueError:
        return None
    return Caller(user_id=user_id, email=payload.get("email"))


async def get_optional_caller(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> Caller | None:
    if credentials is None:
        return None
    return caller_from_token(credentials.credentials)


async def get_current_caller(caller: Caller | None = Depends(get_optional_caller)) -> Caller:
    if caller is None:
        raise Unauthenticated("Invalid or expired token")
    return caller


async def require_service_key(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> None:
    expected = settings.INTERNAL_API_KEY
    if not expected:
        raise Forbidden("Internal endpoints are disabled")
    if credentials is None:
        raise Unauthenticated()
    if not secrets.compare_digest(credentials.credentials.encode(), expected.encode()):
        raise Forbidden("Invalid service credential")
