from __future__ import annotations

import secrets
from typing import Annotated, Literal, Union
from uuid import UUID

from pydantic import BaseModel, Field


class AnonymousSubmitter(BaseModel):
    kind: Literal["anonymous"] = "anonymous"
    edit_token: str

    @classmethod
    def issue(cls) -> "AnonymousSubmitter":
        return cls(edit_token=secrets.token_urlsafe(32))


class AuthenticatedSubmitter(BaseModel):
    kind: Literal["authenticated"] = "authenticated"
    owner_id: UUID


SubmissionContext = Annotated[
    Union[AnonymousSubmitter, AuthenticatedSubmitter],
    Field(discriminator="kind"),
]
