from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import String, Uuid, select
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship

from eventdrop.db.base import Base
from eventdrop.db.types import AwareDateTime

if TYPE_CHECKING:
    from eventdrop.db.models.user_role import UserRole


class User(Base):
    __tablename__ = "users"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    email: Mapped[str | None] = mapped_column(String(320), unique=True, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        AwareDateTime(),
        default=lambda: datetime.now(tz=timezone.utc),
    )

    roles: Mapped[list[UserRole]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
    )


def get_or_create_user(session: Session, email: str) -> User:
    existing = session.scalar(select(User).where(User.email == email))
    if existing:
        return existing

    user = User(email=email)
    session.add(user)
    session.flush()
    return user
