from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import ForeignKey, String, UniqueConstraint, Uuid, select
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship

from eventdrop.db.base import Base

if TYPE_CHECKING:
    from eventdrop.db.models.user import User

ROLE_ADMIN = "admin"
ROLE_USER = "user"


class UserRole(Base):
    __tablename__ = "user_roles"
    __table_args__ = (UniqueConstraint("user_id", "role"),)

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), ForeignKey("users.id"))
    role: Mapped[str] = mapped_column(String(20))

    user: Mapped[User] = relationship(back_populates="roles")


def has_role(session: Session, user_id: UUID, role: str) -> bool:
    stmt = select(UserRole.id).where(UserRole.user_id == user_id, UserRole.role == role)
    return session.scalar(stmt) is not None


def grant_role(session: Session, user_id: UUID, role: str) -> UserRole:
    stmt = select(UserRole).where(UserRole.user_id == user_id, UserRole.role == role)
    existing = session.scalar(stmt)
    if existing:
        return existing

    user_role = UserRole(user_id=user_id, role=role)
    session.add(user_role)
    session.flush()
    return user_role
