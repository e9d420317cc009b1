from __future__ import annotations

import argparse

from eventdrop.core.env import load_env
from eventdrop.db.models.user import get_or_create_user
from eventdrop.db.models.user_role import ROLE_ADMIN, grant_role
from eventdrop.db.session import SessionLocal, init_db
from eventdrop.logging import configure_logging


def grant_admin(session, email: str) -> str:
    user = get_or_create_user(session, email.strip().lower())
    grant_role(session, user.id, ROLE_ADMIN)
    session.commit()
    return str(user.id)


def main() -> None:
    load_env()
    configure_logging()

    parser = argparse.ArgumentParser(description="Grant the admin role to a user, creating the user if needed.")
    parser.add_argument("email", help="Email address of the reviewer")
    args = parser.parse_args()

    init_db()
    session = SessionLocal()
    try:
        user_id = grant_admin(session, args.email)
    finally:
        session.close()
    print(f"user_id={user_id} role={ROLE_ADMIN}")


if __name__ == "__main__":
    main()
