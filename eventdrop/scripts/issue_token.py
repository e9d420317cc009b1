from __future__ import annotations

import argparse
from datetime import timedelta

from eventdrop.core.env import load_env
from eventdrop.core.jwt import create_access_token
from eventdrop.db.models.user import get_or_create_user
from eventdrop.db.session import SessionLocal, init_db


def issue_token(session, email: str, minutes: int) -> str:
    user = get_or_create_user(session, email.strip().lower())
    session.commit()
    return create_access_token(
        {"sub": str(user.id), "email": user.email},
        expires_delta=timedelta(minutes=minutes),
    )


def main() -> None:
    load_env()

    parser = argparse.ArgumentParser(description="Mint a development bearer token for a user.")
    parser.add_argument("email", help="Email address of the user")
    parser.add_argument("--minutes", type=int, default=60, help="Token lifetime in minutes")
    args = parser.parse_args()

    init_db()
    session = SessionLocal()
    try:
        print(issue_token(session, args.email, args.minutes))
    finally:
        session.close()


if __name__ == "__main__":
    main()
