"""Owner records for habits.

Credentials are handled by the external identity provider; locally we only
keep a row per user id so habits have an owner to reference.
"""

from __future__ import annotations

from typing import Optional

from sqlmodel import select

from ..infra.database import SessionFactory
from ..models.user import User

DEMO_USERNAME = "demo"


def ensure_user(
    session_factory: SessionFactory, user_id: int, *, username: Optional[str] = None
) -> User:
    """Return the user row for ``user_id``, creating it on first sight."""

    with session_factory() as session:
        user = session.get(User, user_id)
        if user is None:
            user = User(id=user_id, username=username or f"user-{user_id}")
            session.add(user)
            session.commit()
            session.refresh(user)
        session.expunge(user)
        return user


def ensure_demo_user(session_factory: SessionFactory) -> User:
    """Return the demo user, creating it when missing."""

    with session_factory() as session:
        user = session.exec(select(User).where(User.username == DEMO_USERNAME)).first()
        if user is None:
            user = User(username=DEMO_USERNAME)
            session.add(user)
            session.commit()
            session.refresh(user)
        session.expunge(user)
        return user


__all__ = ["DEMO_USERNAME", "ensure_demo_user", "ensure_user"]
