"""Ownership guard binding a user to the applications they may touch.

Access is decided from the user's reference set alone, before the
application row is read. A caller can therefore be allowed through and still
get ``NotFound`` when the application was deleted in the meantime.
"""
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from jobtracker.core.errors import AccessDenied, NotFound
from jobtracker.core.logging import setup_logging
from jobtracker.core.models import ApplicationRef, User

logger = setup_logging('tracking_ownership')


def _require_user(session: Session, user_id: str) -> None:
    if session.get(User, user_id) is None:
        raise NotFound("User not found")


def application_ids_for(session: Session, user_id: str) -> List[int]:
    """Return the user's application reference set in insertion order.

    Raises:
        NotFound: the user does not exist
    """
    _require_user(session, user_id)
    rows = session.scalars(
        select(ApplicationRef.application_id)
        .where(ApplicationRef.user_id == user_id)
        .order_by(ApplicationRef.id)
    )
    return list(rows)


def is_authorized(session: Session, user_id: str, application_id: int) -> bool:
    """Whether ``application_id`` is in the user's reference set."""
    ref = session.scalar(
        select(ApplicationRef.id).where(
            ApplicationRef.user_id == user_id,
            ApplicationRef.application_id == application_id,
        )
    )
    return ref is not None


def authorize(session: Session, user_id: str, application_id: int) -> None:
    """Allow the call through or raise.

    Raises:
        NotFound: the acting user does not exist
        AccessDenied: the application is not in the user's reference set
    """
    _require_user(session, user_id)
    if not is_authorized(session, user_id, application_id):
        logger.warning(f"User {user_id} denied access to application {application_id}")
        raise AccessDenied()
