"""User directory seam used by the identity collaborator."""
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from jobtracker.core.errors import InternalError, NotFound, ValidationError
from jobtracker.core.logging import setup_logging
from jobtracker.core.models import User

logger = setup_logging('tracking_users')


def get_user(session: Session, user_id: str) -> User:
    user = session.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


def register_user(session: Session, user_id: str, weekly_target: int = 0) -> User:
    """Provision a user if it does not exist yet; returns the stored user."""
    if not user_id:
        raise ValidationError("User id is required")
    user = session.get(User, user_id)
    if user is not None:
        return user
    if weekly_target < 0:
        raise ValidationError("Weekly target cannot be negative")

    user = User(id=user_id, weekly_target=weekly_target, current_week_count=0)
    session.add(user)
    try:
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Error registering user {user_id}: {str(e)}")
        raise InternalError() from e
    logger.info(f"Registered user {user_id}")
    return user


def set_weekly_goal(
    session: Session,
    user_id: str,
    weekly_target: Optional[int] = None,
    current_week_count: Optional[int] = None,
) -> User:
    """Update the weekly goal configuration; omitted values are kept."""
    user = get_user(session, user_id)
    if weekly_target is not None:
        if weekly_target < 0:
            raise ValidationError("Weekly target cannot be negative")
        user.weekly_target = weekly_target
    if current_week_count is not None:
        if current_week_count < 0:
            raise ValidationError("Current week count cannot be negative")
        user.current_week_count = current_week_count

    try:
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Error updating weekly goal of {user_id}: {str(e)}")
        raise InternalError() from e
    return user
