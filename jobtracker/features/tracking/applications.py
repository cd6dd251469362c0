"""Application aggregate: every mutation of an application goes through here.

Each mutating operation follows the same sequence:

1. authorize the acting user against the target application,
2. take the per-application lock,
3. load the application, mutate it through the event log or the reminder
   store, refresh ``updated_at`` and commit.

Creating and deleting an application are two separate writes: the
application row, then the owner's reference set. When the second write
fails the caller gets ``ConsistencyRisk`` unless the first write could be
undone.
"""
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple, Union

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from jobtracker.core.database import to_naive_utc, utcnow
from jobtracker.core.errors import (
    AccessDenied,
    ConsistencyRisk,
    InternalError,
    NotFound,
    TrackerError,
    ValidationError,
)
from jobtracker.core.locks import application_locks
from jobtracker.core.logging import setup_logging
from jobtracker.core.models import Application, ApplicationRef
from jobtracker.core.schemas import ApplicationStatus, ReminderType
from jobtracker.features.tracking import events, reminders
from jobtracker.features.tracking.ownership import authorize
from jobtracker.features.tracking.users import get_user

logger = setup_logging('tracking_applications')

REQUIRED_FIELDS = ('job_title', 'company')

# Fields a caller may set on create or edit
EDITABLE_FIELDS = (
    'job_title',
    'company',
    'location',
    'job_link',
    'job_description',
    'notes',
    'resume_feedback',
    'cover_letter_generated',
    'interview_prep',
    'success_score',
    'improvement_tips',
    'applied_at',
)

# Never taken from caller input on edit
PROTECTED_FIELDS = (
    'id',
    'owner_id',
    'status_history',
    'communications',
    'reminders',
    'created_at',
    'updated_at',
    'current_status',
)


def _validate_status(status: Union[str, ApplicationStatus, None]) -> str:
    if status is None or status == "":
        raise ValidationError("Status is required")
    value = status.value if isinstance(status, ApplicationStatus) else str(status)
    if value not in ApplicationStatus.values():
        raise ValidationError(
            f"Invalid status '{value}'. Must be one of: {', '.join(ApplicationStatus.values())}"
        )
    return value


def _editable_fields(fields: Mapping[str, Any]) -> Dict[str, Any]:
    """Keep the editable keys of ``fields``, dropping protected and unknown ones."""
    stripped = [key for key in fields if key in PROTECTED_FIELDS]
    if stripped:
        logger.debug(f"Ignoring protected fields: {', '.join(stripped)}")

    updates = {key: value for key, value in fields.items() if key in EDITABLE_FIELDS}
    if isinstance(updates.get('applied_at'), datetime):
        updates['applied_at'] = to_naive_utc(updates['applied_at'])
    return updates


def _require_fields(values: Mapping[str, Any]) -> None:
    missing = [
        name for name in REQUIRED_FIELDS
        if values.get(name) is None or not str(values.get(name)).strip()
    ]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")


def _authorize_target(session: Session, acting_user_id: str, application_id: int) -> None:
    """Authorize, reporting ids that match no application as not found.

    Ownership is decided first; only a denied caller triggers the existence
    probe, so an existing application owned by someone else stays
    ``AccessDenied``.
    """
    try:
        authorize(session, acting_user_id, application_id)
    except AccessDenied:
        exists = session.scalar(select(Application.id).where(Application.id == application_id))
        if exists is None:
            raise NotFound("Application not found")
        raise


def _load(session: Session, application_id: int, owner_id: str) -> Application:
    """Load an application, treating a row owned by someone else as missing.

    A reference left behind by a half-finished delete must not reach a row
    that later reused the id.
    """
    application = session.get(Application, application_id, populate_existing=True)
    if application is None or application.owner_id != owner_id:
        raise NotFound("Application not found")
    return application


def _commit(session: Session, action: str) -> None:
    try:
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Error during {action}: {str(e)}")
        raise InternalError() from e


@contextmanager
def _mutation(
    session: Session,
    application_id: int,
    acting_user_id: str,
    action: str,
) -> Iterator[Tuple[Application, datetime]]:
    """Authorize, lock, load and commit around one mutation.

    Yields the application and the timestamp of the mutation. Any error
    raised inside the block rolls the session back.
    """
    _authorize_target(session, acting_user_id, application_id)
    with application_locks.hold(application_id):
        application = _load(session, application_id, acting_user_id)
        now = utcnow()
        try:
            yield application, now
            application.updated_at = now
        except TrackerError:
            session.rollback()
            raise
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Error during {action}: {str(e)}")
            raise InternalError() from e
        except Exception:
            session.rollback()
            raise
        _commit(session, action)


def create_application(
    session: Session,
    user_id: str,
    fields: Mapping[str, Any],
    now: Optional[datetime] = None,
) -> Application:
    """Create an application owned by ``user_id``.

    The initial status is ``applied`` unless ``current_status`` is given.
    The creation entry is the first status history entry.

    Raises:
        NotFound: the user does not exist
        ValidationError: job title or company missing, or invalid status
        ConsistencyRisk: the application was stored but could not be
            registered with its owner, nor removed again
    """
    get_user(session, user_id)

    data = {key: value for key, value in fields.items() if key in EDITABLE_FIELDS}
    _require_fields(data)
    initial_status = _validate_status(fields.get('current_status') or ApplicationStatus.APPLIED)

    now = to_naive_utc(now) if now is not None else utcnow()
    data.pop('applied_at', None)
    if data.get('notes') is None:
        data['notes'] = ""

    application = Application(
        owner_id=user_id,
        applied_at=now,
        created_at=now,
        updated_at=now,
        **data,
    )
    events.record_status_change(application, initial_status, user_id, events.CREATION_NOTE, now)
    session.add(application)
    _commit(session, 'application create')

    try:
        session.add(ApplicationRef(user_id=user_id, application_id=application.id))
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(
            f"Application {application.id} stored but not registered with user {user_id}: {str(e)}"
        )
        _undo_create(session, application)
        raise InternalError("Application could not be created") from e

    logger.info(
        f"Created application {application.id} ({application.job_title} at "
        f"{application.company}) for user {user_id}"
    )
    return application


def _undo_create(session: Session, application: Application) -> None:
    """Remove an application whose owner registration failed."""
    application_id = application.id
    try:
        session.delete(application)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Could not remove unregistered application {application_id}: {str(e)}")
        raise ConsistencyRisk(
            f"Application {application_id} exists but is not registered with its owner"
        ) from e
    logger.warning(f"Removed unregistered application {application_id}")


def get_application(session: Session, user_id: str, application_id: int) -> Application:
    """Fetch one application the user owns."""
    _authorize_target(session, user_id, application_id)
    return _load(session, application_id, user_id)


def update_status(
    session: Session,
    application_id: int,
    acting_user_id: str,
    new_status: Union[str, ApplicationStatus],
    note: Optional[str] = None,
) -> Application:
    """Set the current status and append the matching history entry.

    Any status may follow any other, including the current one.
    """
    with _mutation(session, application_id, acting_user_id, 'status update') as (application, now):
        status = _validate_status(new_status)
        events.record_status_change(application, status, acting_user_id, note, now)

    logger.info(f"Application {application_id} status set to '{status}' by {acting_user_id}")
    return application


def update_details(
    session: Session,
    application_id: int,
    acting_user_id: str,
    fields: Mapping[str, Any],
) -> Application:
    """Apply field-level edits.

    Status history, creation time, ownership and the current status are
    silently ignored; status changes go through ``update_status``.
    """
    updates = _editable_fields(fields)
    with _mutation(session, application_id, acting_user_id, 'application update') as (application, now):
        for key, value in updates.items():
            setattr(application, key, value)
        _require_fields({name: getattr(application, name) for name in REQUIRED_FIELDS})

    logger.info(f"Application {application_id} updated ({', '.join(sorted(updates)) or 'no fields'})")
    return application


def delete_application(session: Session, application_id: int, acting_user_id: str) -> None:
    """Delete an application and drop it from its owner's reference set.

    Raises:
        AccessDenied: the application belongs to someone else
        NotFound: the application does not exist (the reference set is
            left untouched)
        ConsistencyRisk: the application was deleted but its reference
            could not be removed
    """
    _authorize_target(session, acting_user_id, application_id)
    with application_locks.hold(application_id):
        application = _load(session, application_id, acting_user_id)
        session.delete(application)
        _commit(session, 'application delete')

        try:
            session.execute(
                delete(ApplicationRef).where(
                    ApplicationRef.user_id == acting_user_id,
                    ApplicationRef.application_id == application_id,
                )
            )
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(
                f"Application {application_id} deleted but still referenced by user "
                f"{acting_user_id}: {str(e)}"
            )
            raise ConsistencyRisk(
                f"Application {application_id} was deleted but is still listed for its owner"
            ) from e

    application_locks.discard(application_id)
    logger.info(f"Deleted application {application_id} of user {acting_user_id}")


def add_communication(
    session: Session,
    application_id: int,
    acting_user_id: str,
    mode: Optional[str] = None,
    summary: Optional[str] = None,
    contact_person: Optional[str] = None,
) -> Application:
    with _mutation(session, application_id, acting_user_id, 'communication add') as (application, now):
        events.record_communication(application, mode, summary, contact_person, now)

    logger.info(f"Communication via {mode} recorded on application {application_id}")
    return application


def set_notes(
    session: Session,
    application_id: int,
    acting_user_id: str,
    notes: Optional[str],
) -> Application:
    """Replace the notes of an application wholesale."""
    with _mutation(session, application_id, acting_user_id, 'notes update') as (application, now):
        application.notes = notes or ""

    logger.info(f"Notes replaced on application {application_id}")
    return application


def add_reminder(
    session: Session,
    application_id: int,
    acting_user_id: str,
    reminder_type: Union[str, ReminderType, None],
    due_date: Optional[datetime],
    note: Optional[str] = None,
) -> Application:
    with _mutation(session, application_id, acting_user_id, 'reminder add') as (application, now):
        reminder = reminders.add_reminder(application, reminder_type, due_date, note)

    logger.info(
        f"Reminder {reminder.id} ({reminder.type}, due {reminder.due_date.isoformat()}) "
        f"added to application {application_id}"
    )
    return application


def set_reminder_completion(
    session: Session,
    application_id: int,
    acting_user_id: str,
    reminder_id: int,
    is_completed: bool,
) -> Application:
    with _mutation(session, application_id, acting_user_id, 'reminder update') as (application, now):
        reminders.set_completion(application, reminder_id, is_completed)

    logger.info(f"Reminder {reminder_id} of application {application_id} completed={bool(is_completed)}")
    return application


def delete_reminder(
    session: Session,
    application_id: int,
    acting_user_id: str,
    reminder_id: int,
) -> Application:
    """Remove a reminder; an unknown reminder id still succeeds."""
    with _mutation(session, application_id, acting_user_id, 'reminder delete') as (application, now):
        removed = reminders.remove_reminder(application, reminder_id)

    if not removed:
        logger.info(f"Reminder {reminder_id} not present on application {application_id}, nothing removed")
    return application
