"""Reminder store: dated action items attached to an application.

Due-date semantics are shared with the analytics engine through the
predicates at the bottom of this module:

* upcoming: not completed and due strictly after ``now``
* overdue: not completed and due strictly before ``now``
* due within N days: not completed and ``now <= due_date <= now + N days``

A reminder due exactly at ``now`` is neither upcoming nor overdue.
"""
from datetime import datetime, timedelta
from typing import Optional, Union

from jobtracker.core.database import to_naive_utc
from jobtracker.core.errors import NotFound, ValidationError
from jobtracker.core.models import Application, Reminder
from jobtracker.core.schemas import ReminderType


def _validate_type(reminder_type: Union[str, ReminderType, None]) -> str:
    if reminder_type is None or reminder_type == "":
        raise ValidationError("Reminder type is required")
    value = reminder_type.value if isinstance(reminder_type, ReminderType) else str(reminder_type)
    if value not in ReminderType.values():
        raise ValidationError(
            f"Invalid reminder type '{value}'. Must be one of: {', '.join(ReminderType.values())}"
        )
    return value


def _validate_due_date(due_date: Optional[datetime]) -> datetime:
    if due_date is None:
        raise ValidationError("Reminder due date is required")
    if not isinstance(due_date, datetime):
        raise ValidationError("Reminder due date must be a datetime")
    return to_naive_utc(due_date)


def add_reminder(
    application: Application,
    reminder_type: Union[str, ReminderType, None],
    due_date: Optional[datetime],
    note: Optional[str] = None,
) -> Reminder:
    """Append a new, not yet completed reminder.

    The stable id is assigned by the database when the session flushes.

    Raises:
        ValidationError: type missing or outside the closed set, or due date missing
    """
    reminder = Reminder(
        type=_validate_type(reminder_type),
        due_date=_validate_due_date(due_date),
        note=note,
        is_completed=False,
    )
    application.reminders.append(reminder)
    return reminder


def find_reminder(application: Application, reminder_id: int) -> Reminder:
    """Look up a reminder of ``application`` by id.

    Raises:
        NotFound: no reminder with that id belongs to the application
    """
    for reminder in application.reminders:
        if reminder.id == reminder_id:
            return reminder
    raise NotFound("Reminder not found")


def set_completion(application: Application, reminder_id: int, is_completed: bool) -> Reminder:
    reminder = find_reminder(application, reminder_id)
    reminder.is_completed = bool(is_completed)
    return reminder


def remove_reminder(application: Application, reminder_id: int) -> bool:
    """Remove a reminder by id; an unknown id is a no-op.

    Returns:
        Whether a reminder was removed
    """
    for reminder in list(application.reminders):
        if reminder.id == reminder_id:
            application.reminders.remove(reminder)
            return True
    return False


def is_upcoming(reminder: Reminder, now: datetime) -> bool:
    return not reminder.is_completed and reminder.due_date > now


def is_overdue(reminder: Reminder, now: datetime) -> bool:
    return not reminder.is_completed and reminder.due_date < now


def is_due_within(reminder: Reminder, now: datetime, days: int) -> bool:
    horizon = now + timedelta(days=days)
    return not reminder.is_completed and now <= reminder.due_date <= horizon
