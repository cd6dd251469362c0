from fastapi import APIRouter, Depends, Query
from typing import Optional
from sqlalchemy.orm import Session

from ..models.applications import ReminderCompletionUpdate, ReminderCreate
from ..dependencies import get_db, get_acting_user

from jobtracker.core.schemas import ApplicationResponse, OperationResult
from jobtracker.features.tracking import analytics
from jobtracker.features.tracking import applications as tracker

router = APIRouter()


@router.get("/reminders", response_model=OperationResult)
def list_reminders(
    completed: Optional[bool] = Query(None, description="Filter on completion"),
    upcoming: bool = Query(False, description="Open reminders due after now"),
    overdue: bool = Query(False, description="Open reminders due before now"),
    user_id: str = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    """All reminders across the user's applications, soonest first"""
    reminders = analytics.get_reminders(
        db, user_id, completed=completed, upcoming=upcoming, overdue=overdue
    )
    return OperationResult.ok("Reminders fetched successfully", reminders)


@router.get("/reminders/upcoming", response_model=OperationResult)
def upcoming_reminders(
    days: Optional[int] = Query(None, description="How many days ahead to look"),
    user_id: str = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    """Open reminders due in the next ``days`` days"""
    reminders = analytics.get_upcoming_reminders(db, user_id, days_ahead=days)
    return OperationResult.ok("Upcoming reminders fetched successfully", reminders)


@router.post("/{application_id}/reminders", response_model=OperationResult)
def add_reminder(
    application_id: int,
    body: ReminderCreate,
    user_id: str = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    """Attach a reminder to an application"""
    application = tracker.add_reminder(
        db, application_id, user_id, body.type, body.due_date, body.note
    )
    return OperationResult.ok(
        "Reminder added successfully", ApplicationResponse.model_validate(application)
    )


@router.put("/{application_id}/reminders/{reminder_id}", response_model=OperationResult)
def update_reminder_status(
    application_id: int,
    reminder_id: int,
    body: ReminderCompletionUpdate,
    user_id: str = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    """Mark a reminder completed or open again"""
    application = tracker.set_reminder_completion(
        db, application_id, user_id, reminder_id, body.is_completed
    )
    return OperationResult.ok(
        "Reminder status updated successfully", ApplicationResponse.model_validate(application)
    )


@router.delete("/{application_id}/reminders/{reminder_id}", response_model=OperationResult)
def delete_reminder(
    application_id: int,
    reminder_id: int,
    user_id: str = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    """Remove a reminder"""
    application = tracker.delete_reminder(db, application_id, user_id, reminder_id)
    return OperationResult.ok(
        "Reminder deleted successfully", ApplicationResponse.model_validate(application)
    )
