from fastapi import APIRouter, Depends, Query, status
from typing import Optional
from sqlalchemy.orm import Session

from ..models.applications import (
    ApplicationCreate,
    ApplicationUpdate,
    CommunicationCreate,
    NotesUpdate,
    StatusUpdate,
)
from ..dependencies import get_db, get_acting_user

from jobtracker.core.schemas import ApplicationResponse, OperationResult
from jobtracker.features.tracking import analytics
from jobtracker.features.tracking import applications as tracker

router = APIRouter()


def _payload(application) -> ApplicationResponse:
    return ApplicationResponse.model_validate(application)


@router.post("/", response_model=OperationResult, status_code=status.HTTP_201_CREATED)
def create_application(
    body: ApplicationCreate,
    user_id: str = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    """Create a new job application"""
    fields = body.model_dump(exclude_unset=True)
    application = tracker.create_application(db, user_id, fields)
    return OperationResult.ok("Application created successfully", _payload(application))


@router.get("/", response_model=OperationResult)
def list_applications(
    status: Optional[str] = Query(None, description="Only applications in this status"),
    company: Optional[str] = Query(None, description="Case-insensitive company substring"),
    sort_by: str = Query("created_at", description="Field to sort by"),
    sort_order: str = Query("desc", description="asc or desc"),
    user_id: str = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    """List the user's applications"""
    rows = analytics.list_applications(
        db, user_id, status=status, company=company, sort_by=sort_by, sort_order=sort_order
    )
    return OperationResult.ok("Applications fetched successfully", [_payload(row) for row in rows])


@router.get("/{application_id}", response_model=OperationResult)
def get_application(
    application_id: int,
    user_id: str = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    """Get a single application"""
    application = tracker.get_application(db, user_id, application_id)
    return OperationResult.ok("Application fetched successfully", _payload(application))


@router.put("/{application_id}", response_model=OperationResult)
def update_application(
    application_id: int,
    body: ApplicationUpdate,
    user_id: str = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    """Update application details"""
    fields = body.model_dump(exclude_unset=True)
    application = tracker.update_details(db, application_id, user_id, fields)
    return OperationResult.ok("Application updated successfully", _payload(application))


@router.put("/{application_id}/status", response_model=OperationResult)
def update_application_status(
    application_id: int,
    body: StatusUpdate,
    user_id: str = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    """Change the status and record it in the status history"""
    application = tracker.update_status(db, application_id, user_id, body.status, body.note)
    return OperationResult.ok("Application status updated successfully", _payload(application))


@router.put("/{application_id}/notes", response_model=OperationResult)
def update_notes(
    application_id: int,
    body: NotesUpdate,
    user_id: str = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    """Replace the application notes"""
    application = tracker.set_notes(db, application_id, user_id, body.notes)
    return OperationResult.ok("Notes updated successfully", _payload(application))


@router.post("/{application_id}/communications", response_model=OperationResult)
def add_communication(
    application_id: int,
    body: CommunicationCreate,
    user_id: str = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    """Record a communication with the employer"""
    application = tracker.add_communication(
        db, application_id, user_id,
        mode=body.mode, summary=body.summary, contact_person=body.contact_person,
    )
    return OperationResult.ok("Communication record added successfully", _payload(application))


@router.delete("/{application_id}", response_model=OperationResult)
def delete_application(
    application_id: int,
    user_id: str = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    """Delete an application"""
    tracker.delete_application(db, application_id, user_id)
    return OperationResult.ok("Application deleted successfully")
