"""Core Pydantic models shared by the tracking features and the API.

This module defines:
1. The closed value sets (application status, reminder type, stats period)
2. Read models for applications and their sub-collections
3. The computed analytics views (stats, timeline, dashboard)
4. The result envelope every operation outcome is reported in

Example:
    ```python
    from jobtracker.core.schemas import ApplicationResponse, OperationResult

    payload = ApplicationResponse.model_validate(application)
    result = OperationResult.ok("Application created successfully", payload)
    ```
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class ApplicationStatus(str, Enum):
    """Application status set.

    Ordering carries no meaning; any status may follow any other.
    """
    APPLIED = "applied"
    UNDER_REVIEW = "under review"
    INTERVIEW_SCHEDULED = "interview scheduled"
    OFFERED = "offered"
    REJECTED = "rejected"

    @classmethod
    def values(cls) -> List[str]:
        return [status.value for status in cls]


class ReminderType(str, Enum):
    """Kinds of reminder a user can attach to an application."""
    FOLLOW_UP = "follow-up"
    INTERVIEW = "interview"

    @classmethod
    def values(cls) -> List[str]:
        return [reminder_type.value for reminder_type in cls]


class StatsPeriod(str, Enum):
    """Windows for statistics, anchored at the current moment."""
    ALL = "all"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


# Statuses that end an application's active life
CLOSED_STATUSES = (ApplicationStatus.REJECTED.value, ApplicationStatus.OFFERED.value)


class InterviewPrep(BaseModel):
    """Generated interview preparation material."""
    predicted_questions: List[str] = []
    suggested_answers: List[str] = []


class StatusHistoryEntryResponse(BaseModel):
    """Status history entry response model."""
    id: int
    status: str
    updated_at: datetime
    updated_by: Optional[str] = None
    note: Optional[str] = None

    class Config:
        from_attributes = True


class CommunicationResponse(BaseModel):
    """Communication response model."""
    id: int
    date: datetime
    mode: Optional[str] = None
    summary: Optional[str] = None
    contact_person: Optional[str] = None

    class Config:
        from_attributes = True


class ReminderResponse(BaseModel):
    """Reminder response model."""
    id: int
    type: str
    due_date: datetime
    note: Optional[str] = None
    is_completed: bool = False

    class Config:
        from_attributes = True


class ApplicationResponse(BaseModel):
    """Full application response model."""
    id: int
    owner_id: str
    job_title: str
    company: str
    location: Optional[str] = None
    job_link: Optional[str] = None
    job_description: Optional[str] = None
    current_status: str
    notes: str = ""
    resume_feedback: Optional[str] = None
    cover_letter_generated: Optional[str] = None
    interview_prep: Optional[InterviewPrep] = None
    success_score: Optional[float] = None
    improvement_tips: Optional[List[str]] = None
    applied_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    status_history: List[StatusHistoryEntryResponse] = []
    communications: List[CommunicationResponse] = []
    reminders: List[ReminderResponse] = []

    class Config:
        from_attributes = True


class ReminderView(ReminderResponse):
    """A reminder together with the application it belongs to."""
    application_id: int
    job_title: str
    company: str


class CompanyCount(BaseModel):
    company: str
    count: int


class MonthCount(BaseModel):
    month: str
    count: int


class ApplicationStats(BaseModel):
    """Cross-application statistics for one period window."""
    period: StatsPeriod
    total_applications: int
    status_breakdown: Dict[str, int]
    company_breakdown: Dict[str, int]
    monthly_breakdown: Dict[str, int]
    interview_rate: float
    offer_rate: float
    top_companies: List[CompanyCount]
    timeline: List[MonthCount]


class TimelineEvent(BaseModel):
    """One event of an application's merged timeline.

    ``type`` is ``status_change``, ``communication`` or ``reminder``; the
    optional fields are filled according to the source.
    """
    type: str
    date: datetime
    title: str
    description: Optional[str] = None
    updated_by: Optional[str] = None
    contact_person: Optional[str] = None
    is_completed: Optional[bool] = None
    is_past: Optional[bool] = None


class ApplicationHeader(BaseModel):
    id: int
    job_title: str
    company: str
    current_status: str


class ApplicationTimeline(BaseModel):
    application: ApplicationHeader
    timeline: List[TimelineEvent]


class WeeklyGoal(BaseModel):
    target: int
    current: int
    progress: int


class DashboardSummary(BaseModel):
    """Headline numbers for a user's job search."""
    total_applications: int
    active_applications: int
    recent_applications: int
    interviews_scheduled: int
    upcoming_reminders: int
    overdue_reminders: int
    weekly_goal: WeeklyGoal
    upcoming_reminders_list: List[ReminderView]
    overdue_reminders_list: List[ReminderView]


class UserResponse(BaseModel):
    """User goal configuration response model."""
    id: str
    weekly_target: int
    current_week_count: int
    application_ids: List[int] = []

    class Config:
        from_attributes = True


class ErrorDetail(BaseModel):
    kind: str
    message: str


class OperationResult(BaseModel):
    """Envelope for every operation outcome.

    Attributes:
        success: Whether the operation completed
        message: Human-readable summary
        data: Operation payload on success
        count: Number of items when ``data`` is a list
        error: Classification and detail on failure
    """
    success: bool
    message: str
    data: Optional[Any] = None
    count: Optional[int] = None
    error: Optional[ErrorDetail] = None

    @classmethod
    def ok(cls, message: str, data: Any = None) -> "OperationResult":
        count = len(data) if isinstance(data, list) else None
        return cls(success=True, message=message, data=data, count=count)

    @classmethod
    def failure(cls, error: Exception, message: Optional[str] = None) -> "OperationResult":
        kind = getattr(error, "kind", "internal_error")
        detail = getattr(error, "message", None) or "The operation could not be completed"
        return cls(
            success=False,
            message=message or detail,
            error=ErrorDetail(kind=kind, message=detail),
        )
