"""Request bodies for the application tracking endpoints.

Required domain fields are optional here so that missing values reach the
tracking core and come back as a ``validation_error`` envelope.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from jobtracker.core.schemas import InterviewPrep


class ApplicationFields(BaseModel):
    """Profile, notes and generated-content fields of an application."""
    job_title: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    job_link: Optional[str] = None
    job_description: Optional[str] = None
    notes: Optional[str] = None
    resume_feedback: Optional[str] = None
    cover_letter_generated: Optional[str] = None
    interview_prep: Optional[InterviewPrep] = None
    success_score: Optional[float] = None
    improvement_tips: Optional[List[str]] = None


class ApplicationCreate(ApplicationFields):
    """Application creation model."""
    current_status: Optional[str] = None


class ApplicationUpdate(ApplicationFields):
    """Partial update; unknown keys such as ``status_history`` are dropped."""
    applied_at: Optional[datetime] = None


class StatusUpdate(BaseModel):
    status: Optional[str] = None
    note: Optional[str] = None


class NotesUpdate(BaseModel):
    notes: Optional[str] = None


class CommunicationCreate(BaseModel):
    mode: Optional[str] = None
    summary: Optional[str] = None
    contact_person: Optional[str] = None


class ReminderCreate(BaseModel):
    type: Optional[str] = None
    due_date: Optional[datetime] = None
    note: Optional[str] = None


class ReminderCompletionUpdate(BaseModel):
    is_completed: bool


class WeeklyGoalUpdate(BaseModel):
    weekly_target: Optional[int] = None
    current_week_count: Optional[int] = None
