"""FastAPI application models."""

from .applications import (
    ApplicationCreate,
    ApplicationUpdate,
    StatusUpdate,
    NotesUpdate,
    CommunicationCreate,
    ReminderCreate,
    ReminderCompletionUpdate,
    WeeklyGoalUpdate,
)

__all__ = [
    'ApplicationCreate',
    'ApplicationUpdate',
    'StatusUpdate',
    'NotesUpdate',
    'CommunicationCreate',
    'ReminderCreate',
    'ReminderCompletionUpdate',
    'WeeklyGoalUpdate',
]
