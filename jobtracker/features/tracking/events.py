"""Append-only event log of an application.

The only writers of ``Application.status_history`` and
``Application.communications``. Entries are appended, never edited or
removed, so the history doubles as the audit trail of the application.
"""
from datetime import datetime
from typing import Optional

from jobtracker.core.models import Application, Communication, StatusHistoryEntry

CREATION_NOTE = "Application created"


def default_status_note(status: str) -> str:
    return f"Status updated to {status}"


def record_status_change(
    application: Application,
    status: str,
    updated_by: str,
    note: Optional[str],
    at: datetime,
) -> StatusHistoryEntry:
    """Append a status history entry and make it the current status.

    Setting the status the application already has still appends an entry.
    """
    entry = StatusHistoryEntry(
        status=status,
        updated_at=at,
        updated_by=updated_by,
        note=note or default_status_note(status),
    )
    application.status_history.append(entry)
    application.current_status = status
    return entry


def record_communication(
    application: Application,
    mode: Optional[str],
    summary: Optional[str],
    contact_person: Optional[str],
    at: datetime,
) -> Communication:
    """Append a communication record dated ``at``."""
    communication = Communication(
        date=at,
        mode=mode,
        summary=summary,
        contact_person=contact_person,
    )
    application.communications.append(communication)
    return communication
