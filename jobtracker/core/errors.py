"""Error kinds raised by the tracking core.

Each error carries a ``kind`` string that the API layer maps onto a status
code, so that callers can tell "not yours" from "doesn't exist" from
"invalid input".
"""
from typing import Optional


class TrackerError(Exception):
    """Base class for all business-rule failures."""
    kind = "tracker_error"
    default_message = "Operation failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message}


class ValidationError(TrackerError):
    """A required field is missing or a value is outside its allowed set."""
    kind = "validation_error"
    default_message = "Invalid input"


class NotFound(TrackerError):
    """A user, application or reminder does not exist."""
    kind = "not_found"
    default_message = "Not found"


class AccessDenied(TrackerError):
    """The acting user does not own the referenced application."""
    kind = "access_denied"
    default_message = "Access denied to this application"


class ConsistencyRisk(TrackerError):
    """An application row and its owner's reference set may disagree.

    Raised when the second of the two writes that create or delete an
    application (the row, then the owner's reference) did not complete.
    """
    kind = "consistency_risk"
    default_message = "Application and owner reference may be out of sync"


class InternalError(TrackerError):
    """Storage or other unexpected failure; the operation did not complete."""
    kind = "internal_error"
    default_message = "The operation could not be completed"
