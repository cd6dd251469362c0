"""Core functionality for the jobtracker package."""

from .logging import setup_logging
from .config import Settings, get_settings
from .database import Base, get_engine, get_session, init_database, utcnow
from .errors import (
    TrackerError,
    ValidationError,
    NotFound,
    AccessDenied,
    ConsistencyRisk,
    InternalError,
)

__all__ = [
    'setup_logging',
    'Settings',
    'get_settings',
    'Base',
    'get_engine',
    'get_session',
    'init_database',
    'utcnow',
    'TrackerError',
    'ValidationError',
    'NotFound',
    'AccessDenied',
    'ConsistencyRisk',
    'InternalError',
]
