"""Database configuration and session management."""
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from jobtracker.core.config import get_settings
from jobtracker.core.logging import setup_logging

logger = setup_logging('core_database')

# Initialize base class for declarative models
Base = declarative_base()

_engine: Optional[Engine] = None
SessionFactory = sessionmaker(autoflush=False, expire_on_commit=False)


def utcnow() -> datetime:
    """Current time as a naive UTC datetime, the form every column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC; naive values are assumed UTC."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def create_db_engine(database_url: str) -> Engine:
    """Create an engine, sharing one connection for in-memory SQLite."""
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url or database_url == "sqlite://":
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, **kwargs)
    return create_engine(database_url, pool_pre_ping=True)


def get_engine() -> Engine:
    """Return the process-wide engine, creating it on first use."""
    global _engine
    if _engine is None:
        database_url = get_settings().database_url
        _engine = create_db_engine(database_url)
        SessionFactory.configure(bind=_engine)
        logger.info(f"Database engine created for {_engine.url.render_as_string(hide_password=True)}")
    return _engine


def init_database(engine: Optional[Engine] = None) -> Engine:
    """Create all tables that do not exist yet."""
    # Importing the models registers their tables on Base.metadata
    from jobtracker.core import models  # noqa: F401

    engine = engine or get_engine()
    try:
        Base.metadata.create_all(engine)
    except Exception as e:
        logger.error(f"Error initializing database: {str(e)}")
        raise
    logger.info("Database tables ready")
    return engine


@contextmanager
def get_session() -> Iterator[Session]:
    """Get a managed database session.

    Commits on success, rolls back on any exception, always closes.
    """
    get_engine()
    session = SessionFactory()
    try:
        yield session
        session.commit()
    except Exception as e:
        session.rollback()
        logger.error(f"Error in database session: {str(e)}")
        raise
    finally:
        session.close()
