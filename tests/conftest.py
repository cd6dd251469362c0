"""Fixtures for the tracking core tests."""
import pytest
from sqlalchemy.orm import sessionmaker

from jobtracker.core.database import create_db_engine, init_database
from jobtracker.features.tracking.applications import create_application
from jobtracker.features.tracking.users import register_user



@pytest.fixture
def engine():
    """Fresh in-memory database per test."""
    engine = create_db_engine("sqlite://")
    init_database(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def user(session):
    return register_user(session, "user-1", weekly_target=5)


@pytest.fixture
def other_user(session):
    return register_user(session, "user-2")


@pytest.fixture
def application(session, user):
    """An Engineer application at Acme owned by ``user``."""
    return create_application(session, user.id, {"job_title": "Engineer", "company": "Acme"})
