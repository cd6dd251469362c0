"""Test configuration and fixtures."""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from jobtracker.app.main import app
from jobtracker.app.dependencies import create_access_token, get_db
from jobtracker.core.database import create_db_engine, init_database


@pytest.fixture
def temp_db(tmp_path):
    """Create temporary test database."""
    engine = create_db_engine(f"sqlite:///{tmp_path / 'api.db'}")
    init_database(engine)

    TestingSessionLocal = sessionmaker(
        autoflush=False,
        expire_on_commit=False,
        bind=engine
    )

    yield TestingSessionLocal

    engine.dispose()


@pytest.fixture
def test_db(temp_db):
    """Get database session for each test."""
    db = temp_db()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client(test_db):
    """Create test client with database dependency override."""
    def override_get_db():
        try:
            yield test_db
        finally:
            test_db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Build bearer headers for a user id."""
    def _headers(user_id="user-1"):
        return {"Authorization": f"Bearer {create_access_token(user_id)}"}
    return _headers


@pytest.fixture
def created_application(client, auth_headers):
    """An application created through the API by ``user-1``."""
    response = client.post(
        "/api/applications/",
        json={"job_title": "Engineer", "company": "Acme", "location": "Berlin"},
        headers=auth_headers(),
    )
    assert response.status_code == 201
    return response.json()["data"]
