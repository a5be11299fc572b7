import pytest
from fastapi.testclient import TestClient

from exercise_tracker_api.app.core.config import Settings
from exercise_tracker_api.app.core.db import Database
from exercise_tracker_api.app.main import PROJECT_ROOT, create_app


@pytest.fixture
def settings():
    """Settings for an app backed by an in-memory store."""
    return Settings(
        database_url=":memory:",
        static_dir=str(PROJECT_ROOT / "public"),
        log_level="WARNING",
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    """Test client running inside the app lifespan (store connected)."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db():
    database = Database(":memory:")
    database.connect()
    yield database
    database.close()


@pytest.fixture
def create_user(client):
    def _create(username="fcc_test"):
        response = client.post("/api/users", json={"username": username})
        assert response.status_code == 200
        return response.json()

    return _create


@pytest.fixture
def add_exercise(client):
    def _add(user_id, **body):
        body.setdefault("description", "run")
        body.setdefault("duration", 30)
        response = client.post(f"/api/users/{user_id}/exercises", json=body)
        assert response.status_code == 200, response.text
        return response.json()

    return _add
