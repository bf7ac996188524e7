"""Pytest fixtures and configuration for studioboard tests."""

import os

# Keep the app's module-level engine off the filesystem
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
import uuid
from datetime import datetime, timedelta
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient
from unittest.mock import MagicMock

from studioboard.database.database import Base
from studioboard.database.repository import TaskRepository
from studioboard.integrations.tasks_api import TasksApiClient
from studioboard.models.actor import Actor, ActorRole
from studioboard.models.task import Task, TaskStatus, TaskPriority
from studioboard.board.notifications import Notifier


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(scope="function")
def db_session():
    """Create a database session for testing.

    Uses an in-memory SQLite database that is created fresh for each test.
    """
    from studioboard.database import models  # noqa: F401

    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )
    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def task_repository(db_session: Session):
    """Create a TaskRepository instance for testing."""
    return TaskRepository(db_session)


@pytest.fixture
def test_user_id():
    return "user-123"


@pytest.fixture
def admin_actor():
    return Actor(user_id="admin-1", role=ActorRole.ADMIN, name="Admin")


@pytest.fixture
def user_actor(test_user_id):
    return Actor(user_id=test_user_id, role=ActorRole.USER, name="Test User")


@pytest.fixture
def sample_task_base(test_user_id):
    """Base task data for creating test tasks.

    Returns a dict with default task attributes that can be overridden.
    """
    now = datetime(2026, 3, 10, 12, 0, 0)
    return {
        "id": "task-1",
        "title": "Test Task",
        "description": "Test description",
        "status": TaskStatus.TODO,
        "priority": TaskPriority.MEDIUM,
        "notes": "",
        "deliverables": "",
        "assigned_user_id": test_user_id,
        "service_request_id": "sr-1",
        "due_date": None,
        "created_at": now,
        "updated_at": now,
    }


@pytest.fixture
def make_task(sample_task_base):
    """Factory for tasks with unique ids and overridable fields."""
    counter = {"n": 0}

    def _make(**overrides) -> Task:
        counter["n"] += 1
        data = {
            **sample_task_base,
            "id": f"task-{counter['n']}-{uuid.uuid4().hex[:6]}",
            "created_at": sample_task_base["created_at"] + timedelta(minutes=counter["n"]),
        }
        data.update(overrides)
        return Task(**data)

    return _make


@pytest.fixture
def sample_task(make_task):
    return make_task()


@pytest.fixture
def notifier():
    return Notifier()


@pytest.fixture
def mock_client():
    """TasksApiClient double; no network."""
    client = MagicMock(spec=TasksApiClient)
    client.fetch_all.return_value = []
    client.update_task.return_value = None
    client.delete_task.return_value = "Task deleted successfully"
    return client


@pytest.fixture
def admin_token(admin_actor):
    from studioboard.auth.jwt import create_access_token
    return create_access_token(admin_actor.user_id, user_type="admin", name="Admin")


@pytest.fixture
def user_token(test_user_id):
    from studioboard.auth.jwt import create_access_token
    return create_access_token(test_user_id, user_type="user", role="editor", name="Test User")


@pytest.fixture
def test_client(db_session: Session):
    """Create a FastAPI test client with overridden database dependency."""
    from studioboard.api.app import app
    from studioboard.database.database import get_db

    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Don't close the session here, let the fixture handle it

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
