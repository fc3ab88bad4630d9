"""Pytest configuration and fixtures."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "test")

from collections.abc import Generator  # noqa: E402
from typing import Any  # noqa: E402

import pytest  # noqa: E402
from dependency_injector import providers  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from smartalk import models  # noqa: E402
from smartalk.core import container  # noqa: E402
from smartalk.database import Base, get_db  # noqa: E402
from smartalk.infrastructure.common.background import InlineDispatcher  # noqa: E402
from smartalk.main import app  # noqa: E402

# Test database URL (in-memory SQLite)
TEST_DATABASE_URL = "sqlite://"

# One shared connection so request and background sessions see the same data
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

# Create test session factory
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

UNIT_GROUP_ID = 1
UNIT_GROUP_SIZE = 15


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    """Create a fresh database session for each test."""
    # Create all tables
    Base.metadata.create_all(bind=test_engine)

    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()
        # Drop all tables after test
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def client(db_session: Session) -> Generator[TestClient, Any, None]:
    """Create a test client with database session and synchronous background work."""

    def override_get_db() -> Generator[Session, None, None]:
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    container.dispatcher.override(providers.Object(InlineDispatcher()))
    container.session_factory.override(providers.Object(TestSessionLocal))
    # In-memory learning state must not leak between tests
    container.focus_mode_controller.reset()
    container.session_tracker.reset()
    container.user_locks.reset()

    with TestClient(app) as test_client:
        yield test_client

    container.session_factory.reset_override()
    container.dispatcher.reset_override()
    app.dependency_overrides.clear()


@pytest.fixture
def test_user(db_session: Session) -> models.User:
    """Create a test user."""
    user = models.User(name="Test Learner", email="learner@example.com")
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def other_user(db_session: Session) -> models.User:
    user = models.User(name="Other Learner", email="other@example.com")
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def learning_items(db_session: Session) -> list[models.LearningItem]:
    """Create a unit group of 15 required keywords."""
    items = [
        models.LearningItem(
            unit_group_id=UNIT_GROUP_ID,
            word=f"keyword-{index}",
            sort_order=index,
            required=True,
        )
        for index in range(1, UNIT_GROUP_SIZE + 1)
    ]
    db_session.add_all(items)
    db_session.commit()
    for item in items:
        db_session.refresh(item)
    return items
