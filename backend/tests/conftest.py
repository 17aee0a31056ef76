"""
Pytest configuration and fixtures for backend tests.
"""

import os

# Must be set before the application settings are imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SEED_SAMPLE_DATA"] = "false"
os.environ["ENVIRONMENT"] = "test"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from rest_api.main import app
from rest_api.models import Base, User
from rest_api.seed import seed_sample_users
from shared.infrastructure.db import get_db


# SQLite in-memory database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(
    autocommit=False, autoflush=False, expire_on_commit=False, bind=engine
)

API = "/api/users"


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    Uses SQLite in-memory for isolation.
    """
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def override_db(db_session):
    """Dependency override yielding the test session."""
    def override_get_db():
        yield db_session

    return override_get_db


@pytest.fixture(scope="function")
def client(override_db):
    """
    Create a test client with database session override.
    """
    app.dependency_overrides[get_db] = override_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def seed_users(db_session):
    """The three sample users: two active, one inactive."""
    seed_sample_users(db_session)
    return list(db_session.query(User).order_by(User.id))


@pytest.fixture
def make_user(db_session):
    """Factory inserting a user directly through the session."""
    def _make_user(**overrides):
        values = {
            "name": "Test User",
            "email": f"user{db_session.query(User).count() + 1}@test.com",
            "status": "active",
            "age": 20,
        }
        values.update(overrides)
        user = User(**values)
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user
