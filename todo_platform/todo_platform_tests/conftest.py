"""
Pytest configuration for the todo service tests.

Points the service at a throwaway SQLite file before any application
module is imported, and provides the shared fixtures.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test_todo.db")
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
from fastapi.testclient import TestClient

from todo_platform.todo_platform.todo_service.auth import TokenService
from todo_platform.todo_platform.todo_service.db import Base, engine, SessionLocal
from todo_platform.todo_platform.todo_service.main import app


@pytest.fixture(autouse=True)
def reset_database():
    # Drop all tables and recreate them before each test
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)


@pytest.fixture(scope="session")
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db_session():
    """Create a database session for testing."""
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def token_service():
    return TokenService("test-secret")
