"""
Pytest configuration and fixtures.

- Unit tests call the scheduling core directly (no database)
- API tests use FastAPI's TestClient against a throwaway SQLite file,
  with the session dependency pointed at it
"""

import os
import tempfile
from datetime import UTC, datetime

# Settings are read at import time; configure before anything from app is imported
_TMP_DIR = tempfile.mkdtemp(prefix="scheduling-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP_DIR}/unused.db"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["ENV"] = "test"
os.environ["DEFAULT_TIMEZONE"] = "UTC"
os.environ["AUTO_CREATE_TABLES"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel

import app.models  # noqa: F401 - register tables
from app.core.db import get_session
from app.main import app as fastapi_app


def utc(value: str) -> datetime:
    """Parse an API timestamp; naive values are UTC (that is how rows are stored)."""
    dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


@pytest.fixture
def client(tmp_path):
    db_file = tmp_path / "test.db"
    sync_engine = create_engine(f"sqlite:///{db_file}")
    SQLModel.metadata.create_all(sync_engine)
    sync_engine.dispose()

    engine = create_async_engine(f"sqlite+aiosqlite:///{db_file}", poolclass=NullPool)
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)

    async def override_get_session():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    fastapi_app.dependency_overrides[get_session] = override_get_session
    with TestClient(fastapi_app) as test_client:
        yield test_client
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def make_user(client):
    """Sign up a therapist and return auth headers for them."""
    counter = {"n": 0}

    def _make(email: str | None = None, password: str = "correct-horse-battery"):
        counter["n"] += 1
        email = email or f"therapist{counter['n']}@example.com"
        response = client.post(
            "/api/v1/auth/signup",
            json={"email": email, "password": password, "full_name": "Test Therapist"},
        )
        assert response.status_code == 201, response.text
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    return _make


@pytest.fixture
def auth_headers(make_user):
    return make_user()
