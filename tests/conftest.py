# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from taskist.config import Settings
from taskist.db import Database
from taskist.main import create_app
from taskist.services.auth import Authenticator
from taskist.services.tasks import TaskStore
from taskist.services.users import UserStore


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """Settings pointing at a throwaway SQLite file, with a cheap bcrypt cost."""
    return Settings(
        env="test",
        database_url=f"sqlite:///{tmp_path / 'data' / 'tasks.db'}",
        jwt_secret="test-secret",
        bcrypt_rounds=4,
        password_min_length=6,
        auto_create_tables=True,
        log_level="WARNING",
    )


@pytest.fixture()
def database(settings: Settings) -> Iterator[Database]:
    db = Database(settings)
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture()
def session(database: Database) -> Iterator[Session]:
    db = database.session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def authenticator(settings: Settings, session: Session) -> Authenticator:
    return Authenticator(settings, UserStore(session))


@pytest.fixture()
def task_store(session: Session) -> TaskStore:
    return TaskStore(session)


@pytest.fixture()
def client(settings: Settings) -> Iterator[TestClient]:
    with TestClient(create_app(settings)) as test_client:
        yield test_client


@pytest.fixture()
def auth_headers(client: TestClient) -> Callable[[str], dict[str, str]]:
    """Register a user by email and return the Authorization header for them."""

    def _register(email: str, password: str = "secret123") -> dict[str, str]:
        response = client.post("/api/auth/register", json={"email": email, "password": password})
        assert response.status_code == 201, response.text
        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _register
