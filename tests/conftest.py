# tests/conftest.py

from __future__ import annotations

from datetime import timedelta
from pathlib import Path
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from taskvault.application.services.auth_guard import AuthGuard
from taskvault.application.services.auth_service import AuthService
from taskvault.application.services.credential_service import CredentialService
from taskvault.application.services.session_manager import SessionManager
from taskvault.application.services.task_service import TaskService
from taskvault.core.app_factory import create_application
from taskvault.core.config import Settings
from taskvault.infrastructure.persistence.sqlite import SQLitePersistence

from .fakes import FakeClock

# Lowest bcrypt cost passlib accepts; keeps the suite fast.
TEST_HASH_ROUNDS = 4


@pytest.fixture()
def persistence(tmp_path: Path) -> Iterator[SQLitePersistence]:
    store = SQLitePersistence(tmp_path / "taskvault.sqlite3")
    try:
        yield store
    finally:
        store.close()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def credentials(persistence: SQLitePersistence) -> CredentialService:
    return CredentialService(persistence, hash_rounds=TEST_HASH_ROUNDS)


@pytest.fixture()
def sessions(persistence: SQLitePersistence, clock: FakeClock) -> SessionManager:
    return SessionManager(persistence, ttl=timedelta(hours=24), clock=clock)


@pytest.fixture()
def guard(sessions: SessionManager) -> AuthGuard:
    return AuthGuard(sessions)


@pytest.fixture()
def auth(credentials: CredentialService, sessions: SessionManager) -> AuthService:
    return AuthService(credentials, sessions)


@pytest.fixture()
def tasks(persistence: SQLitePersistence) -> TaskService:
    return TaskService(persistence)


@pytest.fixture()
def settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Settings:
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "api.sqlite3"))
    monkeypatch.setenv("PASSWORD_HASH_ROUNDS", str(TEST_HASH_ROUNDS))
    monkeypatch.setenv("SESSION_COOKIE_NAME", "sid")
    monkeypatch.setenv("SESSION_TTL_HOURS", "24")
    monkeypatch.delenv("SESSION_COOKIE_SECURE", raising=False)
    return Settings()


@pytest.fixture()
def client(settings: Settings) -> Iterator[TestClient]:
    app = create_application(settings)
    with TestClient(app) as test_client:
        yield test_client
