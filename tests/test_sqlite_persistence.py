# tests/test_sqlite_persistence.py

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from taskvault.domain.errors import ConflictError, InfrastructureError
from taskvault.domain.models import TaskStatus
from taskvault.infrastructure.persistence.sqlite import SQLitePersistence


def test_username_uniqueness_is_enforced_by_the_store(persistence: SQLitePersistence) -> None:
    persistence.create_user("ana", "hash-1")
    with pytest.raises(ConflictError):
        persistence.create_user("ana", "hash-2")
    assert persistence.get_user_by_username("ana").password_hash == "hash-1"


def test_usernames_are_case_sensitive(persistence: SQLitePersistence) -> None:
    lower = persistence.create_user("ana", "h")
    upper = persistence.create_user("Ana", "h")
    assert lower.id != upper.id
    assert persistence.get_user_by_username("ANA") is None


def test_task_queries_are_filtered_by_owner(persistence: SQLitePersistence) -> None:
    task = persistence.create_task("owner-a", "write report", None, TaskStatus.PENDING)

    assert persistence.get_task("owner-b", task.id) is None
    assert persistence.get_tasks("owner-b") == []
    assert persistence.update_task("owner-b", task.id, title="hijacked") is None
    assert persistence.delete_task("owner-b", task.id) is False
    assert persistence.get_task("owner-a", task.id).title == "write report"


def test_empty_update_still_requires_ownership(persistence: SQLitePersistence) -> None:
    task = persistence.create_task("owner-a", "t", None, TaskStatus.PENDING)
    assert persistence.update_task("owner-b", task.id) is None
    assert persistence.update_task("owner-a", task.id) is not None


def test_sessions_survive_reopening_the_database(tmp_path: Path) -> None:
    path = tmp_path / "restart.sqlite3"
    expires_at = datetime(2030, 1, 1, tzinfo=timezone.utc)
    first = SQLitePersistence(path)
    first.create_session("digest", "user-1", expires_at)
    first.close()

    second = SQLitePersistence(path)
    try:
        session = second.get_session("digest")
    finally:
        second.close()
    assert session is not None
    assert session.user_id == "user-1"
    assert session.expires_at == expires_at


def test_closed_store_raises_infrastructure_error(tmp_path: Path) -> None:
    store = SQLitePersistence(tmp_path / "closed.sqlite3")
    store.close()
    with pytest.raises(InfrastructureError):
        store.get_session("anything")
    with pytest.raises(InfrastructureError):
        store.delete_session("anything")
