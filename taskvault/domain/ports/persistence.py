from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Protocol

from ..models import Session, Task, TaskStatus, User


class UserStore(Protocol):
    """Persistence functions related to user accounts."""

    def get_user_by_username(self, username: str) -> Optional[User]:
        ...

    def create_user(self, username: str, password_hash: str) -> User:
        ...


class SessionStore(Protocol):
    """Persistence functions for login sessions, keyed by token digest."""

    def create_session(self, token_digest: str, user_id: str, expires_at: datetime) -> Session:
        ...

    def get_session(self, token_digest: str) -> Optional[Session]:
        ...

    def delete_session(self, token_digest: str) -> None:
        ...


class TaskStore(Protocol):
    """Owner-scoped persistence functions for tasks."""

    def create_task(
        self,
        owner_id: str,
        title: str,
        description: Optional[str],
        status: TaskStatus,
    ) -> Task:
        ...

    def get_task(self, owner_id: str, task_id: str) -> Optional[Task]:
        ...

    def get_tasks(self, owner_id: str) -> List[Task]:
        ...

    def update_task(
        self,
        owner_id: str,
        task_id: str,
        *,
        title: Optional[str] = None,
        description: Optional[str] = None,
        status: Optional[TaskStatus] = None,
    ) -> Optional[Task]:
        ...

    def delete_task(self, owner_id: str, task_id: str) -> bool:
        ...


class PersistenceGateway(UserStore, SessionStore, TaskStore, Protocol):
    """Composite gateway combining every persistence concern used by the app."""

    def close(self) -> None:
        ...
