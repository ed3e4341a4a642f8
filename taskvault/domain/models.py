from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class TaskStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"

    def toggled(self) -> "TaskStatus":
        return TaskStatus.PENDING if self is TaskStatus.COMPLETED else TaskStatus.COMPLETED


@dataclass(slots=True)
class User:
    id: str
    username: str
    password_hash: str = field(repr=False)
    created_at: datetime
    updated_at: datetime


@dataclass(slots=True)
class Task:
    id: str
    owner_id: str
    title: str
    description: Optional[str]
    status: TaskStatus
    created_at: datetime
    updated_at: datetime


@dataclass(slots=True)
class Session:
    """Stored session record. ``token_digest`` is the SHA-256 of the cookie value."""

    token_digest: str
    user_id: str
    expires_at: datetime
    created_at: datetime


@dataclass(slots=True)
class SessionHandle:
    """Session as handed to the client: the raw token plus its expiry."""

    token: str
    user_id: str
    expires_at: datetime
