import logging
import sqlite3
import threading
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator, List, Optional

from ...domain.errors import ConflictError, InfrastructureError
from ...domain.models import Session, Task, TaskStatus, User
from ...domain.ports.persistence import PersistenceGateway

logger = logging.getLogger(__name__)


class SQLitePersistence(PersistenceGateway):
    """SQLite-backed implementation of the persistence gateway.

    One connection is shared by every request thread and guarded by a lock.
    Each write runs in its own transaction and touches a single row.
    """

    def __init__(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        try:
            self._conn = sqlite3.connect(path, check_same_thread=False)
        except sqlite3.Error as exc:
            raise InfrastructureError(f"Unable to open database at {path}") from exc
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.Lock()
        self._initialize()

    def _initialize(self) -> None:
        with self._write() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS users (
                    id TEXT PRIMARY KEY,
                    username TEXT NOT NULL UNIQUE,
                    password_hash TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS sessions (
                    token_digest TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    expires_at TEXT NOT NULL,
                    created_at TEXT NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_sessions_expires_at
                    ON sessions(expires_at);

                CREATE TABLE IF NOT EXISTS tasks (
                    id TEXT PRIMARY KEY,
                    owner_id TEXT NOT NULL,
                    title TEXT NOT NULL,
                    description TEXT,
                    status TEXT NOT NULL DEFAULT 'pending',
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_tasks_owner_id
                    ON tasks(owner_id);
                """
            )

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    @contextmanager
    def _read(self) -> Iterator[sqlite3.Connection]:
        try:
            with self._lock:
                yield self._conn
        except sqlite3.Error as exc:
            logger.debug("SQLite read failed: %s", exc)
            raise InfrastructureError("Database read failed.") from exc

    @contextmanager
    def _write(self) -> Iterator[sqlite3.Connection]:
        try:
            with self._lock, self._conn:
                yield self._conn
        except sqlite3.Error as exc:
            logger.debug("SQLite write failed: %s", exc)
            raise InfrastructureError("Database write failed.") from exc

    # UserStore API ---------------------------------------------------------
    def get_user_by_username(self, username: str) -> Optional[User]:
        with self._read() as conn:
            row = conn.execute("SELECT * FROM users WHERE username = ?", (username,)).fetchone()
        return self._row_to_user(row) if row else None

    def create_user(self, username: str, password_hash: str) -> User:
        user_id = self._new_id()
        now = self._now()
        with self._write() as conn:
            try:
                conn.execute(
                    """
                    INSERT INTO users (id, username, password_hash, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (user_id, username, password_hash, now, now),
                )
            except sqlite3.IntegrityError as exc:
                raise ConflictError(f"Username {username!r} is already taken.") from exc
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        if not row:
            raise InfrastructureError("Failed to persist user.")
        return self._row_to_user(row)

    # SessionStore API ------------------------------------------------------
    def create_session(self, token_digest: str, user_id: str, expires_at: datetime) -> Session:
        now = self._now()
        with self._write() as conn:
            conn.execute(
                """
                INSERT INTO sessions (token_digest, user_id, expires_at, created_at)
                VALUES (?, ?, ?, ?)
                """,
                (token_digest, user_id, self._format_datetime(expires_at), now),
            )
            row = conn.execute(
                "SELECT * FROM sessions WHERE token_digest = ?", (token_digest,)
            ).fetchone()
        if not row:
            raise InfrastructureError("Failed to persist session.")
        return self._row_to_session(row)

    def get_session(self, token_digest: str) -> Optional[Session]:
        with self._read() as conn:
            row = conn.execute(
                "SELECT * FROM sessions WHERE token_digest = ?", (token_digest,)
            ).fetchone()
        return self._row_to_session(row) if row else None

    def delete_session(self, token_digest: str) -> None:
        with self._write() as conn:
            conn.execute("DELETE FROM sessions WHERE token_digest = ?", (token_digest,))

    # TaskStore API ---------------------------------------------------------
    def create_task(
        self,
        owner_id: str,
        title: str,
        description: Optional[str],
        status: TaskStatus,
    ) -> Task:
        task_id = self._new_id()
        now = self._now()
        with self._write() as conn:
            conn.execute(
                """
                INSERT INTO tasks (id, owner_id, title, description, status, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (task_id, owner_id, title, description, status.value, now, now),
            )
            row = conn.execute("SELECT * FROM tasks WHERE id = ?", (task_id,)).fetchone()
        if not row:
            raise InfrastructureError("Failed to persist task.")
        return self._row_to_task(row)

    def get_task(self, owner_id: str, task_id: str) -> Optional[Task]:
        with self._read() as conn:
            row = conn.execute(
                "SELECT * FROM tasks WHERE id = ? AND owner_id = ?", (task_id, owner_id)
            ).fetchone()
        return self._row_to_task(row) if row else None

    def get_tasks(self, owner_id: str) -> List[Task]:
        with self._read() as conn:
            rows = conn.execute(
                "SELECT * FROM tasks WHERE owner_id = ? ORDER BY created_at ASC, rowid ASC",
                (owner_id,),
            ).fetchall()
        return [self._row_to_task(row) for row in rows]

    def update_task(
        self,
        owner_id: str,
        task_id: str,
        *,
        title: Optional[str] = None,
        description: Optional[str] = None,
        status: Optional[TaskStatus] = None,
    ) -> Optional[Task]:
        updates = []
        params: List[Any] = []
        if title is not None:
            updates.append("title = ?")
            params.append(title)
        if description is not None:
            updates.append("description = ?")
            params.append(description)
        if status is not None:
            updates.append("status = ?")
            params.append(status.value)

        # updated_at is always written, so an empty update still matches on ownership.
        updates.append("updated_at = ?")
        params.append(self._now())
        params.extend([task_id, owner_id])
        statement = f"UPDATE tasks SET {', '.join(updates)} WHERE id = ? AND owner_id = ?"
        with self._write() as conn:
            cur = conn.execute(statement, params)
            if cur.rowcount == 0:
                return None
            row = conn.execute("SELECT * FROM tasks WHERE id = ?", (task_id,)).fetchone()
        return self._row_to_task(row) if row else None

    def delete_task(self, owner_id: str, task_id: str) -> bool:
        with self._write() as conn:
            cur = conn.execute(
                "DELETE FROM tasks WHERE id = ? AND owner_id = ?", (task_id, owner_id)
            )
            return cur.rowcount > 0

    # Helpers ----------------------------------------------------------------
    @staticmethod
    def _new_id() -> str:
        return uuid.uuid4().hex

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).replace(microsecond=0).isoformat()

    @staticmethod
    def _format_datetime(value: datetime) -> str:
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat()

    @staticmethod
    def _parse_datetime(value: str) -> datetime:
        result = datetime.fromisoformat(value)
        if result.tzinfo is None:
            return result.replace(tzinfo=timezone.utc)
        return result.astimezone(timezone.utc)

    def _row_to_user(self, row: sqlite3.Row) -> User:
        return User(
            id=row["id"],
            username=row["username"],
            password_hash=row["password_hash"],
            created_at=self._parse_datetime(row["created_at"]),
            updated_at=self._parse_datetime(row["updated_at"]),
        )

    def _row_to_session(self, row: sqlite3.Row) -> Session:
        return Session(
            token_digest=row["token_digest"],
            user_id=row["user_id"],
            expires_at=self._parse_datetime(row["expires_at"]),
            created_at=self._parse_datetime(row["created_at"]),
        )

    def _row_to_task(self, row: sqlite3.Row) -> Task:
        return Task(
            id=row["id"],
            owner_id=row["owner_id"],
            title=row["title"],
            description=row["description"],
            status=TaskStatus(row["status"]),
            created_at=self._parse_datetime(row["created_at"]),
            updated_at=self._parse_datetime(row["updated_at"]),
        )
