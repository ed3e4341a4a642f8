from __future__ import annotations

import hashlib
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from ...domain.models import SessionHandle
from ...domain.ports.persistence import SessionStore

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionManager:
    """Issues, resolves and destroys persisted login sessions.

    Only a SHA-256 digest of each token is stored. Expiry is absolute and
    checked when a token is resolved; nothing sweeps the table.
    """

    def __init__(
        self,
        sessions: SessionStore,
        ttl: timedelta = timedelta(hours=24),
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._sessions = sessions
        self._ttl = ttl
        self._clock = clock

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def create_session(self, user_id: str) -> SessionHandle:
        token = secrets.token_urlsafe(32)
        expires_at = (self._clock() + self._ttl).replace(microsecond=0)
        self._sessions.create_session(self._digest(token), user_id, expires_at)
        logger.debug("Issued session for user %s expiring at %s", user_id, expires_at.isoformat())
        return SessionHandle(token=token, user_id=user_id, expires_at=expires_at)

    def resolve_session(self, token: Optional[str]) -> Optional[str]:
        if not token:
            return None
        digest = self._digest(token)
        session = self._sessions.get_session(digest)
        if session is None:
            return None
        if session.expires_at <= self._clock():
            self._sessions.delete_session(digest)
            logger.debug("Discarded expired session for user %s", session.user_id)
            return None
        return session.user_id

    def destroy_session(self, token: Optional[str]) -> None:
        if not token:
            return
        self._sessions.delete_session(self._digest(token))

    @staticmethod
    def _digest(token: str) -> str:
        return hashlib.sha256(token.encode("utf-8")).hexdigest()
