from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from ...domain.errors import AuthenticationError, ConflictError, ValidationError
from ...domain.models import SessionHandle, User
from .credential_service import CredentialService
from .session_manager import SessionManager

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class LoginResult:
    user: User
    session: SessionHandle
    created: bool


class AuthService:
    """Coordinates login with implicit registration, and logout."""

    def __init__(self, credentials: CredentialService, sessions: SessionManager) -> None:
        self._credentials = credentials
        self._sessions = sessions

    @property
    def session_ttl(self) -> timedelta:
        return self._sessions.ttl

    def check(self, token: Optional[str]) -> bool:
        return self._sessions.resolve_session(token) is not None

    def login(
        self,
        username: Optional[str],
        password: Optional[str],
        current_token: Optional[str] = None,
    ) -> LoginResult:
        """Log in, creating the account when the username has never been seen.

        A wrong password raises ``AuthenticationError`` and leaves any session
        the client already holds untouched. On success the previously held
        session, if any, is replaced by a fresh one.
        """
        if not username or not username.strip() or not password:
            raise ValidationError("Username and password are required")

        created = False
        user = self._credentials.find_by_username(username)
        if user is None:
            try:
                user = self._credentials.create_user(username, password)
                created = True
            except ConflictError:
                # Lost a race with a concurrent registration of the same name.
                user = self._credentials.find_by_username(username)
                if user is None:
                    raise

        if not created and not self._credentials.verify_secret(user, password):
            logger.info("Rejected login for %s: invalid credentials", username)
            raise AuthenticationError("Invalid credentials")

        session = self._sessions.create_session(user.id)
        if current_token:
            self._sessions.destroy_session(current_token)
        logger.info("User %s logged in (new account: %s)", user.id, created)
        return LoginResult(user=user, session=session, created=created)

    def logout(self, token: Optional[str]) -> None:
        self._sessions.destroy_session(token)
