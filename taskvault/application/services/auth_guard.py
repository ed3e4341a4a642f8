from typing import Optional

from ...domain.errors import AuthenticationError
from .session_manager import SessionManager


class AuthGuard:
    """Resolves a session token to a user id or rejects the caller.

    Missing, unknown and expired tokens all fail the same way.
    """

    def __init__(self, session_manager: SessionManager) -> None:
        self._sessions = session_manager

    def require_user_id(self, token: Optional[str]) -> str:
        user_id = self._sessions.resolve_session(token)
        if user_id is None:
            raise AuthenticationError("Unauthorized")
        return user_id
