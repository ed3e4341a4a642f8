from __future__ import annotations

import logging
from typing import Optional

from passlib.context import CryptContext

from ...domain.errors import ValidationError
from ...domain.models import User
from ...domain.ports.persistence import UserStore

logger = logging.getLogger(__name__)


class CredentialService:
    """Owns user records and password verification."""

    def __init__(self, users: UserStore, hash_rounds: int = 12) -> None:
        self._users = users
        self._pwd = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=hash_rounds,
        )

    def find_by_username(self, username: str) -> Optional[User]:
        return self._users.get_user_by_username(username)

    def create_user(self, username: str, plaintext_secret: str) -> User:
        """Hash the secret, then persist the account.

        A duplicate username surfaces as ``ConflictError`` from the store's
        unique constraint, including when two registrations race.
        """
        if not username or not username.strip():
            raise ValidationError("Username is required.")
        if not plaintext_secret:
            raise ValidationError("Password is required.")
        hashed = self._pwd.hash(plaintext_secret)
        user = self._users.create_user(username=username, password_hash=hashed)
        logger.info("Created user account %s (%s)", user.id, username)
        return user

    def verify_secret(self, user: User, plaintext_secret: str) -> bool:
        try:
            return self._pwd.verify(plaintext_secret, user.password_hash)
        except (TypeError, ValueError) as exc:
            logger.warning("Stored password hash for user %s is unreadable: %s", user.id, exc)
            return False
