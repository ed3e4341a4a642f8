# tests/test_session_manager.py

from __future__ import annotations

import hashlib

import pytest

from taskvault.application.services.auth_guard import AuthGuard
from taskvault.application.services.session_manager import SessionManager
from taskvault.domain.errors import AuthenticationError
from taskvault.infrastructure.persistence.sqlite import SQLitePersistence

from .fakes import FakeClock


def _digest(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def test_create_and_resolve(sessions: SessionManager, clock: FakeClock) -> None:
    handle = sessions.create_session("user-1")

    assert handle.user_id == "user-1"
    assert len(handle.token) >= 32
    assert (handle.expires_at - clock()).total_seconds() == 24 * 3600
    assert sessions.resolve_session(handle.token) == "user-1"


def test_tokens_are_unique(sessions: SessionManager) -> None:
    tokens = {sessions.create_session("user-1").token for _ in range(20)}
    assert len(tokens) == 20


def test_only_the_token_digest_is_stored(
    sessions: SessionManager, persistence: SQLitePersistence
) -> None:
    handle = sessions.create_session("user-1")
    assert persistence.get_session(handle.token) is None
    assert persistence.get_session(_digest(handle.token)) is not None


def test_unknown_and_empty_tokens_resolve_to_none(sessions: SessionManager) -> None:
    assert sessions.resolve_session("not-a-token") is None
    assert sessions.resolve_session("") is None
    assert sessions.resolve_session(None) is None


def test_expired_session_resolves_to_none_before_purge(
    sessions: SessionManager, persistence: SQLitePersistence, clock: FakeClock
) -> None:
    handle = sessions.create_session("user-1")
    clock.advance(hours=24)

    assert persistence.get_session(_digest(handle.token)) is not None
    assert sessions.resolve_session(handle.token) is None
    assert persistence.get_session(_digest(handle.token)) is None


def test_session_is_valid_until_just_before_expiry(
    sessions: SessionManager, clock: FakeClock
) -> None:
    handle = sessions.create_session("user-1")
    clock.advance(hours=23, minutes=59, seconds=59)
    assert sessions.resolve_session(handle.token) == "user-1"


def test_expiry_is_not_extended_by_activity(sessions: SessionManager, clock: FakeClock) -> None:
    handle = sessions.create_session("user-1")
    for _ in range(4):
        clock.advance(hours=6)
        sessions.resolve_session(handle.token)
    assert sessions.resolve_session(handle.token) is None


def test_destroy_session_is_idempotent(sessions: SessionManager) -> None:
    handle = sessions.create_session("user-1")

    sessions.destroy_session(handle.token)
    sessions.destroy_session(handle.token)
    sessions.destroy_session("never-issued")
    sessions.destroy_session(None)

    assert sessions.resolve_session(handle.token) is None


def test_guard_rejects_every_kind_of_bad_token_the_same_way(
    guard: AuthGuard, sessions: SessionManager, clock: FakeClock
) -> None:
    expired = sessions.create_session("user-1").token
    clock.advance(hours=25)

    messages = set()
    for token in (None, "", "unknown", expired):
        with pytest.raises(AuthenticationError) as excinfo:
            guard.require_user_id(token)
        messages.add(str(excinfo.value))
    assert len(messages) == 1


def test_guard_returns_identity(guard: AuthGuard, sessions: SessionManager) -> None:
    handle = sessions.create_session("user-7")
    assert guard.require_user_id(handle.token) == "user-7"
