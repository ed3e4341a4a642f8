# tests/fakes.py

from __future__ import annotations

from datetime import datetime, timedelta, timezone


class FakeClock:
    """Manually advanced UTC clock for session expiry tests."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)
