# tests/fakes.py

from __future__ import annotations

from datetime import datetime, timedelta, timezone


class FakeClock:
    """
    Deterministic Clock for unit tests.

    - Starts at a fixed instant
    - Moves only when advance() is called
    """

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self.current

    def advance(self, **delta: float) -> datetime:
        self.current = self.current + timedelta(**delta)
        return self.current
