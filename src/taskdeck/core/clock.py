# src/taskdeck/core/clock.py

from __future__ import annotations

import itertools
from datetime import datetime, timezone
from zoneinfo import ZoneInfo


class SystemClock:
    def __init__(self, tz_name: str = "UTC") -> None:
        self._tz = timezone.utc if tz_name.upper() == "UTC" else ZoneInfo(tz_name)

    def now(self) -> datetime:
        return datetime.now(self._tz)


class SequentialIds:
    """
    "task_1", "task_2", ... style identifiers.

    Ids are never reused within one generator, even after removals.
    """

    def __init__(self, prefix: str, start: int = 1) -> None:
        self._prefix = prefix
        self._counter = itertools.count(start)

    def new_id(self) -> str:
        return f"{self._prefix}_{next(self._counter)}"
