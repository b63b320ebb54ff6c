# src/taskdeck/core/timeutil.py

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any


def as_utc(dt: datetime) -> datetime:
    # naive values are taken to be UTC
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_instant(raw: Any) -> datetime | None:
    """
    Best-effort conversion of a caller-supplied timestamp.

    Accepts datetime objects and ISO 8601 strings. Returns None when the
    value is not a valid instant (callers decide whether that is an error).
    """
    if isinstance(raw, datetime):
        return as_utc(raw)
    if isinstance(raw, str) and raw.strip():
        try:
            return as_utc(datetime.fromisoformat(raw.strip()))
        except ValueError:
            return None
    return None


def to_iso(dt: datetime | None) -> str | None:
    return None if dt is None else as_utc(dt).isoformat()
