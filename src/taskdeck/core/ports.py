# src/taskdeck/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the services.

Services depend on Protocols instead of concrete implementations,
so tests can pin time and identifiers.
"""

from datetime import datetime
from typing import Protocol


class Clock(Protocol):
    """Source of timezone-aware "now"."""
    def now(self) -> datetime: ...


class IdGenerator(Protocol):
    """Produces opaque, unique identifiers for new entities."""
    def new_id(self) -> str: ...
