# src/taskdeck/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..tasks.task_service import TaskService
from ..users.user_service import UserService
from ..users.user_models import User
from .ports import Clock


@dataclass
class AppState:
    """
    Everything a front-end needs, wired once by the composition root.

    Settings are kept untyped so tests can pass a SimpleNamespace.
    """

    settings: Any
    clock: Clock
    tasks: TaskService
    users: UserService

    # The user the console acts as (None = unauthenticated, no permission checks).
    current_user: User | None = None
