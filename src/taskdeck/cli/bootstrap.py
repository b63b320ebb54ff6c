# src/taskdeck/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- wires the clock, id generators and both services into AppState,
- optionally seeds a small demo data set.
"""

from __future__ import annotations

import logging
from datetime import timedelta

from ..config import get_settings
from ..core.clock import SequentialIds, SystemClock
from ..core.ports import Clock
from ..core.state import AppState
from ..tasks.task_models import Priority
from ..tasks.task_service import TaskService
from ..users.user_models import UserRole
from ..users.user_service import UserService

logger = logging.getLogger(__name__)


def create_initial_state(*, settings=None, clock: Clock | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()
    if clock is None:
        clock = SystemClock(getattr(settings, "timezone", "UTC"))

    tasks = TaskService(
        clock,
        SequentialIds("task"),
        due_soon_days=settings.due_soon_days,
    )
    users = UserService(
        clock,
        SequentialIds("user"),
        admin_name=settings.admin_name,
        admin_email=settings.admin_email,
        max_failed_logins=settings.max_failed_logins,
        recent_activity_days=settings.recent_activity_days,
    )
    state = AppState(settings=settings, clock=clock, tasks=tasks, users=users)

    if getattr(settings, "seed_demo", False):
        seed_demo_data(state)
    return state


def seed_demo_data(state: AppState) -> None:
    now = state.clock.now()
    alice = state.users.create(name="Alice Johnson", email="alice@example.com")
    bob = state.users.create(
        name="Bob Smith",
        email="bob@example.com",
        role=UserRole.MANAGER,
        preferences={"theme": "dark"},
    )

    state.tasks.create(
        title="Learn Python typing",
        description="Work through Protocols and generics",
        priority=Priority.HIGH,
        assignee_id=alice.id,
        due_at=now + timedelta(days=7),
        tags=["learning", "python"],
    )
    state.tasks.create(
        title="Build task manager",
        priority=Priority.URGENT,
        assignee_id=bob.id,
        due_at=now + timedelta(days=3),
        tags=["project"],
    )
    done = state.tasks.create(title="Write documentation", priority=Priority.LOW, tags=["docs"])
    state.tasks.mark_complete(done.id)

    logger.info(
        "Demo data seeded: %d users, %d tasks", state.users.count(), state.tasks.count()
    )
