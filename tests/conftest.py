# tests/conftest.py

from __future__ import annotations

from types import SimpleNamespace

import pytest

from taskdeck.cli.bootstrap import create_initial_state
from taskdeck.core.clock import SequentialIds
from taskdeck.core.state import AppState
from taskdeck.tasks.task_service import TaskService
from taskdeck.users.user_service import UserService

from .fakes import FakeClock


@pytest.fixture()
def settings() -> SimpleNamespace:
    """
    Minimal settings object compatible with the bootstrap and services.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment.
    """
    return SimpleNamespace(
        app_name="taskdeck-test",
        log_level="DEBUG",
        timezone="UTC",
        admin_name="System Administrator",
        admin_email="admin@taskmanager.com",
        max_failed_logins=3,
        recent_activity_days=30,
        due_soon_days=7,
        default_page_size=10,
        seed_demo=False,
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def task_service(clock: FakeClock) -> TaskService:
    return TaskService(clock, SequentialIds("task"))


@pytest.fixture()
def user_service(clock: FakeClock) -> UserService:
    return UserService(clock, SequentialIds("user"), max_failed_logins=3)


@pytest.fixture()
def state(settings: SimpleNamespace, clock: FakeClock) -> AppState:
    return create_initial_state(settings=settings, clock=clock)
