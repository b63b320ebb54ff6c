# src/taskdeck/tasks/task_stats.py

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from .task_models import Priority, Task, TaskStatus


@dataclass(frozen=True, slots=True)
class TaskStatistics:
    total: int
    completed: int
    pending: int
    overdue: int
    by_priority: dict[Priority, int] = field(default_factory=dict)
    by_status: dict[TaskStatus, int] = field(default_factory=dict)


def calculate_completion_rate(tasks: Sequence[Task]) -> int:
    """Percentage of completed tasks, rounded half up; 0 for an empty list."""
    total = len(tasks)
    if total == 0:
        return 0
    done = sum(1 for t in tasks if t.completed)
    # round(100 * done / total) with halves going up, in integer arithmetic
    return (200 * done + total) // (2 * total)


def overdue_tasks(tasks: Iterable[Task], now: datetime) -> list[Task]:
    return [t for t in tasks if t.is_overdue(now)]


def tasks_due_soon(tasks: Iterable[Task], now: datetime, days: int = 7) -> list[Task]:
    """Open tasks whose due date falls within [now, now + days]."""
    horizon = now + timedelta(days=days)
    return [
        t
        for t in tasks
        if t.due_at is not None and not t.completed and now <= t.due_at <= horizon
    ]


def compute_statistics(tasks: Sequence[Task], now: datetime) -> TaskStatistics:
    by_priority = Counter({p: 0 for p in Priority})
    by_status = Counter({s: 0 for s in TaskStatus})
    completed = overdue = 0

    for t in tasks:
        if t.completed:
            completed += 1
        if t.is_overdue(now):
            overdue += 1
        by_priority[t.priority] += 1
        by_status[t.status] += 1

    return TaskStatistics(
        total=len(tasks),
        completed=completed,
        pending=len(tasks) - completed,
        overdue=overdue,
        by_priority=dict(by_priority),
        by_status=dict(by_status),
    )
