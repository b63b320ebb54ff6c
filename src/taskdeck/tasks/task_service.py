# src/taskdeck/tasks/task_service.py

from __future__ import annotations

import logging
from collections.abc import Collection, Mapping
from datetime import datetime
from typing import Any

from ..core.errors import NotFoundError, ValidationFailure
from ..core.ports import Clock, IdGenerator
from ..core.timeutil import parse_instant
from .task_models import Priority, Task, TaskStatus, unique_tags
from .task_query import PageOptions, QueryResult, TaskFilter, query_tasks
from .task_stats import TaskStatistics, compute_statistics, overdue_tasks, tasks_due_soon
from .task_validation import validate_task

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset(
    {"title", "description", "priority", "status", "assignee_id", "due_at", "tags"}
)


class TaskService:
    """
    In-memory task collection with CRUD and listing.

    The service exclusively owns its task list; callers get Task objects
    back but add/remove only through these methods.
    """

    def __init__(self, clock: Clock, ids: IdGenerator, *, due_soon_days: int = 7) -> None:
        self._clock = clock
        self._ids = ids
        self._due_soon_days = due_soon_days
        self._tasks: list[Task] = []

    # ---- low-level helpers ----

    def _find(self, task_id: str) -> Task:
        for t in self._tasks:
            if t.id == task_id:
                return t
        raise NotFoundError("Task", task_id)

    # ---- public API ----

    def count(self) -> int:
        return len(self._tasks)

    def clear(self) -> None:
        self._tasks.clear()
        logger.debug("Task collection cleared")

    def create(
        self,
        *,
        title: str,
        description: str | None = None,
        priority: Priority | str = Priority.MEDIUM,
        assignee_id: str | None = None,
        due_at: datetime | str | None = None,
        tags: Collection[str] | None = None,
    ) -> Task:
        now = self._clock.now()
        draft = {
            "title": title,
            "description": description,
            "priority": priority,
            "due_at": due_at,
            "tags": tags,
        }
        result = validate_task(draft, created_at=now)
        if not result.valid:
            logger.info("Task rejected: %s", "; ".join(result.errors))
            raise ValidationFailure(result.errors)

        task = Task(
            id=self._ids.new_id(),
            title=title,
            description=description,
            priority=Priority.coerce(priority) or Priority.MEDIUM,
            status=TaskStatus.TODO,
            assignee_id=assignee_id,
            created_at=now,
            updated_at=now,
            due_at=parse_instant(due_at),
            tags=list(tags or []),
        )
        self._tasks.append(task)
        logger.info(
            "Task created id=%s priority=%s assignee=%s", task.id, task.priority, assignee_id
        )
        return task

    def get(self, task_id: str) -> Task:
        return self._find(task_id)

    def list_tasks(
        self, flt: TaskFilter | None = None, page: PageOptions | None = None
    ) -> QueryResult:
        return query_tasks(self._tasks, flt, page)

    def update(self, task_id: str, changes: Mapping[str, Any]) -> Task:
        """
        Apply a partial update.

        The merged record is validated as a whole before anything is written,
        so a rejected update leaves the task untouched.
        """
        task = self._find(task_id)

        unknown = sorted(set(changes) - UPDATABLE_FIELDS)
        if unknown:
            raise ValidationFailure(f"Unknown task field: {name}" for name in unknown)

        merged: dict[str, Any] = {
            "title": task.title,
            "description": task.description,
            "priority": task.priority,
            "status": task.status,
            "due_at": task.due_at,
            "tags": list(task.tags),
        }
        merged.update(changes)

        result = validate_task(merged, created_at=task.created_at)
        if not result.valid:
            logger.info("Task update rejected id=%s: %s", task_id, "; ".join(result.errors))
            raise ValidationFailure(result.errors)

        if "title" in changes:
            task.title = merged["title"]
        if "description" in changes:
            task.description = merged["description"]
        if "priority" in changes and merged["priority"] is not None:
            task.priority = Priority.coerce(merged["priority"]) or task.priority
        if "status" in changes and merged["status"] is not None:
            task.status = TaskStatus.coerce(merged["status"]) or task.status
        if "assignee_id" in changes:
            task.assignee_id = merged["assignee_id"]
        if "due_at" in changes:
            task.due_at = parse_instant(merged["due_at"])
        if "tags" in changes:
            task.tags = unique_tags(merged["tags"] or [])

        task.touch(self._clock.now())
        logger.info("Task updated id=%s fields=%s", task_id, ",".join(sorted(changes)))
        return task

    def delete(self, task_id: str) -> None:
        task = self._find(task_id)
        self._tasks.remove(task)
        logger.info("Task deleted id=%s", task_id)

    def set_status(self, task_id: str, status: TaskStatus | str) -> Task:
        new_status = TaskStatus.coerce(status)
        if new_status is None:
            raise ValidationFailure(["Invalid status value"])
        task = self._find(task_id)
        task.set_status(new_status, self._clock.now())
        logger.info("Task status id=%s status=%s", task_id, new_status)
        return task

    def mark_complete(self, task_id: str) -> Task:
        return self.set_status(task_id, TaskStatus.DONE)

    def mark_incomplete(self, task_id: str) -> Task:
        return self.set_status(task_id, TaskStatus.TODO)

    def add_tag(self, task_id: str, tag: str) -> Task:
        if not isinstance(tag, str) or not tag.strip():
            raise ValidationFailure(["Tag must be a non-empty string"])
        task = self._find(task_id)
        task.add_tag(tag.strip(), self._clock.now())
        return task

    def remove_tag(self, task_id: str, tag: str) -> Task:
        task = self._find(task_id)
        task.remove_tag(tag, self._clock.now())
        return task

    def tasks_for_user(self, user_id: str) -> list[Task]:
        return [t for t in self._tasks if t.assignee_id == user_id]

    def overdue(self) -> list[Task]:
        return overdue_tasks(self._tasks, self._clock.now())

    def due_soon(self, days: int | None = None) -> list[Task]:
        window = self._due_soon_days if days is None else days
        return tasks_due_soon(self._tasks, self._clock.now(), window)

    def statistics(self) -> TaskStatistics:
        return compute_statistics(self._tasks, self._clock.now())
