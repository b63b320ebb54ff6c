# src/taskdeck/tasks/task_models.py

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import StrEnum
from typing import Any

from ..core.timeutil import as_utc, parse_instant, to_iso


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]

    @classmethod
    def coerce(cls, raw: Any) -> Priority | None:
        """Return the member for `raw` (member or value), or None if unknown."""
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, str):
            return None
        try:
            return cls(raw)
        except ValueError:
            return None


_PRIORITY_RANK = {
    Priority.LOW: 0,
    Priority.MEDIUM: 1,
    Priority.HIGH: 2,
    Priority.URGENT: 3,
}


class TaskStatus(StrEnum):
    """
    Task lifecycle status.

    Usual flow: todo -> in-progress -> done, or todo/in-progress -> cancelled.
    Transitions are not enforced; any status may be set directly.
    """

    TODO = "todo"
    IN_PROGRESS = "in-progress"
    DONE = "done"
    CANCELLED = "cancelled"

    @property
    def rank(self) -> int:
        return _STATUS_RANK[self]

    @property
    def is_completed(self) -> bool:
        return self is TaskStatus.DONE

    @classmethod
    def coerce(cls, raw: Any) -> TaskStatus | None:
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, str):
            return None
        try:
            return cls(raw)
        except ValueError:
            return None


_STATUS_RANK = {
    TaskStatus.TODO: 0,
    TaskStatus.IN_PROGRESS: 1,
    TaskStatus.DONE: 2,
    TaskStatus.CANCELLED: 3,
}

STATUS_GLYPHS = {
    TaskStatus.TODO: "⏳",
    TaskStatus.IN_PROGRESS: "🔄",
    TaskStatus.DONE: "✅",
    TaskStatus.CANCELLED: "❌",
}

TITLE_MAX_LEN = 200
DESCRIPTION_MAX_LEN = 1000


def unique_tags(tags: Iterable[str]) -> list[str]:
    """Drop duplicates, keep first-seen order."""
    return list(dict.fromkeys(tags))


@dataclass(slots=True)
class Task:
    id: str
    title: str
    created_at: datetime
    updated_at: datetime

    priority: Priority = Priority.MEDIUM
    status: TaskStatus = TaskStatus.TODO

    description: str | None = None
    assignee_id: str | None = None
    due_at: datetime | None = None
    tags: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.tags = unique_tags(self.tags)

    @property
    def completed(self) -> bool:
        # Derived from status; there is no separate flag to drift out of sync.
        return self.status.is_completed

    # ---- mutations (each one refreshes updated_at) ----

    def touch(self, now: datetime) -> None:
        self.updated_at = now

    def set_status(self, status: TaskStatus, now: datetime) -> None:
        self.status = status
        self.touch(now)

    def mark_complete(self, now: datetime) -> None:
        self.set_status(TaskStatus.DONE, now)

    def mark_incomplete(self, now: datetime) -> None:
        self.set_status(TaskStatus.TODO, now)

    def add_tag(self, tag: str, now: datetime) -> bool:
        if tag in self.tags:
            return False
        self.tags.append(tag)
        self.touch(now)
        return True

    def remove_tag(self, tag: str, now: datetime) -> bool:
        if tag not in self.tags:
            return False
        self.tags.remove(tag)
        self.touch(now)
        return True

    # ---- queries ----

    def is_overdue(self, now: datetime) -> bool:
        if self.due_at is None or self.completed:
            return False
        return now > self.due_at

    def days_until_due(self, now: datetime) -> int | None:
        """Whole days left until the due date, rounded up; negative when overdue."""
        if self.due_at is None:
            return None
        seconds = (self.due_at - now).total_seconds()
        return math.ceil(seconds / 86400)

    def summary(self) -> str:
        glyph = STATUS_GLYPHS.get(self.status, "📝")
        due = f" (Due: {self.due_at.date().isoformat()})" if self.due_at else ""
        return f"{glyph} [{self.priority.value.upper()}] {self.title}{due}"

    # ---- (de)serialization ----

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "completed": self.completed,
            "priority": self.priority.value,
            "status": self.status.value,
            "assignee_id": self.assignee_id,
            "created_at": to_iso(self.created_at),
            "updated_at": to_iso(self.updated_at),
            "due_at": to_iso(self.due_at),
            "tags": list(self.tags),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Task:
        """
        Rebuild a task from `to_dict()` output.

        "completed" is ignored; it is always derived from "status".
        """
        created_at = parse_instant(data.get("created_at"))
        updated_at = parse_instant(data.get("updated_at"))
        if created_at is None:
            raise ValueError("created_at is required")
        return cls(
            id=str(data["id"]),
            title=str(data["title"]),
            description=data.get("description"),
            priority=Priority.coerce(data.get("priority")) or Priority.MEDIUM,
            status=TaskStatus.coerce(data.get("status")) or TaskStatus.TODO,
            assignee_id=data.get("assignee_id"),
            created_at=as_utc(created_at),
            updated_at=updated_at or created_at,
            due_at=parse_instant(data.get("due_at")),
            tags=list(data.get("tags") or []),
        )

    def clone(self) -> Task:
        return replace(self, tags=list(self.tags))
