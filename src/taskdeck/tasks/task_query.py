# src/taskdeck/tasks/task_query.py

from __future__ import annotations

"""
Task query engine: filter -> sort -> paginate.

Everything here is a pure function over a read-only view of the task
collection; input lists are never reordered or mutated.

Pagination policy: page and limit must be integers >= 1, otherwise
InvalidQueryError. A page past the end is not an error, it is empty.
"""

import math
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal, TypeVar

from ..core.errors import InvalidQueryError
from ..core.timeutil import as_utc
from .task_models import Priority, Task, TaskStatus

SortOrder = Literal["asc", "desc"]

E = TypeVar("E", Priority, TaskStatus)

# Sort keys; a getter returning None means "field absent" (sorted last).
SORT_KEYS: dict[str, Callable[[Task], Any]] = {
    "id": lambda t: t.id,
    "title": lambda t: t.title,
    "description": lambda t: t.description,
    "priority": lambda t: t.priority.rank,
    "status": lambda t: t.status.rank,
    "completed": lambda t: t.completed,
    "assignee_id": lambda t: t.assignee_id,
    "created_at": lambda t: t.created_at,
    "updated_at": lambda t: t.updated_at,
    "due_at": lambda t: t.due_at,
}


@dataclass(frozen=True, slots=True)
class TaskFilter:
    """
    Optional predicates, AND-ed across fields.

    status / priority take a single value or a collection (OR within it).
    tags match when the task has at least one of them; an empty tag list
    does not filter.
    """

    status: TaskStatus | str | Iterable[TaskStatus | str] | None = None
    priority: Priority | str | Iterable[Priority | str] | None = None
    assignee_id: str | None = None
    completed: bool | None = None
    date_range: tuple[datetime, datetime] | None = None
    tags: Sequence[str] | None = None


@dataclass(frozen=True, slots=True)
class PageOptions:
    page: int
    limit: int
    sort_by: str | None = None
    sort_order: SortOrder = "asc"


@dataclass(frozen=True, slots=True)
class QueryResult:
    items: list[Task]
    total: int
    page: int | None = None
    total_pages: int | None = None


def _enum_set(raw: Any, enum_cls: type[E], label: str) -> frozenset[E]:
    values = [raw] if isinstance(raw, str) else list(raw)
    out: set[E] = set()
    for v in values:
        member = enum_cls.coerce(v)
        if member is None:
            raise InvalidQueryError(f"Unknown {label} filter value: {v!r}")
        out.add(member)
    return frozenset(out)


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 1


def filter_tasks(tasks: Iterable[Task], flt: TaskFilter | None) -> list[Task]:
    if flt is None:
        return list(tasks)

    statuses = _enum_set(flt.status, TaskStatus, "status") if flt.status is not None else None
    priorities = (
        _enum_set(flt.priority, Priority, "priority") if flt.priority is not None else None
    )
    wanted_tags = set(flt.tags) if flt.tags else None

    start = end = None
    if flt.date_range is not None:
        start, end = (as_utc(d) for d in flt.date_range)

    def matches(task: Task) -> bool:
        if statuses is not None and task.status not in statuses:
            return False
        if priorities is not None and task.priority not in priorities:
            return False
        if flt.assignee_id is not None and task.assignee_id != flt.assignee_id:
            return False
        if flt.completed is not None and task.completed != flt.completed:
            return False
        if start is not None and not (start <= task.created_at <= end):
            return False
        if wanted_tags is not None and wanted_tags.isdisjoint(task.tags):
            return False
        return True

    return [t for t in tasks if matches(t)]


def sort_tasks(tasks: Iterable[Task], sort_by: str, sort_order: SortOrder = "asc") -> list[Task]:
    """
    Stable sort by a task field.

    Tasks where the field is None go last in both directions, keeping
    their relative order.
    """
    getter = SORT_KEYS.get(sort_by)
    if getter is None:
        raise InvalidQueryError(f"Cannot sort by {sort_by!r}")
    if sort_order not in ("asc", "desc"):
        raise InvalidQueryError(f"Sort order must be 'asc' or 'desc', got {sort_order!r}")

    present: list[Task] = []
    missing: list[Task] = []
    for t in tasks:
        (missing if getter(t) is None else present).append(t)

    present.sort(key=getter, reverse=sort_order == "desc")
    return present + missing


def paginate(items: Sequence[Task], page: int, limit: int) -> tuple[list[Task], int]:
    """Return (slice for `page`, total page count)."""
    if not _is_positive_int(page):
        raise InvalidQueryError(f"page must be a positive integer, got {page!r}")
    if not _is_positive_int(limit):
        raise InvalidQueryError(f"limit must be a positive integer, got {limit!r}")

    start = (page - 1) * limit
    return list(items[start : start + limit]), math.ceil(len(items) / limit)


def query_tasks(
    tasks: Iterable[Task],
    flt: TaskFilter | None = None,
    page: PageOptions | None = None,
) -> QueryResult:
    items = filter_tasks(tasks, flt)

    if page is None:
        return QueryResult(items=items, total=len(items))

    if page.sort_by:
        items = sort_tasks(items, page.sort_by, page.sort_order)

    total = len(items)
    window, total_pages = paginate(items, page.page, page.limit)
    return QueryResult(items=window, total=total, page=page.page, total_pages=total_pages)
