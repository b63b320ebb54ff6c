# tests/test_task_query.py

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from taskdeck.core.errors import InvalidQueryError
from taskdeck.tasks.task_models import Priority, Task, TaskStatus
from taskdeck.tasks.task_query import (
    PageOptions,
    TaskFilter,
    filter_tasks,
    paginate,
    query_tasks,
    sort_tasks,
)

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _task(n: int, **kw) -> Task:
    created = T0 + timedelta(days=n)
    base = dict(id=f"task_{n}", title=f"Task {n}", created_at=created, updated_at=created)
    base.update(kw)
    return Task(**base)


@pytest.fixture()
def tasks() -> list[Task]:
    return [
        _task(1, priority=Priority.HIGH, tags=["work"], assignee_id="user_2"),
        _task(2, priority=Priority.MEDIUM, status=TaskStatus.DONE, tags=["home"]),
        _task(3, priority=Priority.LOW, status=TaskStatus.IN_PROGRESS, assignee_id="user_2"),
        _task(4, priority=Priority.URGENT, tags=["work", "urgent"], due_at=T0 + timedelta(days=9)),
        _task(5, priority=Priority.HIGH, status=TaskStatus.CANCELLED, due_at=T0 + timedelta(days=6)),
    ]


def _ids(items: list[Task]) -> list[str]:
    return [t.id for t in items]


def test_no_filter_no_page_returns_everything(tasks: list[Task]) -> None:
    result = query_tasks(tasks)
    assert _ids(result.items) == _ids(tasks)
    assert result.total == 5
    assert result.page is None
    assert result.total_pages is None


def test_priority_set_filter_keeps_original_order() -> None:
    items = [
        _task(1, priority=Priority.HIGH),
        _task(2, priority=Priority.MEDIUM),
        _task(3, priority=Priority.LOW),
    ]
    result = query_tasks(items, TaskFilter(priority={Priority.HIGH, Priority.MEDIUM}))
    assert _ids(result.items) == ["task_1", "task_2"]
    assert result.total == 2


def test_single_status_and_string_values(tasks: list[Task]) -> None:
    assert _ids(filter_tasks(tasks, TaskFilter(status=TaskStatus.DONE))) == ["task_2"]
    assert _ids(filter_tasks(tasks, TaskFilter(status=["todo", "in-progress"]))) == [
        "task_1",
        "task_3",
        "task_4",
    ]


def test_empty_status_collection_matches_nothing(tasks: list[Task]) -> None:
    assert filter_tasks(tasks, TaskFilter(status=[])) == []


def test_unknown_filter_value_is_rejected(tasks: list[Task]) -> None:
    with pytest.raises(InvalidQueryError):
        filter_tasks(tasks, TaskFilter(priority="critical"))


def test_fields_are_anded(tasks: list[Task]) -> None:
    flt = TaskFilter(assignee_id="user_2", completed=False, priority=[Priority.HIGH, Priority.LOW])
    assert _ids(filter_tasks(tasks, flt)) == ["task_1", "task_3"]

    flt = TaskFilter(assignee_id="user_2", status=TaskStatus.TODO)
    assert _ids(filter_tasks(tasks, flt)) == ["task_1"]


def test_completed_filter(tasks: list[Task]) -> None:
    assert _ids(filter_tasks(tasks, TaskFilter(completed=True))) == ["task_2"]
    assert len(filter_tasks(tasks, TaskFilter(completed=False))) == 4


def test_date_range_is_inclusive(tasks: list[Task]) -> None:
    flt = TaskFilter(date_range=(T0 + timedelta(days=2), T0 + timedelta(days=4)))
    assert _ids(filter_tasks(tasks, flt)) == ["task_2", "task_3", "task_4"]


def test_tags_match_any(tasks: list[Task]) -> None:
    assert _ids(filter_tasks(tasks, TaskFilter(tags=["urgent", "home"]))) == ["task_2", "task_4"]
    assert len(filter_tasks(tasks, TaskFilter(tags=[]))) == 5


def test_filtering_is_idempotent(tasks: list[Task]) -> None:
    flt = TaskFilter(status=[TaskStatus.TODO, TaskStatus.CANCELLED], tags=["work", "urgent"])
    once = query_tasks(tasks, flt).items
    twice = query_tasks(once, flt).items
    assert twice == once


def test_sort_missing_values_go_last_in_both_directions(tasks: list[Task]) -> None:
    asc = sort_tasks(tasks, "due_at", "asc")
    desc = sort_tasks(tasks, "due_at", "desc")
    assert _ids(asc) == ["task_5", "task_4", "task_1", "task_2", "task_3"]
    assert _ids(desc) == ["task_4", "task_5", "task_1", "task_2", "task_3"]


def test_sort_is_stable(tasks: list[Task]) -> None:
    by_priority = sort_tasks(tasks, "priority", "desc")
    # task_1 and task_5 share HIGH and keep their input order
    assert _ids(by_priority) == ["task_4", "task_1", "task_5", "task_2", "task_3"]
    assert sort_tasks(by_priority, "priority", "desc") == by_priority


def test_sort_does_not_touch_input(tasks: list[Task]) -> None:
    before = _ids(tasks)
    sort_tasks(tasks, "title", "desc")
    assert _ids(tasks) == before


def test_sort_rejects_unknown_field_and_order(tasks: list[Task]) -> None:
    with pytest.raises(InvalidQueryError):
        sort_tasks(tasks, "tags")
    with pytest.raises(InvalidQueryError):
        sort_tasks(tasks, "title", "sideways")  # type: ignore[arg-type]


def test_pages_cover_the_filtered_set_exactly_once(tasks: list[Task]) -> None:
    flt = TaskFilter(completed=False)
    first = query_tasks(tasks, flt, PageOptions(page=1, limit=3, sort_by="created_at", sort_order="desc"))
    assert first.total == 4
    assert first.total_pages == 2

    collected: list[Task] = []
    for n in range(1, first.total_pages + 1):
        collected.extend(
            query_tasks(
                tasks, flt, PageOptions(page=n, limit=3, sort_by="created_at", sort_order="desc")
            ).items
        )
    assert _ids(collected) == ["task_5", "task_4", "task_3", "task_1"]


def test_out_of_range_page_is_empty_not_an_error(tasks: list[Task]) -> None:
    result = query_tasks(tasks, None, PageOptions(page=10, limit=2))
    assert result.items == []
    assert result.total == 5
    assert result.total_pages == 3
    assert result.page == 10


def test_empty_result_has_zero_pages() -> None:
    result = query_tasks([], None, PageOptions(page=1, limit=5))
    assert result.items == []
    assert result.total == 0
    assert result.total_pages == 0


@pytest.mark.parametrize(
    ("page", "limit"),
    [(0, 10), (-1, 10), (1, 0), (1, -5), (1.5, 10), (True, 10), ("1", 10)],
)
def test_bad_pagination_is_rejected(tasks: list[Task], page, limit) -> None:
    with pytest.raises(InvalidQueryError):
        query_tasks(tasks, None, PageOptions(page=page, limit=limit))


def test_paginate_slice_arithmetic(tasks: list[Task]) -> None:
    window, pages = paginate(tasks, 2, 2)
    assert _ids(window) == ["task_3", "task_4"]
    assert pages == 3
