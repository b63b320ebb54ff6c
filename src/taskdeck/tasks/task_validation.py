# src/taskdeck/tasks/task_validation.py

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from ..core.timeutil import as_utc, parse_instant
from ..core.validation import ValidationResult, is_blank
from .task_models import DESCRIPTION_MAX_LEN, TITLE_MAX_LEN, Priority, TaskStatus


def validate_task(
    candidate: Mapping[str, Any],
    *,
    created_at: datetime | None = None,
    partial: bool = False,
) -> ValidationResult:
    """
    Check a candidate task record against the field rules.

    `candidate` holds raw field values keyed by Task attribute names.
    A key mapped to None counts as absent for optional fields.
    With partial=True a missing title is not reported (update payloads).

    The creation timestamp comes from `created_at`, falling back to
    candidate["created_at"]; without either the due-date ordering rule
    is skipped.
    """
    result = ValidationResult()

    has_title = "title" in candidate
    title = candidate.get("title")
    if (has_title or not partial) and is_blank(title):
        result.add("Title is required")
    if isinstance(title, str) and len(title) > TITLE_MAX_LEN:
        result.add(f"Title must be at most {TITLE_MAX_LEN} characters")

    description = candidate.get("description")
    if description is not None:
        if not isinstance(description, str):
            result.add("Description must be a string")
        elif len(description) > DESCRIPTION_MAX_LEN:
            result.add(f"Description must be at most {DESCRIPTION_MAX_LEN} characters")

    priority = candidate.get("priority")
    if priority is not None and Priority.coerce(priority) is None:
        result.add("Invalid priority value")

    status = candidate.get("status")
    if status is not None and TaskStatus.coerce(status) is None:
        result.add("Invalid status value")

    raw_due = candidate.get("due_at")
    due_at = parse_instant(raw_due) if raw_due is not None else None
    if raw_due is not None and due_at is None:
        result.add("Due date must be a valid date")

    created = created_at if created_at is not None else parse_instant(candidate.get("created_at"))
    if due_at is not None and created is not None and due_at < as_utc(created):
        result.add("Due date cannot be before creation date")

    tags = candidate.get("tags")
    if tags is not None and (
        not isinstance(tags, (list, tuple, set, frozenset))
        or not all(isinstance(t, str) for t in tags)
    ):
        result.add("Tags must be a list of strings")

    return result
