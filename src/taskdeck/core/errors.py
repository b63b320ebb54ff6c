# src/taskdeck/core/errors.py

"""
Domain errors raised by the services.

Every refusal is a reported, non-fatal outcome: callers catch TaskdeckError
(or a subclass) and surface the message. Nothing here terminates the process.
"""

from __future__ import annotations

from collections.abc import Iterable


class TaskdeckError(Exception):
    """Base class for all taskdeck domain errors."""


class ValidationFailure(TaskdeckError):
    """A candidate record broke one or more validation rules."""

    def __init__(self, errors: Iterable[str]) -> None:
        self.errors: list[str] = list(errors)
        super().__init__(f"Validation failed: {', '.join(self.errors)}")


class NotFoundError(TaskdeckError):
    def __init__(self, entity: str, key: str, *, field: str = "ID") -> None:
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} with {field} {key} not found")


class PermissionDeniedError(TaskdeckError):
    pass


class ConflictError(TaskdeckError):
    pass


class AuthenticationError(TaskdeckError):
    pass


class InvalidQueryError(TaskdeckError, ValueError):
    """Pagination or sort options the query engine refuses to interpret."""
