# src/taskdeck/core/validation.py

"""
Shared validation primitives.

Validators collect every violation instead of stopping at the first one;
the order of `errors` follows the order the rules are checked in.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@dataclass(slots=True)
class ValidationResult:
    errors: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def add(self, message: str) -> None:
        self.errors.append(message)


def is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def is_valid_email(email: Any) -> bool:
    return isinstance(email, str) and EMAIL_REGEX.match(email) is not None


def sanitize_email(email: str) -> str:
    return email.strip().lower()
