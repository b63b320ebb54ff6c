# src/taskdeck/users/user_models.py

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from enum import StrEnum
from typing import Any, Literal

from ..core.timeutil import to_iso

Theme = Literal["light", "dark"]
THEMES: tuple[str, ...] = ("light", "dark")

NAME_MAX_LEN = 100


class UserRole(StrEnum):
    """User role; privilege order is ADMIN > MANAGER > USER > GUEST."""

    ADMIN = "admin"
    MANAGER = "manager"
    USER = "user"
    GUEST = "guest"

    @property
    def rank(self) -> int:
        return _ROLE_RANK[self]

    def at_least(self, other: UserRole) -> bool:
        return self.rank >= other.rank

    @classmethod
    def coerce(cls, raw: Any) -> UserRole | None:
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, str):
            return None
        try:
            return cls(raw)
        except ValueError:
            return None


_ROLE_RANK = {
    UserRole.GUEST: 0,
    UserRole.USER: 1,
    UserRole.MANAGER: 2,
    UserRole.ADMIN: 3,
}


@dataclass(frozen=True, slots=True)
class Preferences:
    theme: Theme = "light"
    notifications: bool = True
    language: str = "en"
    timezone: str = "UTC"

    def merged(self, updates: Mapping[str, Any] | None) -> Preferences:
        """Copy with `updates` applied; unknown keys are ignored."""
        if not updates:
            return self
        known = {f.name for f in fields(self)}
        return replace(self, **{k: v for k, v in updates.items() if k in known})

    def to_dict(self) -> dict[str, Any]:
        return {
            "theme": self.theme,
            "notifications": self.notifications,
            "language": self.language,
            "timezone": self.timezone,
        }


@dataclass(slots=True)
class User:
    id: str
    name: str
    email: str
    created_at: datetime

    role: UserRole = UserRole.USER
    is_active: bool = True
    last_login: datetime | None = None
    preferences: Preferences = field(default_factory=Preferences)

    failed_logins: int = field(default=0, repr=False)
    locked: bool = field(default=False, repr=False)

    # ---- permissions (rank comparisons) ----

    @property
    def is_admin(self) -> bool:
        return self.role is UserRole.ADMIN

    def can_access(self, required_role: UserRole) -> bool:
        return self.role.at_least(required_role)

    def can_manage_users(self) -> bool:
        return self.can_access(UserRole.MANAGER)

    def can_change_role(self, target: User) -> bool:
        """Admins may change roles, except another admin's (prevents lockout fights)."""
        if not self.is_admin:
            return False
        return not (target.is_admin and target.id != self.id)

    # ---- account state ----

    def record_login(self, now: datetime) -> None:
        self.last_login = now
        self.failed_logins = 0
        self.locked = False

    def record_failed_login(self, max_attempts: int = 5) -> None:
        self.failed_logins += 1
        if self.failed_logins >= max_attempts:
            self.locked = True

    def activate(self) -> None:
        self.is_active = True
        self.locked = False
        self.failed_logins = 0

    def deactivate(self) -> None:
        self.is_active = False

    def update_preferences(self, updates: Mapping[str, Any]) -> None:
        self.preferences = self.preferences.merged(updates)

    # ---- display ----

    @property
    def display_name(self) -> str:
        return f"{self.name} ({self.role.value})"

    @property
    def initials(self) -> str:
        return "".join(part[0].upper() for part in self.name.split())[:2]

    @property
    def masked_email(self) -> str:
        # keep the first two characters of the local part
        return re.sub(r"^(.{2})(.*)(@.*)$", r"\1***\3", self.email)

    def is_recently_active(self, now: datetime, days: int = 30) -> bool:
        if self.last_login is None:
            return False
        return (now - self.last_login).days <= days

    def account_age_days(self, now: datetime) -> int:
        return (now - self.created_at).days

    def to_dict(self, *, safe: bool = False) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.masked_email if safe else self.email,
            "role": self.role.value,
            "is_active": self.is_active,
            "created_at": to_iso(self.created_at),
            "last_login": to_iso(self.last_login),
            "preferences": self.preferences.to_dict(),
        }
