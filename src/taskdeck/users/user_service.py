# src/taskdeck/users/user_service.py

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from ..core.errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationFailure,
)
from ..core.ports import Clock, IdGenerator
from ..core.validation import sanitize_email
from .user_models import Preferences, User, UserRole
from .user_validation import validate_user

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset({"name", "email", "role", "is_active", "preferences"})


@dataclass(frozen=True, slots=True)
class UserStatistics:
    total: int
    active: int
    inactive: int
    recently_active: int
    by_role: dict[UserRole, int] = field(default_factory=dict)


class UserService:
    """
    In-memory user collection.

    Keeps the "at least one admin" invariant: the last admin can be neither
    deleted nor demoted. A default admin is seeded on construction.
    """

    def __init__(
        self,
        clock: Clock,
        ids: IdGenerator,
        *,
        admin_name: str = "System Administrator",
        admin_email: str = "admin@taskmanager.com",
        max_failed_logins: int = 5,
        recent_activity_days: int = 30,
    ) -> None:
        self._clock = clock
        self._ids = ids
        self._max_failed_logins = max_failed_logins
        self._recent_activity_days = recent_activity_days
        self._users: list[User] = []
        self._seed_admin(admin_name, admin_email)

    # ---- low-level helpers ----

    def _seed_admin(self, name: str, email: str) -> None:
        admin = User(
            id=self._ids.new_id(),
            name=name,
            email=sanitize_email(email),
            role=UserRole.ADMIN,
            created_at=self._clock.now(),
            preferences=Preferences(theme="dark"),
        )
        self._users.append(admin)
        logger.info("Default admin seeded id=%s", admin.id)

    def _find(self, user_id: str) -> User:
        for u in self._users:
            if u.id == user_id:
                return u
        raise NotFoundError("User", user_id)

    def _find_by_email(self, email: str) -> User | None:
        key = sanitize_email(email)
        for u in self._users:
            if u.email == key:
                return u
        return None

    def _admin_count(self) -> int:
        return sum(1 for u in self._users if u.is_admin)

    # ---- public API ----

    def count(self) -> int:
        return len(self._users)

    def clear(self) -> None:
        """Drop every user except the first admin."""
        admin = next((u for u in self._users if u.is_admin), None)
        self._users = [admin] if admin is not None else []

    def create(
        self,
        *,
        name: str,
        email: str,
        role: UserRole | str = UserRole.USER,
        preferences: Preferences | Mapping[str, Any] | None = None,
        created_by: User | None = None,
    ) -> User:
        if created_by is not None and not created_by.can_manage_users():
            logger.warning("User create denied actor=%s", created_by.id)
            raise PermissionDeniedError("Insufficient permissions to create users")

        if isinstance(email, str):
            email = sanitize_email(email)
            if self._find_by_email(email) is not None:
                raise ConflictError("User with this email already exists")

        result = validate_user(
            {"name": name, "email": email, "role": role, "preferences": preferences}
        )
        if not result.valid:
            logger.info("User rejected: %s", "; ".join(result.errors))
            raise ValidationFailure(result.errors)

        if not isinstance(preferences, Preferences):
            preferences = Preferences().merged(preferences)

        user = User(
            id=self._ids.new_id(),
            name=name,
            email=email,
            role=UserRole.coerce(role) or UserRole.USER,
            created_at=self._clock.now(),
            preferences=preferences,
        )
        self._users.append(user)
        logger.info("User created id=%s role=%s", user.id, user.role)
        return user

    def get(self, user_id: str) -> User:
        return self._find(user_id)

    def get_by_email(self, email: str) -> User:
        user = self._find_by_email(email)
        if user is None:
            raise NotFoundError("User", email, field="email")
        return user

    def list_users(self, requested_by: User | None = None) -> list[User]:
        # Below manager level only active accounts are visible.
        if requested_by is not None and not requested_by.can_manage_users():
            return [u for u in self._users if u.is_active]
        return list(self._users)

    def update(
        self,
        user_id: str,
        changes: Mapping[str, Any],
        updated_by: User | None = None,
    ) -> User:
        user = self._find(user_id)

        unknown = sorted(set(changes) - UPDATABLE_FIELDS)
        if unknown:
            raise ValidationFailure(f"Unknown user field: {name}" for name in unknown)

        if updated_by is not None:
            if updated_by.id != user_id and not updated_by.can_manage_users():
                logger.warning("User update denied actor=%s target=%s", updated_by.id, user_id)
                raise PermissionDeniedError("Insufficient permissions to update this user")
            if changes.get("role") is not None and not updated_by.is_admin:
                raise PermissionDeniedError("Only administrators can change user roles")

        if isinstance(changes.get("email"), str):
            changes = {**changes, "email": sanitize_email(changes["email"])}

        result = validate_user(changes, partial=True)
        if not result.valid:
            logger.info("User update rejected id=%s: %s", user_id, "; ".join(result.errors))
            raise ValidationFailure(result.errors)

        new_email = changes.get("email")
        if new_email is not None:
            other = self._find_by_email(new_email)
            if other is not None and other.id != user_id:
                raise ConflictError("Email is already taken by another user")

        new_role = UserRole.coerce(changes.get("role"))
        if new_role is not None and user.is_admin and new_role is not UserRole.ADMIN:
            if self._admin_count() <= 1:
                raise ConflictError("Cannot demote the last administrator")

        if "name" in changes:
            user.name = changes["name"]
        if new_email is not None:
            user.email = new_email
        if new_role is not None:
            user.role = new_role
        if changes.get("is_active") is not None:
            if changes["is_active"] is True:
                user.activate()
            else:
                user.deactivate()
        prefs = changes.get("preferences")
        if isinstance(prefs, Preferences):
            user.preferences = prefs
        elif prefs:
            user.update_preferences(prefs)

        logger.info("User updated id=%s fields=%s", user_id, ",".join(sorted(changes)))
        return user

    def change_role(self, user_id: str, new_role: UserRole | str, actor: User) -> User:
        target = self._find(user_id)
        if not actor.can_change_role(target):
            logger.warning("Role change denied actor=%s target=%s", actor.id, user_id)
            raise PermissionDeniedError("Insufficient permissions to change this user's role")
        return self.update(user_id, {"role": new_role}, updated_by=actor)

    def delete(self, user_id: str, deleted_by: User | None = None) -> None:
        user = self._find(user_id)

        if deleted_by is not None and not deleted_by.can_manage_users():
            logger.warning("User delete denied actor=%s", deleted_by.id)
            raise PermissionDeniedError("Insufficient permissions to delete users")

        if user.is_admin and self._admin_count() <= 1:
            raise ConflictError("Cannot delete the last administrator")

        self._users.remove(user)
        logger.info("User deleted id=%s", user_id)

    def authenticate(self, email: str, password: str) -> User:
        """
        Stub login: the password is not checked.

        Refuses unknown, deactivated and locked accounts; otherwise records
        the login and returns the user.
        """
        user = self._find_by_email(email)
        if user is None:
            raise AuthenticationError("Invalid credentials")
        if not user.is_active:
            raise AuthenticationError("Account is deactivated")
        if user.locked:
            raise AuthenticationError("Account is locked due to too many failed login attempts")

        user.record_login(self._clock.now())
        logger.info("User logged in id=%s", user.id)
        return user

    def report_failed_login(self, email: str) -> User | None:
        user = self._find_by_email(email)
        if user is None:
            return None
        user.record_failed_login(self._max_failed_logins)
        if user.locked:
            logger.warning("Account locked id=%s after %d failures", user.id, user.failed_logins)
        return user

    def users_by_role(self, role: UserRole) -> list[User]:
        return [u for u in self._users if u.role is role]

    def active_users(self) -> list[User]:
        return [u for u in self._users if u.is_active]

    def statistics(self) -> UserStatistics:
        now = self._clock.now()
        by_role = Counter({r: 0 for r in UserRole})
        for u in self._users:
            by_role[u.role] += 1
        active = sum(1 for u in self._users if u.is_active)
        recent = sum(
            1 for u in self._users if u.is_recently_active(now, self._recent_activity_days)
        )
        return UserStatistics(
            total=len(self._users),
            active=active,
            inactive=len(self._users) - active,
            recently_active=recent,
            by_role=dict(by_role),
        )
