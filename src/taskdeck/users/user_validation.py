# src/taskdeck/users/user_validation.py

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..core.validation import ValidationResult, is_blank, is_valid_email
from .user_models import NAME_MAX_LEN, THEMES, Preferences, UserRole


def validate_user(candidate: Mapping[str, Any], *, partial: bool = False) -> ValidationResult:
    """
    Check a candidate user record. Rules run in a fixed order and every
    violation is reported. With partial=True, absent name/email are skipped.
    """
    result = ValidationResult()

    name = candidate.get("name")
    if ("name" in candidate or not partial) and is_blank(name):
        result.add("Name is required")
    if isinstance(name, str) and len(name) > NAME_MAX_LEN:
        result.add(f"Name must be at most {NAME_MAX_LEN} characters")

    if "email" in candidate or not partial:
        email = candidate.get("email")
        if is_blank(email):
            result.add("Email is required")
        elif not is_valid_email(email):
            result.add("Invalid email format")

    role = candidate.get("role")
    if role is not None and UserRole.coerce(role) is None:
        result.add("Invalid user role")

    is_active = candidate.get("is_active")
    if is_active is not None and not isinstance(is_active, bool):
        result.add("Active flag must be true or false")

    prefs = candidate.get("preferences")
    theme = None
    if isinstance(prefs, Preferences):
        theme = prefs.theme
    elif isinstance(prefs, Mapping):
        theme = prefs.get("theme")
    elif prefs is not None:
        result.add("Preferences must be a mapping")
    if theme is not None and theme not in THEMES:
        result.add("Theme must be 'light' or 'dark'")

    return result
