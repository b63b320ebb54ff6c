# src/taskdeck/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- Nothing required at import time: every value has a default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKDECK"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    data_dir: Path
    log_to_file: bool
    timezone: str

    # ---- Users ----
    admin_name: str
    admin_email: str
    max_failed_logins: int
    recent_activity_days: int

    # ---- Tasks ----
    due_soon_days: int
    default_page_size: int
    seed_demo: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskdeck").strip() or "taskdeck"
        log_level = _env(_k("LOG_LEVEL"), "INFO").strip().upper() or "INFO"
        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskdeck"))
        log_to_file = _env_bool(_k("LOG_TO_FILE"), True)
        timezone = _env(_k("TIMEZONE"), "UTC").strip() or "UTC"

        admin_name = _env(_k("ADMIN_NAME"), "System Administrator").strip()
        admin_email = _env(_k("ADMIN_EMAIL"), "admin@taskmanager.com").strip()

        # Non-positive thresholds make no sense; fall back to defaults.
        max_failed_logins = _env_int(_k("MAX_FAILED_LOGINS"), 5)
        if max_failed_logins < 1:
            max_failed_logins = 5
        recent_activity_days = max(0, _env_int(_k("RECENT_ACTIVITY_DAYS"), 30))
        due_soon_days = max(0, _env_int(_k("DUE_SOON_DAYS"), 7))
        default_page_size = _env_int(_k("DEFAULT_PAGE_SIZE"), 10)
        if default_page_size < 1:
            default_page_size = 10

        seed_demo = _env_bool(_k("SEED_DEMO"), False)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            log_to_file=log_to_file,
            timezone=timezone,
            admin_name=admin_name,
            admin_email=admin_email,
            max_failed_logins=max_failed_logins,
            recent_activity_days=recent_activity_days,
            due_soon_days=due_soon_days,
            default_page_size=default_page_size,
            seed_demo=seed_demo,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
