# src/doit_tracker/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- Nothing is required at import time; every key has a default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "DOIT"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


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

    # ---- Local data paths ----
    data_dir: Path
    tasks_db_path: Path
    log_dir: Path

    # ---- Listing / validation ----
    top_upcoming_limit: int
    max_title_length: int
    max_description_length: int

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "doit")
        log_level = _env(_k("LOG_LEVEL"), "WARNING")

        data_dir = _env_path(_k("DATA_DIR"), Path.home() / ".local" / "share" / "doit")
        tasks_db_path = _env_path(_k("TASKS_DB_PATH"), data_dir / "doit.sqlite3")
        log_dir = _env_path(_k("LOG_DIR"), data_dir)

        top_upcoming_limit = _env_int(_k("TOP_UPCOMING"), 10)
        max_title_length = _env_int(_k("MAX_TITLE_LENGTH"), 100)
        max_description_length = _env_int(_k("MAX_DESCRIPTION_LENGTH"), 500)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            tasks_db_path=tasks_db_path,
            log_dir=log_dir,
            top_upcoming_limit=top_upcoming_limit,
            max_title_length=max_title_length,
            max_description_length=max_description_length,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
