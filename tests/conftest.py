# tests/conftest.py

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from types import SimpleNamespace

import pytest

from doit_tracker.core.state import AppState
from doit_tracker.tasks.task_store import TaskStore


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="doit",
        log_level="WARNING",
        data_dir=tmp_path,
        tasks_db_path=tmp_path / "doit.sqlite3",
        log_dir=tmp_path / "logs",
        top_upcoming_limit=10,
        max_title_length=100,
        max_description_length=500,
    )


@pytest.fixture()
def store(settings: SimpleNamespace) -> TaskStore:
    return TaskStore(settings.tasks_db_path)


@pytest.fixture()
def state(settings: SimpleNamespace, store: TaskStore) -> AppState:
    """
    AppState wired with a real SQLite store in tmp_path.
    """
    return AppState(settings=settings, task_store=store)


@pytest.fixture()
def now() -> datetime:
    """A fixed local instant, away from midnight and month ends."""
    return datetime(2025, 3, 10, 9, 0).astimezone()
