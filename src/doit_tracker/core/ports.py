# src/doit_tracker/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps the storage backend swappable and makes testing easier.
"""

from datetime import datetime
from typing import Protocol

from ..tasks.task_models import StreakState, Task


class TaskRepo(Protocol):
    """
    Storage collaborator for tasks and the single streak record.

    get_task raises TaskNotFoundError for unknown ids.
    get_all_tasks returns tasks in primary listing order.
    update_task advances the streak when a task flips to completed.
    """

    def save_task(self, task: Task) -> None: ...
    def get_task(self, task_id: str) -> Task: ...
    def get_all_tasks(self) -> list[Task]: ...
    def update_task(self, task: Task, *, now: datetime | None = None) -> None: ...
    def delete_task(self, task_id: str) -> None: ...

    # Streak (zero-valued when absent)
    def get_streak(self) -> StreakState: ...
    def update_streak(self, streak: StreakState) -> None: ...

    def close(self) -> None: ...
