# src/doit_tracker/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..tasks.task_models import Task
from .ports import TaskRepo


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: Any
    task_store: TaskRepo

    # What the user last saw: console commands address tasks by position here.
    visible: list[Task] = field(default_factory=list)

    def task_at(self, number: int) -> Task | None:
        """1-based lookup into the last rendered listing."""
        if 1 <= number <= len(self.visible):
            return self.visible[number - 1]
        return None
