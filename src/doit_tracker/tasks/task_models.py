# tasks/task_models.py

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime

MAX_TITLE_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500


class TaskValidationError(ValueError):
    """Title/description rejected before a task is saved."""


class TaskNotFoundError(LookupError):
    def __init__(self, task_id: str) -> None:
        super().__init__(f"task not found: {task_id}")
        self.task_id = task_id


def new_task_id() -> str:
    return uuid.uuid4().hex


def validate_task_fields(
    title: str,
    description: str,
    *,
    max_title: int = MAX_TITLE_LENGTH,
    max_description: int = MAX_DESCRIPTION_LENGTH,
) -> None:
    if not title or not title.strip():
        raise TaskValidationError("title is required")
    if not description or not description.strip():
        raise TaskValidationError("description is required")
    if len(title) > max_title:
        raise TaskValidationError(
            f"title exceeds maximum length of {max_title} characters (current: {len(title)})"
        )
    if len(description) > max_description:
        raise TaskValidationError(
            f"description exceeds maximum length of {max_description} characters "
            f"(current: {len(description)})"
        )


@dataclass(slots=True)
class Task:
    """
    A single todo item.

    Invariant: completed_at is set if and only if completed is True.
    created_at is assigned once; updated_at moves on every mutation.
    """

    id: str
    title: str
    description: str
    deadline: datetime | None
    completed: bool
    completed_at: datetime | None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def new(
        cls,
        title: str,
        description: str,
        deadline: datetime | None,
        now: datetime,
    ) -> Task:
        return cls(
            id=new_task_id(),
            title=title,
            description=description,
            deadline=deadline,
            completed=False,
            completed_at=None,
            created_at=now,
            updated_at=now,
        )

    def mark_complete(self, now: datetime) -> None:
        self.completed = True
        self.completed_at = now
        self.updated_at = now

    def mark_incomplete(self, now: datetime) -> None:
        self.completed = False
        self.completed_at = None
        self.updated_at = now

    def is_overdue(self, now: datetime) -> bool:
        if self.deadline is None or self.completed:
            return False
        return self.deadline < now

    def days_until_deadline(self, now: datetime) -> int:
        if self.deadline is None:
            return -1
        # int() truncates toward zero: 36h overdue is -1 day, not -2.
        return int((self.deadline - now).total_seconds() / 86400)


@dataclass(slots=True)
class StreakState:
    current_streak: int = 0
    max_streak: int = 0
    total_completed: int = 0
    last_completed_at: datetime | None = None
    daily_completions: dict[str, int] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> StreakState:
        return cls()
