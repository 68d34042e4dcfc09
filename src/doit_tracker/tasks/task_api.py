# src/doit_tracker/tasks/task_api.py

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime

from ..core.ports import TaskRepo
from .deadline import resolve_deadline
from .ordering import completed_tasks, order_tasks, top_upcoming, without_deadline
from .task_models import (
    MAX_DESCRIPTION_LENGTH,
    MAX_TITLE_LENGTH,
    StreakState,
    Task,
    validate_task_fields,
)

logger = logging.getLogger(__name__)

DEFAULT_TOP_N = 10


def _now() -> datetime:
    return datetime.now().astimezone()


@dataclass(slots=True)
class Listing:
    """Everything the list view needs, computed from one read of the store."""

    tasks: list[Task]
    top_upcoming: list[Task]
    no_deadline: list[Task]
    completed: list[Task]
    streak: StreakState
    top_n: int = DEFAULT_TOP_N
    visible: list[Task] = field(default_factory=list)


def create_task(
    store: TaskRepo,
    *,
    title: str,
    description: str,
    deadline_text: str | None = None,
    now: datetime | None = None,
    max_title: int = MAX_TITLE_LENGTH,
    max_description: int = MAX_DESCRIPTION_LENGTH,
) -> Task:
    """
    Validate input, resolve the deadline and persist a new task.

    Raises TaskValidationError / DeadlineError before anything is written.
    """
    if now is None:
        now = _now()
    validate_task_fields(title, description, max_title=max_title, max_description=max_description)

    deadline = None
    if deadline_text is not None and deadline_text.strip():
        deadline = resolve_deadline(deadline_text, now=now)

    task = Task.new(title.strip(), description.strip(), deadline, now)
    store.save_task(task)
    logger.info("Task created id=%s deadline=%s", task.id, deadline)
    return task


def toggle_complete(store: TaskRepo, task_id: str, *, now: datetime | None = None) -> Task:
    """Flip completion. Only incomplete -> complete counts toward the streak."""
    if now is None:
        now = _now()
    task = store.get_task(task_id)
    if task.completed:
        task.mark_incomplete(now)
    else:
        task.mark_complete(now)
    store.update_task(task, now=now)
    return task


def set_completed(store: TaskRepo, task_id: str, completed: bool, *, now: datetime | None = None) -> Task:
    """Idempotent variant of toggle_complete."""
    if now is None:
        now = _now()
    task = store.get_task(task_id)
    if task.completed == completed:
        return task
    if completed:
        task.mark_complete(now)
    else:
        task.mark_incomplete(now)
    store.update_task(task, now=now)
    return task


def edit_task(
    store: TaskRepo,
    task_id: str,
    *,
    title: str | None = None,
    description: str | None = None,
    deadline_text: str | None = None,
    clear_deadline: bool = False,
    now: datetime | None = None,
    max_title: int = MAX_TITLE_LENGTH,
    max_description: int = MAX_DESCRIPTION_LENGTH,
) -> Task:
    """Change fields of an existing task. Completion state is left alone."""
    if now is None:
        now = _now()
    task = store.get_task(task_id)

    new_title = task.title if title is None else title.strip()
    new_description = task.description if description is None else description.strip()
    validate_task_fields(new_title, new_description, max_title=max_title, max_description=max_description)

    if clear_deadline:
        task.deadline = None
    elif deadline_text is not None:
        task.deadline = resolve_deadline(deadline_text, now=now)

    task.title = new_title
    task.description = new_description
    store.update_task(task, now=now)
    return task


def remove_task(store: TaskRepo, task_id: str) -> None:
    # Raise for unknown ids rather than silently deleting nothing.
    store.get_task(task_id)
    store.delete_task(task_id)
    logger.info("Task deleted id=%s", task_id)


def load_listing(store: TaskRepo, *, top_n: int = DEFAULT_TOP_N) -> Listing:
    tasks = order_tasks(store.get_all_tasks())
    upcoming = top_upcoming(tasks, top_n)
    no_deadline = without_deadline(tasks)
    done = completed_tasks(tasks)
    return Listing(
        tasks=tasks,
        top_upcoming=upcoming,
        no_deadline=no_deadline,
        completed=done,
        streak=store.get_streak(),
        top_n=top_n,
        visible=[*upcoming, *no_deadline, *done],
    )
