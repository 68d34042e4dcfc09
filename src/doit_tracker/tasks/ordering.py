# tasks/ordering.py

"""
Derived views over the task collection.

All functions are read-only: they return new lists and never reorder or
mutate the input.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from .task_models import Task


def _ts(dt: datetime | None) -> float:
    return dt.timestamp() if dt is not None else 0.0


def _listing_key(task: Task) -> tuple[int, int, float, float]:
    # (completed?, no deadline?, deadline, -created). Completed tasks ignore
    # the deadline so they fall straight through to newest-created first.
    if task.completed:
        return (1, 0, 0.0, -_ts(task.created_at))
    if task.deadline is None:
        return (0, 1, 0.0, -_ts(task.created_at))
    return (0, 0, _ts(task.deadline), -_ts(task.created_at))


def order_tasks(tasks: Iterable[Task]) -> list[Task]:
    """
    Primary listing order.

    - incomplete before completed
    - among incomplete: with deadline before without, earliest deadline first
    - everything else (and ties): most recently created first
    """
    return sorted(tasks, key=_listing_key)


def top_upcoming(tasks: Iterable[Task], limit: int) -> list[Task]:
    """Up to `limit` incomplete tasks with a deadline, soonest first."""
    if limit <= 0:
        return []
    upcoming = [t for t in tasks if not t.completed and t.deadline is not None]
    upcoming.sort(key=lambda t: _ts(t.deadline))
    return upcoming[:limit]


def without_deadline(tasks: Iterable[Task]) -> list[Task]:
    """
    Incomplete tasks with no deadline, most recently created first.

    Sorted explicitly so the result does not depend on the iteration order of
    whatever collection the tasks came from.
    """
    pending = [t for t in tasks if not t.completed and t.deadline is None]
    pending.sort(key=lambda t: -_ts(t.created_at))
    return pending


def completed_tasks(tasks: Iterable[Task]) -> list[Task]:
    done = [t for t in tasks if t.completed]
    done.sort(key=lambda t: -_ts(t.created_at))
    return done
