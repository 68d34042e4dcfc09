# src/doit_tracker/cli/render.py

"""Plain-text rendering of a Listing for the console and `doit --list`."""

from __future__ import annotations

from datetime import datetime

from ..tasks.task_api import Listing
from ..tasks.task_models import StreakState, Task


def deadline_info(task: Task, now: datetime) -> str:
    if task.deadline is None or task.completed:
        return ""
    days = task.days_until_deadline(now)
    if days < 0:
        return f" (Overdue by {-days} days)"
    if days == 0:
        return " (Due today!)"
    if days <= 3:
        return f" ({days} days left)"
    hour = task.deadline.hour % 12 or 12
    return f" ({task.deadline:%b} {task.deadline.day}, {hour}:{task.deadline:%M %p})"


def render_task(task: Task, number: int, now: datetime, *, show_description: bool = False) -> str:
    checkbox = "[✔]" if task.completed else "[ ]"
    line = f"{number:>3}. {checkbox} {task.title}{deadline_info(task, now)}"
    if show_description and task.description:
        line += f"\n       {task.description}"
    return line


def render_streak(streak: StreakState) -> str:
    return (
        f"Streak: {streak.current_streak} days | Max: {streak.max_streak} days | "
        f"Total: {streak.total_completed} completed"
    )


def render_listing(
    listing: Listing,
    now: datetime | None = None,
    *,
    show_descriptions: bool = False,
    empty_hint: str = "",
) -> str:
    if now is None:
        now = datetime.now().astimezone()

    lines = ["Todo List"]
    if listing.streak.current_streak > 0:
        lines.append(render_streak(listing.streak))

    number = 0
    sections = (
        (f"Upcoming Deadlines (Top {listing.top_n})", listing.top_upcoming),
        ("No Deadline", listing.no_deadline),
        ("Completed", listing.completed),
    )
    for header, tasks in sections:
        if not tasks:
            continue
        lines.append("")
        lines.append(header)
        for task in tasks:
            number += 1
            lines.append(render_task(task, number, now, show_description=show_descriptions))

    if number == 0:
        lines.append("")
        lines.append(f"No todos yet. {empty_hint}" if empty_hint else "No todos yet.")
    return "\n".join(lines)
