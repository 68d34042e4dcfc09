# src/doit_tracker/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from datetime import datetime
from typing import cast

from ..core.state import AppState
from ..tasks import task_api
from ..tasks.deadline import DeadlineError, format_deadline_help
from ..tasks.task_models import MAX_DESCRIPTION_LENGTH, MAX_TITLE_LENGTH, Task, TaskNotFoundError, TaskValidationError
from .render import render_listing, render_streak, render_task

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _now() -> datetime:
    return datetime.now().astimezone()


def _limits(state: AppState) -> tuple[int, int]:
    settings = state.settings
    return (
        int(getattr(settings, "max_title_length", MAX_TITLE_LENGTH)),
        int(getattr(settings, "max_description_length", MAX_DESCRIPTION_LENGTH)),
    )


def _resolve_number(state: AppState, args: list[str]) -> Task | str:
    """Parse the leading task number; returns the Task or a user-facing error."""
    if not args:
        return "Missing task number. Use /list to see numbers."
    try:
        number = int(args[0])
    except ValueError:
        return f"Not a task number: {args[0]}"
    task = state.task_at(number)
    if task is None:
        return f"No task #{number} in the last listing. Use /list to refresh."
    return task


def refresh_listing(state: AppState, *, show_descriptions: bool = False) -> str:
    top_n = int(getattr(state.settings, "top_upcoming_limit", task_api.DEFAULT_TOP_N))
    listing = task_api.load_listing(state.task_store, top_n=top_n)
    state.visible = listing.visible
    return render_listing(
        listing,
        _now(),
        show_descriptions=show_descriptions,
        empty_hint="Add one with /add title | description | deadline",
    )


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_list(state: AppState, args: list[str]) -> str:
    """
    /list     -> numbered listing
    /list -v  -> include descriptions
    """
    verbose = bool(args) and args[0].lower() in ("-v", "v", "full")
    return refresh_listing(state, show_descriptions=verbose)


def cmd_add(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """/add title | description | deadline  (deadline optional)"""
    fields = [p.strip() for p in " ".join(args).split("|")]
    if len(fields) < 2 or len(fields) > 3:
        return "Usage: /add title | description | deadline (deadline optional)."

    title, description = fields[0], fields[1]
    deadline_text = fields[2] if len(fields) == 3 else None
    max_title, max_description = _limits(state)
    now = _now()

    try:
        task = task_api.create_task(
            state.task_store,
            title=title,
            description=description,
            deadline_text=deadline_text,
            now=now,
            max_title=max_title,
            max_description=max_description,
        )
    except (DeadlineError, TaskValidationError) as e:
        return f"Error: {e}"

    refresh_listing(state)
    if emit and task.is_overdue(now):
        emit("Note: this deadline is already in the past.")
    if task.deadline is not None:
        return f"✔ Todo created: {task.title} (deadline {task.deadline:%Y-%m-%d %H:%M})"
    return f"✔ Todo created: {task.title}"


def _set_completed(state: AppState, args: list[str], completed: bool) -> str:
    target = _resolve_number(state, args)
    if isinstance(target, str):
        return target
    try:
        task = task_api.set_completed(state.task_store, target.id, completed, now=_now())
    except TaskNotFoundError as e:
        return f"Error: {e}"
    refresh_listing(state)
    if completed:
        streak = state.task_store.get_streak()
        return f"Completed: {task.title}\n{render_streak(streak)}"
    return f"Reopened: {task.title}"


def cmd_done(state: AppState, args: list[str]) -> str:
    return _set_completed(state, args, True)


def cmd_undo(state: AppState, args: list[str]) -> str:
    return _set_completed(state, args, False)


def cmd_show(state: AppState, args: list[str]) -> str:
    target = _resolve_number(state, args)
    if isinstance(target, str):
        return target
    # The numbered listing may be stale; show what is stored now.
    try:
        task = state.task_store.get_task(target.id)
    except TaskNotFoundError as e:
        return f"Error: {e}"
    return render_task(task, int(args[0]), _now(), show_description=True)


def cmd_edit(state: AppState, args: list[str]) -> str:
    """
    /edit N title <text>
    /edit N desc <text>
    /edit N deadline <deadline | none>
    """
    usage = "Usage: /edit N title|desc|deadline value"
    if len(args) < 3:
        return usage
    target = _resolve_number(state, args)
    if isinstance(target, str):
        return target

    field = args[1].lower()
    value = " ".join(args[2:])
    max_title, max_description = _limits(state)
    kwargs: dict[str, object] = {}
    if field == "title":
        kwargs["title"] = value
    elif field in ("desc", "description"):
        kwargs["description"] = value
    elif field == "deadline":
        if value.lower() in ("none", "-", "clear"):
            kwargs["clear_deadline"] = True
        else:
            kwargs["deadline_text"] = value
    else:
        return usage

    try:
        task = task_api.edit_task(
            state.task_store,
            target.id,
            now=_now(),
            max_title=max_title,
            max_description=max_description,
            **kwargs,  # type: ignore[arg-type]
        )
    except (DeadlineError, TaskValidationError, TaskNotFoundError) as e:
        return f"Error: {e}"
    refresh_listing(state)
    return f"Updated: {task.title}"


def cmd_del(state: AppState, args: list[str]) -> str:
    """
    /del N      -> ask for confirmation
    /del N yes  -> delete
    """
    target = _resolve_number(state, args)
    if isinstance(target, str):
        return target
    if len(args) < 2 or args[1].lower() not in ("y", "yes"):
        return f"Delete '{target.title}'? Confirm with /del {args[0]} yes"
    try:
        task_api.remove_task(state.task_store, target.id)
    except TaskNotFoundError as e:
        return f"Error: {e}"
    refresh_listing(state)
    return f"Deleted: {target.title}"


def cmd_streak(state: AppState, args: list[str]) -> str:
    streak = state.task_store.get_streak()
    lines = [render_streak(streak)]
    if streak.last_completed_at is not None:
        lines.append(f"Last completion: {streak.last_completed_at:%Y-%m-%d %H:%M}")
    recent = sorted(streak.daily_completions.items(), reverse=True)[:7]
    if recent:
        lines.append("Recent days:")
        lines.extend(f"  {day}: {count}" for day, count in recent)
    return "\n".join(lines)


def cmd_formats(state: AppState, args: list[str]) -> str:
    return format_deadline_help()


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("list", cmd_list, help_text="List todos: /list | /list -v.", aliases=["ls", "l"])
registry.register("add", cmd_add, help_text="Add a todo: /add title | description | deadline.", aliases=["new", "n"])
registry.register("done", cmd_done, help_text="Mark todo N complete: /done N.", aliases=["c"])
registry.register("undo", cmd_undo, help_text="Mark todo N incomplete: /undo N.")
registry.register("show", cmd_show, help_text="Show todo N with its description: /show N.")
registry.register("edit", cmd_edit, help_text="Edit todo N: /edit N title|desc|deadline value.")
registry.register("del", cmd_del, help_text="Delete todo N: /del N yes.", aliases=["rm", "d"])
registry.register("streak", cmd_streak, help_text="Show completion streak.")
registry.register("formats", cmd_formats, help_text="Show accepted deadline formats.")
