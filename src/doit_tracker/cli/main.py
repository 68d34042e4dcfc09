# src/doit_tracker/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then either:
- creates one todo from flags (-t/-d/-n),
- prints the listing (-l),
- or starts the interactive console.
"""

from __future__ import annotations

import argparse
import logging
import sys

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging
from ..tasks import task_api
from ..tasks.deadline import DeadlineError, format_deadline_help
from ..tasks.task_models import TaskValidationError
from .render import render_listing

logger = logging.getLogger(__name__)

EXAMPLES = """\
Examples:
  doit -t "Meeting" -d "Team sync" -n "2025-11-20 14:00"
  doit -t "Quick fix" -d "Bug #123" -n "2h"
  doit -t "Project" -d "Milestone 1" -n "1w 2d"

Run without arguments to enter interactive mode."""


def build_parser(settings=None) -> argparse.ArgumentParser:
    max_title = getattr(settings, "max_title_length", 100)
    max_description = getattr(settings, "max_description_length", 500)
    parser = argparse.ArgumentParser(
        prog="doit",
        description="doit - a todo application",
        epilog=f"{format_deadline_help()}\n\n{EXAMPLES}",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-t", "--title", default="", help=f"Title of the todo (max {max_title} chars)")
    parser.add_argument(
        "-d", "--description", default="", help=f"Description of the todo (max {max_description} chars)"
    )
    parser.add_argument("-n", "--deadline", default="", help="Deadline for the todo (see formats below)")
    parser.add_argument("-l", "--list", action="store_true", help="List all todos")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show descriptions when listing")
    return parser


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    args = build_parser(settings).parse_args(argv)

    level_name = str(getattr(settings, "log_level", "WARNING")).upper()
    console_level = getattr(logging, level_name, logging.WARNING)
    setup_logging(log_dir=settings.log_dir, console_level=console_level)

    state = create_initial_state(settings=settings)
    try:
        if args.list:
            listing = task_api.load_listing(state.task_store, top_n=settings.top_upcoming_limit)
            print(
                render_listing(
                    listing,
                    show_descriptions=args.verbose,
                    empty_hint='Add one with: doit -t "title" -d "description" [-n deadline]',
                )
            )
            return 0

        if not args.title and not args.description:
            run_console_loop(state)
            return 0

        if not args.title or not args.description:
            print("Error: Both title (-t) and description (-d) are required", file=sys.stderr)
            return 1

        try:
            task = task_api.create_task(
                state.task_store,
                title=args.title,
                description=args.description,
                deadline_text=args.deadline or None,
                max_title=settings.max_title_length,
                max_description=settings.max_description_length,
            )
        except (DeadlineError, TaskValidationError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

        print("✔ Todo created successfully!")
        print(f"Title: {task.title}")
        if task.deadline is not None:
            print(f"Deadline: {task.deadline:%Y-%m-%d %H:%M}")
        return 0
    finally:
        state.task_store.close()
        logger.info("Bye.")


if __name__ == "__main__":
    raise SystemExit(main())
