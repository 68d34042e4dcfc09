# src/doit_tracker/connectors/console_connector.py

from __future__ import annotations

import logging

from ..cli.commands import refresh_listing
from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)


def run_console_loop(state: AppState) -> None:
    logger.info("Console started db=%s", getattr(state.settings, "tasks_db_path", "?"))

    def emit(text: str) -> None:
        print(text, flush=True)

    try:
        print(refresh_listing(state))
    except Exception:
        logger.exception("Initial listing failed.")
        print("Could not load todos. See the log for details.")
    print("\nType /help for commands, /exit to quit.\n")

    while True:
        try:
            user_input = input("doit> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            print()
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit", "/q"):
            logger.info("Console exit command received.")
            break

        if not user_input.startswith("/"):
            print("Commands start with '/'. Use /help to list them.\n")
            continue

        try:
            response = command_registry.handle(state, user_input, emit=emit)
        except Exception:
            logger.exception("Command handler crashed.")
            response = "Internal error while handling a command."

        if response is not None:
            print(response)
            print()

    logger.info("Console finished.")
