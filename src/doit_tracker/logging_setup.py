# src/doit_tracker/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "doit.log"
LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Marks handlers installed here so a second setup call replaces only ours.
_HANDLER_TAG = "_doit_handler"


class _ConsoleNoiseFilter(logging.Filter):
    """
    Decide what reaches stderr while the user is typing commands.

    App records pass through (the handler level still applies). Captured
    Python warnings are shown from WARNING up. Everything else from third
    parties only shows up at ERROR or above.
    """

    def __init__(self, app_prefix: str = "doit_tracker") -> None:
        super().__init__()
        self._app_prefix = app_prefix

    def _is_app(self, name: str) -> bool:
        return name == self._app_prefix or name.startswith(self._app_prefix + ".")

    def filter(self, record: logging.LogRecord) -> bool:
        if self._is_app(record.name):
            return True
        if record.name == "py.warnings":
            return record.levelno >= logging.WARNING
        return record.levelno >= logging.ERROR


def _tagged(handler: logging.Handler) -> logging.Handler:
    setattr(handler, _HANDLER_TAG, True)
    return handler


def setup_logging(
    *,
    log_dir: str | Path,
    console_level: int = logging.WARNING,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Send filtered records to stderr and everything at `file_level` to
    `<log_dir>/doit.log`. Returns the log file path.

    Safe to call more than once: handlers from an earlier call are removed,
    handlers installed by others (pytest's caplog, for one) are left alone.
    """
    log_path = Path(log_dir) / LOG_FILE_NAME
    log_path.parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(min(console_level, file_level))
    for handler in [h for h in root.handlers if getattr(h, _HANDLER_TAG, False)]:
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)

    console = _tagged(logging.StreamHandler(sys.stderr))
    console.setLevel(console_level)
    console.setFormatter(formatter)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    file_handler = _tagged(logging.FileHandler(str(log_path), encoding="utf-8"))
    file_handler.setLevel(file_level)
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)

    logging.captureWarnings(True)
    return log_path
