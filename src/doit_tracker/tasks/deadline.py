# tasks/deadline.py

"""
Deadline parsing.

Two input formats are accepted:
- Absolute: "YYYY-MM-DD HH:MM" in local time (e.g. "2025-11-16 14:30").
- Relative: integer+unit tokens counted from now, e.g. "2d 3h30m", "1w 2d", "1M".
  Units: m (minutes), h (hours), d (days), w (weeks), M (calendar months).

The relative parser does not use a strict grammar. It runs two independent
scans (month tokens on the original input, other units on the lowercased
remainder) and then checks that the matched tokens cover the whole input.
Anything not consumed by a token (signs, decimals, unknown letters) makes the
lengths differ and the input is rejected.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta

from dateutil.relativedelta import relativedelta

logger = logging.getLogger(__name__)

ABSOLUTE_LAYOUT = "%Y-%m-%d %H:%M"

_ABSOLUTE_RE = re.compile(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}", re.ASCII)
_MONTH_RE = re.compile(r"(\d+)M", re.ASCII)
_UNIT_RE = re.compile(r"(\d+)([mhdw])", re.ASCII)
_WHITESPACE_RE = re.compile(r"\s+")

_UNIT_DELTAS: dict[str, timedelta] = {
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
    "d": timedelta(days=1),
    "w": timedelta(weeks=1),
}

_UNITS_HINT = "(use: m, h, d, w, M)"

SUPPORTED_FORMATS = (
    "Supported formats:\n"
    "  - Absolute: YYYY-MM-DD HH:MM (e.g., 2025-11-16 14:30)\n"
    "  - Relative: 1d, 2h, 3w, 1M (e.g., 2d 3h 20m)"
)


class DeadlineError(ValueError):
    """Base class for every deadline parsing failure."""


class EmptyInputError(DeadlineError):
    def __init__(self) -> None:
        super().__init__("deadline cannot be empty")


class InvalidUnitError(DeadlineError):
    def __init__(self, unit: str) -> None:
        super().__init__(f"invalid time unit: {unit} {_UNITS_HINT}")
        self.unit = unit


class InvalidNumberError(DeadlineError):
    def __init__(self, raw: str) -> None:
        super().__init__(f"invalid number: {raw}")
        self.raw = raw


class NonPositiveValueError(DeadlineError):
    def __init__(self) -> None:
        super().__init__("time values must be positive")


class NonPositiveTotalError(DeadlineError):
    def __init__(self) -> None:
        super().__init__("total duration must be positive")


class InvalidCharactersError(DeadlineError):
    def __init__(self) -> None:
        super().__init__("contains invalid characters or format")


class NoValidUnitsError(DeadlineError):
    def __init__(self) -> None:
        super().__init__(f"no valid time units found {_UNITS_HINT}")


class InvalidFormatError(DeadlineError):
    """Neither the absolute layout nor the relative parser accepted the input."""

    def __init__(self, cause: DeadlineError) -> None:
        super().__init__(f"invalid deadline format: {cause}\n{SUPPORTED_FORMATS}")
        self.cause = cause


def resolve_unit(value: int, unit: str) -> timedelta:
    """Map one magnitude+unit token to elapsed time. No sign checks here."""
    step = _UNIT_DELTAS.get(unit)
    if step is None:
        raise InvalidUnitError(unit)
    return step * value


def _strip_whitespace(s: str) -> str:
    return _WHITESPACE_RE.sub("", s)


def _positive_int(raw: str) -> int | None:
    try:
        value = int(raw)
    except ValueError:
        return None
    return value if value > 0 else None


def parse_relative(text: str, *, now: datetime | None = None) -> timedelta:
    """
    Parse a relative expression into elapsed time from `now`.

    Month tokens are resolved with calendar arithmetic, so "1M" is 28-31 days
    depending on where `now` sits in the calendar.
    """
    if now is None:
        now = datetime.now().astimezone()

    month_matches = list(_MONTH_RE.finditer(text))
    months = 0
    for m in month_matches:
        value = _positive_int(m.group(1))
        if value is None:
            raise InvalidNumberError(m.group(1))
        months += value

    remainder = _MONTH_RE.sub("", text).lower()
    unit_matches = list(_UNIT_RE.finditer(remainder))

    if not unit_matches and months == 0:
        raise NoValidUnitsError()

    # Coverage check: every non-whitespace character must belong to a token.
    reconstructed = "".join(m.group(0) for m in unit_matches) + "M" * months
    normalized = _strip_whitespace(text).lower()
    for m in month_matches:
        normalized = normalized.replace(m.group(0).lower(), "M", 1)
    if len(reconstructed) != len(normalized):
        raise InvalidCharactersError()

    total = timedelta()
    for m in unit_matches:
        raw, unit = m.group(1), m.group(2)
        try:
            value = int(raw)
        except ValueError:
            # Past the interpreter's int string conversion limit.
            raise InvalidNumberError(raw) from None
        if value <= 0:
            raise NonPositiveValueError()
        try:
            total += resolve_unit(value, unit)
        except OverflowError:
            raise InvalidNumberError(raw) from None

    if months > 0:
        try:
            total += (now + relativedelta(months=months)) - now
        except (OverflowError, ValueError):
            raise InvalidNumberError(str(months)) from None

    if total <= timedelta() and months == 0:
        raise NonPositiveTotalError()

    return total


def _parse_absolute(text: str) -> datetime | None:
    if not _ABSOLUTE_RE.fullmatch(text):
        return None
    try:
        naive = datetime.strptime(text, ABSOLUTE_LAYOUT)
    except ValueError:
        return None
    # Naive -> aware in the local timezone.
    return naive.astimezone()


def resolve_deadline(text: str, *, now: datetime | None = None) -> datetime:
    """
    Turn user input into a concrete deadline.

    The absolute layout is tried first; otherwise the relative expression is
    added to `now`, which is sampled once per call.
    """
    text = (text or "").strip()
    if not text:
        raise EmptyInputError()

    absolute = _parse_absolute(text)
    if absolute is not None:
        return absolute

    if now is None:
        now = datetime.now().astimezone()

    try:
        delta = parse_relative(text, now=now)
    except DeadlineError as e:
        logger.debug("Deadline rejected input=%r reason=%s", text, e)
        raise InvalidFormatError(e) from e

    try:
        return now + delta
    except OverflowError:
        raise InvalidFormatError(InvalidNumberError(text)) from None


def format_deadline_help() -> str:
    return (
        "Deadline formats:\n"
        "  - Absolute: YYYY-MM-DD HH:MM (e.g., 2025-11-16 14:30)\n"
        "  - Relative units:\n"
        "      m: minutes (30m = 30 minutes from now)\n"
        "      h: hours (2h = 2 hours from now)\n"
        "      d: days (1d = 1 day from now)\n"
        "      w: weeks (2w = 2 weeks from now)\n"
        "      M: months (1M = 1 month from now)\n"
        "  - Combinations: 2d 3h 30m (2 days, 3 hours, 30 minutes from now)"
    )
