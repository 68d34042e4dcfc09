# tests/test_deadline.py

from __future__ import annotations

from datetime import datetime, timedelta

import pytest
from dateutil.relativedelta import relativedelta

from doit_tracker.tasks.deadline import (
    DeadlineError,
    EmptyInputError,
    InvalidCharactersError,
    InvalidFormatError,
    InvalidNumberError,
    InvalidUnitError,
    NonPositiveValueError,
    NoValidUnitsError,
    format_deadline_help,
    parse_relative,
    resolve_deadline,
    resolve_unit,
)


@pytest.mark.parametrize(
    ("unit", "step"),
    [
        ("m", timedelta(minutes=1)),
        ("h", timedelta(hours=1)),
        ("d", timedelta(hours=24)),
        ("w", timedelta(hours=168)),
    ],
)
def test_resolve_unit_multiplies(unit: str, step: timedelta) -> None:
    assert resolve_unit(1, unit) == step
    assert resolve_unit(7, unit) == 7 * step


def test_resolve_unit_rejects_unknown_code() -> None:
    with pytest.raises(InvalidUnitError) as exc:
        resolve_unit(3, "y")
    assert exc.value.unit == "y"
    assert "invalid time unit: y" in str(exc.value)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("30m", timedelta(minutes=30)),
        ("2h", timedelta(hours=2)),
        ("1d", timedelta(days=1)),
        ("2w", timedelta(weeks=2)),
        ("2d 3h", timedelta(days=2, hours=3)),
        ("1w 2d", timedelta(days=9)),
        ("1w 2d 3h 30m", timedelta(days=9, hours=3, minutes=30)),
        ("30m 3h 2d", timedelta(days=2, hours=3, minutes=30)),
        ("2d3h30m", timedelta(days=2, hours=3, minutes=30)),
        ("2d  3h   30m", timedelta(days=2, hours=3, minutes=30)),
        ("2d 3d", timedelta(days=5)),
        ("999d", timedelta(days=999)),
    ],
)
def test_parse_relative_sums_units(text: str, expected: timedelta, now: datetime) -> None:
    assert parse_relative(text, now=now) == expected


def test_parse_relative_order_spacing_and_case_independent(now: datetime) -> None:
    base = parse_relative("2d 3h", now=now)
    assert parse_relative("3h2d", now=now) == base
    assert parse_relative("2D 3H", now=now) == base
    assert parse_relative("2D 3h", now=now) == base
    assert parse_relative("\t2d\t3h ", now=now) == base


@pytest.mark.parametrize("text", ["5x", "d", "tomorrow", "", "   "])
def test_parse_relative_no_units(text: str, now: datetime) -> None:
    with pytest.raises(NoValidUnitsError):
        parse_relative(text, now=now)


@pytest.mark.parametrize("text", ["-2d", "2d 3x", "2d+3h", "1.5h", "2dd", "3h!"])
def test_parse_relative_rejects_unconsumed_characters(text: str, now: datetime) -> None:
    with pytest.raises(InvalidCharactersError):
        parse_relative(text, now=now)


def test_parse_relative_zero_value(now: datetime) -> None:
    with pytest.raises(NonPositiveValueError) as exc:
        parse_relative("0d", now=now)
    assert "must be positive" in str(exc.value)


def test_parse_relative_zero_months(now: datetime) -> None:
    with pytest.raises(InvalidNumberError):
        parse_relative("0M", now=now)


def test_parse_relative_overflow_is_invalid_number(now: datetime) -> None:
    with pytest.raises(InvalidNumberError):
        parse_relative("99999999999999w", now=now)


@pytest.mark.parametrize("unit", ["m", "h", "d", "w", "M"])
def test_magnitude_too_long_to_parse_is_invalid_number(unit: str, now: datetime) -> None:
    text = "1" * 5000 + unit
    with pytest.raises(InvalidNumberError):
        parse_relative(text, now=now)

    with pytest.raises(InvalidFormatError) as exc:
        resolve_deadline(text, now=now)
    assert isinstance(exc.value.cause, InvalidNumberError)


def test_month_uses_calendar_arithmetic() -> None:
    jan31 = datetime(2025, 1, 31, 12, 0).astimezone()
    assert parse_relative("1M", now=jan31) == timedelta(days=28)

    mar10 = datetime(2025, 3, 10, 12, 0).astimezone()
    assert parse_relative("1M", now=mar10) == timedelta(days=31)


def test_months_combine_with_units(now: datetime) -> None:
    expected = (now + relativedelta(months=2)) - now + timedelta(days=1, minutes=30)
    assert parse_relative("1M 1d 30m 1M", now=now) == expected
    assert parse_relative("1d1M30m", now=now) == (now + relativedelta(months=1)) - now + timedelta(
        days=1, minutes=30
    )


def test_lowercase_m_is_minutes_not_months(now: datetime) -> None:
    assert parse_relative("1m", now=now) == timedelta(minutes=1)


def test_resolve_deadline_absolute_exact_local_instant() -> None:
    result = resolve_deadline("2025-11-16 14:30")
    assert result == datetime(2025, 11, 16, 14, 30).astimezone()
    assert result.tzinfo is not None


def test_resolve_deadline_absolute_ignores_now(now: datetime) -> None:
    assert resolve_deadline("  2025-11-16 14:30 ", now=now) == datetime(2025, 11, 16, 14, 30).astimezone()


@pytest.mark.parametrize(
    "text",
    ["2025-13-01 14:30", "2025/11/16 14:30", "2025-11-16T14:30", "2025-1-16 14:30", "2025-11-16  14:30"],
)
def test_resolve_deadline_bad_absolute(text: str) -> None:
    with pytest.raises(InvalidFormatError):
        resolve_deadline(text)


def test_resolve_deadline_relative_adds_to_now(now: datetime) -> None:
    assert resolve_deadline("2d 3h", now=now) == now + timedelta(days=2, hours=3)


def test_resolve_deadline_relative_uses_wall_clock() -> None:
    before = datetime.now().astimezone()
    result = resolve_deadline("2h")
    after = datetime.now().astimezone()
    assert before + timedelta(hours=2) <= result <= after + timedelta(hours=2)


def test_resolve_deadline_one_month(now: datetime) -> None:
    result = resolve_deadline("1M", now=now)
    assert result == now + relativedelta(months=1)
    assert timedelta(days=28) <= result - now <= timedelta(days=31)


@pytest.mark.parametrize("text", ["", "   ", "\t"])
def test_resolve_deadline_empty(text: str) -> None:
    with pytest.raises(EmptyInputError) as exc:
        resolve_deadline(text)
    assert "cannot be empty" in str(exc.value)


@pytest.mark.parametrize(
    ("text", "cause", "fragment"),
    [
        ("5x", NoValidUnitsError, "no valid time units"),
        ("d", NoValidUnitsError, "no valid time units"),
        ("tomorrow", NoValidUnitsError, "no valid time units"),
        ("-2d", InvalidCharactersError, "invalid characters"),
        ("2d 3x", InvalidCharactersError, "invalid characters"),
        ("0d", NonPositiveValueError, "must be positive"),
    ],
)
def test_resolve_deadline_wraps_parser_errors(text: str, cause: type, fragment: str) -> None:
    with pytest.raises(InvalidFormatError) as exc:
        resolve_deadline(text)
    err = exc.value
    assert isinstance(err.cause, cause)
    assert isinstance(err, DeadlineError)
    assert isinstance(err, ValueError)
    message = str(err)
    assert fragment in message
    assert "YYYY-MM-DD HH:MM" in message
    assert "Relative" in message


def test_format_deadline_help_mentions_everything() -> None:
    help_text = format_deadline_help()
    for expected in (
        "Deadline formats",
        "YYYY-MM-DD HH:MM",
        "minutes",
        "hours",
        "days",
        "weeks",
        "months",
        "Combinations",
    ):
        assert expected in help_text
