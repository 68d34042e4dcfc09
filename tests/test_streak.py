# tests/test_streak.py

from __future__ import annotations

from datetime import datetime, timedelta

from doit_tracker.tasks.streak import day_label, gap_days, record_completion
from doit_tracker.tasks.task_models import StreakState


def test_first_completion_starts_streak(now: datetime) -> None:
    state = record_completion(StreakState.empty(), now)
    assert state.current_streak == 1
    assert state.max_streak == 1
    assert state.total_completed == 1
    assert state.last_completed_at == now
    assert state.daily_completions == {"2025-03-10": 1}


def test_first_completion_keeps_existing_max() -> None:
    state = StreakState(max_streak=4)
    record_completion(state, datetime(2025, 3, 10, 9, 0).astimezone())
    assert state.current_streak == 1
    assert state.max_streak == 4


def test_consecutive_days_extend_streak(now: datetime) -> None:
    state = StreakState.empty()
    record_completion(state, now)
    record_completion(state, now + timedelta(hours=20))
    record_completion(state, now + timedelta(hours=44))

    assert state.current_streak == 2
    assert state.max_streak == 2
    assert state.total_completed == 3
    assert set(state.daily_completions) == {"2025-03-10", "2025-03-11", "2025-03-12"}
    assert sum(state.daily_completions.values()) == 3


def test_same_day_counts_but_keeps_streak(now: datetime) -> None:
    state = StreakState.empty()
    record_completion(state, now)
    record_completion(state, now + timedelta(hours=1))
    record_completion(state, now + timedelta(hours=2))
    assert state.current_streak == 1
    assert state.total_completed == 3
    assert state.daily_completions == {"2025-03-10": 3}
    assert state.last_completed_at == now + timedelta(hours=2)


def test_gap_over_a_day_resets_streak(now: datetime) -> None:
    state = StreakState(current_streak=3, max_streak=5, total_completed=10, last_completed_at=now)
    record_completion(state, now + timedelta(hours=50))
    assert state.current_streak == 1
    assert state.max_streak == 5
    assert state.total_completed == 11


def test_reset_then_two_completions(now: datetime) -> None:
    state = StreakState.empty()
    record_completion(state, now)
    record_completion(state, now + timedelta(hours=50))
    assert state.current_streak == 1
    assert state.max_streak == 1


def test_gap_is_elapsed_time_not_midnights() -> None:
    # 23h59m apart across a date change: still "the same day".
    first = datetime(2025, 3, 10, 0, 30).astimezone()
    second = first + timedelta(hours=23, minutes=59)
    assert gap_days(first, second) == 0

    state = StreakState.empty()
    record_completion(state, first)
    record_completion(state, second)
    assert state.current_streak == 1
    assert set(state.daily_completions) == {"2025-03-10", "2025-03-11"}


def test_just_over_a_day_counts_as_next_day() -> None:
    first = datetime(2025, 3, 10, 23, 30).astimezone()
    second = first + timedelta(hours=24, minutes=5)
    assert gap_days(first, second) == 1

    state = StreakState.empty()
    record_completion(state, first)
    record_completion(state, second)
    assert state.current_streak == 2
    assert state.max_streak == 2


def test_max_streak_not_raised_below_previous_best(now: datetime) -> None:
    state = StreakState(current_streak=1, max_streak=3, last_completed_at=now)
    record_completion(state, now + timedelta(hours=25))
    assert state.current_streak == 2
    assert state.max_streak == 3


def test_day_label_format() -> None:
    assert day_label(datetime(2025, 1, 5, 23, 59)) == "2025-01-05"
