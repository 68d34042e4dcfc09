# tasks/streak.py

from __future__ import annotations

import logging
from datetime import datetime

from .task_models import StreakState

logger = logging.getLogger(__name__)

DAY_LABEL_FORMAT = "%Y-%m-%d"
_SECONDS_PER_DAY = 86400


def day_label(now: datetime) -> str:
    return now.strftime(DAY_LABEL_FORMAT)


def gap_days(last: datetime, now: datetime) -> int:
    """
    Whole 24h periods elapsed between two completions.

    This counts elapsed time, not midnights: 23h59m across a date change is
    still 0, and 24h05m is 1 no matter how many dates were crossed.
    Truncates toward zero, so a slightly earlier `now` (clock skew) reads as 0.
    """
    return int((now - last).total_seconds() / _SECONDS_PER_DAY)


def record_completion(state: StreakState, now: datetime) -> StreakState:
    """
    Apply one incomplete -> complete transition to `state` (in place).

    Callers must invoke this exactly once per transition and persist the
    result in the same read-modify-write sequence they loaded it in.
    """
    today = day_label(now)
    state.daily_completions[today] = state.daily_completions.get(today, 0) + 1
    state.total_completed += 1

    if state.last_completed_at is None:
        state.current_streak = 1
        if state.max_streak == 0:
            state.max_streak = 1
    else:
        gap = gap_days(state.last_completed_at, now)
        if gap == 0:
            pass
        elif gap == 1:
            state.current_streak += 1
            if state.current_streak > state.max_streak:
                state.max_streak = state.current_streak
        else:
            state.current_streak = 1

    state.last_completed_at = now
    logger.debug(
        "Streak updated current=%s max=%s total=%s day=%s",
        state.current_streak,
        state.max_streak,
        state.total_completed,
        today,
    )
    return state
