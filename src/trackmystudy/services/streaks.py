"""Study streak bookkeeping."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable

from ..config import BaseConfig
from ..models.user_data import DailyStat, StreakDay, StudyStreak

MIN_DAILY_MINUTES = BaseConfig.MIN_DAILY_MINUTES
HISTORY_LIMIT = BaseConfig.DAILY_HISTORY_LIMIT


def _append_history(streak: StudyStreak, day: date, *, maintained: bool, limit: int) -> list[StreakDay]:
    history = [*streak.streak_history, StreakDay(occurred_on=day, maintained=maintained)]
    return history[-limit:]


def update_streak(
    streak: StudyStreak,
    *,
    today: date,
    today_minutes: int,
    min_minutes: int = MIN_DAILY_MINUTES,
    history_limit: int = HISTORY_LIMIT,
) -> StudyStreak:
    """Advance the streak after a study session; unchanged below the daily minimum."""

    if today_minutes < min_minutes:
        return streak

    yesterday = today - timedelta(days=1)
    current = streak.current_streak
    last_study_date = streak.last_study_date

    if last_study_date == yesterday:
        current += 1
        last_study_date = today
    elif last_study_date != today:
        # Broken or never started
        current = 1
        last_study_date = today

    return StudyStreak(
        current_streak=current,
        longest_streak=max(streak.longest_streak, current),
        last_study_date=last_study_date,
        streak_history=_append_history(streak, today, maintained=True, limit=history_limit),
    )


def check_streak_maintenance(
    streak: StudyStreak,
    *,
    today: date,
    today_minutes: int,
    min_minutes: int = MIN_DAILY_MINUTES,
) -> StudyStreak:
    """Zero the current streak when yesterday's run was not continued today.

    Meant to be evaluated once ``today`` is over; ``longest_streak`` is kept.
    """
    yesterday = today - timedelta(days=1)
    if streak.last_study_date == yesterday and today_minutes < min_minutes:
        return streak.model_copy(update={"current_streak": 0})
    return streak


def decay_stale_streak(
    streak: StudyStreak,
    *,
    today: date,
    history_limit: int = HISTORY_LIMIT,
) -> StudyStreak:
    """Zero a streak whose last study day is older than yesterday.

    Records the missed day (yesterday) as not maintained.
    """
    yesterday = today - timedelta(days=1)
    if streak.current_streak <= 0 or streak.last_study_date is None:
        return streak
    if streak.last_study_date >= yesterday:
        return streak

    return streak.model_copy(
        update={
            "current_streak": 0,
            "streak_history": _append_history(
                streak, yesterday, maintained=False, limit=history_limit
            ),
        }
    )


def qualifying_run(
    stats: Iterable[DailyStat],
    *,
    today: date,
    limit: int,
    min_minutes: int = MIN_DAILY_MINUTES,
) -> int:
    """Count consecutive qualifying days ending today, looking back at most ``limit`` days."""

    by_day = {s.occurred_on: s for s in stats if s.total_minutes >= min_minutes}

    # Walk backwards from today until a gap.
    run = 0
    cursor = today
    while run < limit and cursor in by_day:
        run += 1
        cursor -= timedelta(days=1)
    return run


def days_maintained(streak: StudyStreak) -> int:
    return sum(1 for day in streak.streak_history if day.maintained)


__all__ = [
    "check_streak_maintenance",
    "days_maintained",
    "decay_stale_streak",
    "qualifying_run",
    "update_streak",
]
