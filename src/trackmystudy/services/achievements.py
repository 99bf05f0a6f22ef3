"""Badges and wellbeing warnings derived from core metrics."""

from __future__ import annotations

from datetime import date
from typing import Optional

from ..models.user_data import UserData
from .analytics import weekly_actual_hours, weekly_sleep_hours

WEEKLY_STUDY_THRESHOLD = 42  # 6h a day * 7
WEEKLY_SLEEP_MIN = 40  # ~6h a night


def streak_tier(current_streak: int) -> Optional[str]:
    if current_streak >= 30:
        return "30+ Day Streak"
    if current_streak >= 7:
        return "7+ Day Streak"
    if current_streak >= 3:
        return "3+ Day Streak"
    if current_streak > 0:
        return "Streak Started"
    return None


def session_tier(completed_sessions: int) -> Optional[str]:
    if completed_sessions >= 100:
        return "100 Sessions"
    if completed_sessions >= 50:
        return "50 Sessions"
    if completed_sessions >= 10:
        return "10 Sessions"
    return None


def achievements(data: UserData) -> list[str]:
    """Earned badges, streak badge first."""

    completed = sum(1 for s in data.study_sessions if s.completed)
    tiers = (streak_tier(data.study_streak.current_streak), session_tier(completed))
    return [tier for tier in tiers if tier]


def burnout_risk(data: UserData, today: date) -> bool:
    """True when a heavy study week coincides with too little projected sleep."""

    return (
        weekly_actual_hours(data, today) >= WEEKLY_STUDY_THRESHOLD
        and weekly_sleep_hours(data) < WEEKLY_SLEEP_MIN
    )


__all__ = [
    "WEEKLY_SLEEP_MIN",
    "WEEKLY_STUDY_THRESHOLD",
    "achievements",
    "burnout_risk",
    "session_tier",
    "streak_tier",
]
