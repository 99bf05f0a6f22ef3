"""Read-only derivations over a ``UserData`` snapshot.

Every function here is pure: it takes the snapshot (and the calendar day the
caller considers "today") and returns a value without touching storage.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Sequence, TypeVar

from ..config import BaseConfig
from ..models.user_data import (
    PRIORITIES,
    AttendanceRecord,
    DailyGoal,
    DailyStat,
    GoalAnalytics,
    PriorityCount,
    StressRecord,
    StudySession,
    Subject,
    UserData,
)

TREND_DAYS = 7

_DayRecord = TypeVar("_DayRecord", DailyStat, GoalAnalytics, StressRecord)


def round_half_up(value: float, places: int = 0) -> float:
    """Round like a calculator does (0.5 always rounds away from zero)."""

    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def percent(part: float, whole: float) -> int:
    """Return ``part / whole`` as a rounded integer percentage, 0 for an empty whole."""

    if not whole:
        return 0
    return int(round_half_up(part / whole * 100))


@dataclass(slots=True)
class Metrics:
    """Subject-level averages shown on the dashboard."""

    average_score: float
    average_attendance: float
    total_subjects: int


@dataclass(slots=True)
class TrendPoint:
    occurred_on: date
    rate: int


@dataclass(slots=True)
class ScheduleSummary:
    total_planned: float
    total_completed: float
    completion_percentage: int


@dataclass(slots=True)
class GoalSummary:
    average_completion_rate: int
    total_goals: int
    completed_goals: int


def mean_score(subjects: Sequence[Subject]) -> float:
    """Mean subject score rounded to 2 decimals; 0 when there are no subjects."""

    if not subjects:
        return 0.0
    return round_half_up(sum(s.score for s in subjects) / len(subjects), 2)


def calculate_metrics(data: UserData) -> Metrics:
    subjects = data.subjects
    if not subjects:
        return Metrics(average_score=0.0, average_attendance=0.0, total_subjects=0)

    total_attendance = sum(s.attendance for s in subjects)
    return Metrics(
        average_score=mean_score(subjects),
        average_attendance=round_half_up(total_attendance / len(subjects), 2),
        total_subjects=len(subjects),
    )


def _sessions_in_trailing_week(sessions: Iterable[StudySession], today: date) -> list[StudySession]:
    # Lower bound is inclusive: today - 7 days still counts.
    week_ago = today - timedelta(days=7)
    return [s for s in sessions if s.occurred_on >= week_ago]


def weekly_actual_hours(data: UserData, today: date) -> float:
    """Hours of completed study in the trailing week."""

    minutes = sum(
        s.duration for s in _sessions_in_trailing_week(data.study_sessions, today) if s.completed
    )
    return minutes / 60


def study_completion_rate(data: UserData, today: date) -> int:
    """Percent of trailing-week sessions that were completed."""

    window = _sessions_in_trailing_week(data.study_sessions, today)
    return percent(sum(1 for s in window if s.completed), len(window))


def goal_completion_trend(data: UserData) -> list[TrendPoint]:
    return [
        TrendPoint(occurred_on=entry.occurred_on, rate=entry.completion_rate)
        for entry in data.goal_analytics[-TREND_DAYS:]
    ]


def today_goals(data: UserData, today: date) -> list[DailyGoal]:
    return [goal for goal in data.daily_goals if goal.occurred_on == today]


def today_attendance(data: UserData, today: date) -> list[AttendanceRecord]:
    return [record for record in data.attendance_records if record.occurred_on == today]


def today_stress_level(data: UserData, today: date) -> Optional[StressRecord]:
    return next((r for r in data.stress_records if r.occurred_on == today), None)


def stress_trend(data: UserData) -> list[StressRecord]:
    return list(data.stress_records[-TREND_DAYS:])


def average_stress_level(data: UserData) -> float:
    records = data.stress_records
    if not records:
        return 0.0
    return round_half_up(sum(r.level for r in records) / len(records), 1)


def stress_label(level: int) -> str:
    if level <= 2:
        return "Very Low"
    if level <= 4:
        return "Low"
    if level <= 6:
        return "Moderate"
    if level <= 8:
        return "High"
    return "Very High"


def stress_direction(trend: Sequence[StressRecord]) -> str:
    """Compare the last three readings against the earlier ones.

    Returns ``"up"``, ``"down"`` or ``"flat"``.
    """
    if len(trend) < 2:
        return "flat"
    recent = trend[-3:]
    older = trend[:-3]
    if not older:
        return "flat"

    avg_recent = sum(r.level for r in recent) / len(recent)
    avg_older = sum(r.level for r in older) / len(older)
    if avg_recent > avg_older:
        return "up"
    if avg_recent < avg_older:
        return "down"
    return "flat"


def weekly_sleep_hours(data: UserData) -> float:
    """Project the single nightly sleep figure over a week."""

    # Sleep is not logged per day, so this is a projection rather than a sum.
    if not data.study_data.sleep_hours:
        return 0.0
    return data.study_data.sleep_hours * 7


def weekly_schedule_summary(data: UserData) -> ScheduleSummary:
    planned = sum(day.planned for day in data.weekly_schedule.values())
    completed = sum(day.completed for day in data.weekly_schedule.values())
    return ScheduleSummary(
        total_planned=planned,
        total_completed=completed,
        completion_percentage=percent(completed, planned),
    )


def goal_summary(data: UserData) -> GoalSummary:
    """Roll up the last week of goal analytics."""

    recent = data.goal_analytics[-TREND_DAYS:]
    if not recent:
        return GoalSummary(average_completion_rate=0, total_goals=0, completed_goals=0)

    average = round_half_up(sum(a.completion_rate for a in recent) / len(recent))
    return GoalSummary(
        average_completion_rate=int(average),
        total_goals=sum(a.total_goals for a in recent),
        completed_goals=sum(a.completed_goals for a in recent),
    )


# ----------------------------------------------------------------------
# Per-day recomputation used by the mutation path
# ----------------------------------------------------------------------


def recompute_daily_stat(sessions: Iterable[StudySession], day: date) -> DailyStat:
    """Build the full rollup for ``day`` from scratch."""

    todays = [s for s in sessions if s.occurred_on == day]
    completed = [s for s in todays if s.completed]

    by_subject: dict[str, int] = {}
    for session in completed:
        if session.subject:
            by_subject[session.subject] = by_subject.get(session.subject, 0) + session.duration

    return DailyStat(
        occurred_on=day,
        total_minutes=sum(s.duration for s in completed),
        completed_sessions=len(completed),
        total_sessions=len(todays),
        subjects=by_subject,
    )


def recompute_goal_analytics(goals: Iterable[DailyGoal], day: date) -> GoalAnalytics:
    todays = [g for g in goals if g.occurred_on == day]
    completed = [g for g in todays if g.completed]

    breakdown = {}
    for priority in PRIORITIES:
        tier = [g for g in todays if g.priority == priority]
        breakdown[priority] = PriorityCount(
            total=len(tier),
            completed=sum(1 for g in tier if g.completed),
        )

    return GoalAnalytics(
        occurred_on=day,
        total_goals=len(todays),
        completed_goals=len(completed),
        completion_rate=percent(len(completed), len(todays)),
        priority_breakdown=breakdown,
    )


def replace_for_day(
    records: Sequence[_DayRecord],
    record: _DayRecord,
    *,
    limit: int = BaseConfig.DAILY_HISTORY_LIMIT,
) -> list[_DayRecord]:
    """Swap in ``record`` as the only entry for its day and keep the newest ``limit``."""

    kept = [r for r in records if r.occurred_on != record.occurred_on]
    kept.append(record)
    return kept[-limit:]


def attendance_percentage(
    records: Iterable[AttendanceRecord],
    subject: str,
    today: date,
    *,
    window_days: int = BaseConfig.ATTENDANCE_WINDOW_DAYS,
) -> Optional[int]:
    """Rolling attendance percent for ``subject``; None when nothing is recorded."""

    since = today - timedelta(days=window_days)
    window = [r for r in records if r.subject == subject and since <= r.occurred_on <= today]
    if not window:
        return None
    return percent(sum(1 for r in window if r.present), len(window))


def minutes_on(data: UserData, day: date) -> int:
    stat = next((s for s in data.daily_stats if s.occurred_on == day), None)
    return stat.total_minutes if stat else 0


__all__ = [
    "GoalSummary",
    "Metrics",
    "ScheduleSummary",
    "TrendPoint",
    "attendance_percentage",
    "average_stress_level",
    "calculate_metrics",
    "goal_completion_trend",
    "goal_summary",
    "mean_score",
    "minutes_on",
    "percent",
    "recompute_daily_stat",
    "recompute_goal_analytics",
    "replace_for_day",
    "round_half_up",
    "stress_direction",
    "stress_label",
    "stress_trend",
    "study_completion_rate",
    "today_attendance",
    "today_goals",
    "today_stress_level",
    "weekly_actual_hours",
    "weekly_schedule_summary",
    "weekly_sleep_hours",
]
