"""The persisted ``UserData`` aggregate and its parts.

These are non-table SQLModel classes: they validate like pydantic models and
serialize to a single JSON blob stored under one key.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import field_validator
from sqlmodel import Field, SQLModel

WEEKDAYS: tuple[str, ...] = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)

PRIORITIES: tuple[str, ...] = ("high", "medium", "low")


class Subject(SQLModel):
    """A subject with its latest score and rolling attendance percentage."""

    name: str
    score: float = Field(default=0.0, ge=0, le=100)
    attendance: float = Field(default=0.0, ge=0, le=100)


class StudyData(SQLModel):
    """Manually entered lifestyle snapshot (not a time series)."""

    daily_study_hours: float = 0.0
    sleep_hours: float = 0.0
    screen_time: float = 0.0


class DailyGoal(SQLModel):
    id: str
    text: str
    completed: bool = False
    occurred_on: date
    priority: str = "medium"


class DaySchedule(SQLModel):
    """Planned vs completed hours for one weekday."""

    planned: float = 0.0
    completed: float = 0.0
    subjects: list[str] = Field(default_factory=list)


class BaselineData(SQLModel):
    """Write-once snapshot used as a fixed comparison point."""

    subjects: list[Subject] = Field(default_factory=list)
    overall_gpa: float = 0.0
    recorded_at: datetime


class PerformanceEntry(SQLModel):
    recorded_at: datetime
    subjects: list[Subject] = Field(default_factory=list)
    overall_gpa: float = 0.0


class StudySession(SQLModel):
    """A study session; created pending, completed exactly once."""

    id: str
    occurred_on: date
    duration: int  # minutes
    completed: bool = False
    subject: Optional[str] = None
    start_time: datetime
    end_time: Optional[datetime] = None


class DailyStat(SQLModel):
    """Per-day rollup recomputed from that day's sessions."""

    occurred_on: date
    total_minutes: int = 0
    completed_sessions: int = 0
    total_sessions: int = 0
    subjects: dict[str, int] = Field(default_factory=dict)


class AttendanceRecord(SQLModel):
    id: str
    occurred_on: date
    subject: str
    present: bool
    notes: Optional[str] = None


class PriorityCount(SQLModel):
    total: int = 0
    completed: int = 0


class GoalAnalytics(SQLModel):
    """Per-day goal completion rollup."""

    occurred_on: date
    total_goals: int = 0
    completed_goals: int = 0
    completion_rate: int = 0
    priority_breakdown: dict[str, PriorityCount] = Field(default_factory=dict)


class StreakDay(SQLModel):
    occurred_on: date
    maintained: bool = True


class StudyStreak(SQLModel):
    current_streak: int = 0
    longest_streak: int = 0
    last_study_date: Optional[date] = None
    streak_history: list[StreakDay] = Field(default_factory=list)


class StressRecord(SQLModel):
    id: str
    occurred_on: date
    level: int
    notes: Optional[str] = None
    factors: list[str] = Field(default_factory=list)


def default_weekly_schedule() -> dict[str, DaySchedule]:
    """Return a fresh empty schedule keyed by the seven weekday names."""

    return {day: DaySchedule() for day in WEEKDAYS}


class UserData(SQLModel):
    """Root aggregate: everything the app knows about the student."""

    name: str = "Student"
    branch: str = "Computer Science"
    year: str = "3rd Year"
    subjects: list[Subject] = Field(default_factory=list)
    study_data: StudyData = Field(default_factory=StudyData)
    daily_goals: list[DailyGoal] = Field(default_factory=list)
    weekly_schedule: dict[str, DaySchedule] = Field(default_factory=default_weekly_schedule)
    baseline_data: Optional[BaselineData] = None
    performance_history: list[PerformanceEntry] = Field(default_factory=list)
    study_sessions: list[StudySession] = Field(default_factory=list)
    daily_stats: list[DailyStat] = Field(default_factory=list)
    attendance_records: list[AttendanceRecord] = Field(default_factory=list)
    goal_analytics: list[GoalAnalytics] = Field(default_factory=list)
    study_streak: StudyStreak = Field(default_factory=StudyStreak)
    stress_records: list[StressRecord] = Field(default_factory=list)
    last_updated: datetime = Field(default_factory=datetime.now)

    @field_validator("weekly_schedule", mode="before")
    @classmethod
    def _fill_weekdays(cls, value):
        """Keep exactly the seven lowercase weekday keys, filling gaps with defaults."""

        if value is None:
            value = {}
        if not isinstance(value, dict):
            raise ValueError("weekly_schedule must be an object keyed by weekday")
        stored = {str(key).lower(): day for key, day in value.items()}
        return {day: stored.get(day) or DaySchedule() for day in WEEKDAYS}


__all__ = [
    "AttendanceRecord",
    "BaselineData",
    "DailyGoal",
    "DailyStat",
    "DaySchedule",
    "GoalAnalytics",
    "PRIORITIES",
    "PerformanceEntry",
    "PriorityCount",
    "StreakDay",
    "StressRecord",
    "StudyData",
    "StudySession",
    "StudyStreak",
    "Subject",
    "UserData",
    "WEEKDAYS",
    "default_weekly_schedule",
]
