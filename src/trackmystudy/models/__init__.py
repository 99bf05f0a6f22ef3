"""SQLModel table and aggregate exports."""

from .challenge import CHALLENGE_TYPES, Challenge
from .kv import StoredRecord
from .user_data import (
    PRIORITIES,
    WEEKDAYS,
    AttendanceRecord,
    BaselineData,
    DailyGoal,
    DailyStat,
    DaySchedule,
    GoalAnalytics,
    PerformanceEntry,
    PriorityCount,
    StreakDay,
    StressRecord,
    StudyData,
    StudySession,
    StudyStreak,
    Subject,
    UserData,
)

__all__ = [
    "AttendanceRecord",
    "BaselineData",
    "CHALLENGE_TYPES",
    "Challenge",
    "DailyGoal",
    "DailyStat",
    "DaySchedule",
    "GoalAnalytics",
    "PRIORITIES",
    "PerformanceEntry",
    "PriorityCount",
    "StoredRecord",
    "StreakDay",
    "StressRecord",
    "StudyData",
    "StudySession",
    "StudyStreak",
    "Subject",
    "UserData",
    "WEEKDAYS",
]
