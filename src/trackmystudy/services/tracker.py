"""Mutation API and query facade over the state store.

``StudyTracker`` is the object presentation code talks to. Every mutation reads
the current snapshot, builds new values for the slices it touches and commits
them through ``UserDataStore.save_user_data`` in one write. Derived state
(daily stats, goal analytics, streak, challenge progress) is recomputed
synchronously at the end of the mutation that changes its inputs.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Any, Iterable, Optional

from ..config import BaseConfig
from ..logging_config import get_logger
from ..models.challenge import Challenge
from ..models.user_data import (
    PRIORITIES,
    WEEKDAYS,
    AttendanceRecord,
    BaselineData,
    DailyGoal,
    PerformanceEntry,
    StressRecord,
    StudySession,
    StudyStreak,
    Subject,
    UserData,
)
from . import achievements, analytics, challenges, streaks
from .store import Clock, UserDataStore

logger = get_logger(__name__)

SubjectInput = Subject | dict[str, Any]

# Fields the challenge evaluator reads
_CHALLENGE_INPUTS = frozenset({"daily_stats", "study_sessions"})


def _new_id() -> str:
    return uuid.uuid4().hex


def _normalize_day(day: str) -> str:
    key = (day or "").strip().lower()
    if key not in WEEKDAYS:
        raise ValueError(f"Invalid weekday: {day}")
    return key


def _coerce_subjects(subjects: Iterable[SubjectInput]) -> list[Subject]:
    coerced = [s if isinstance(s, Subject) else Subject.model_validate(s) for s in subjects]
    # Subjects are keyed by name; the last entry for a name wins.
    by_name: dict[str, Subject] = {}
    for subject in coerced:
        by_name[subject.name] = subject
    return list(by_name.values())


class StudyTracker:
    """Single entry point for reading and changing a student's study data."""

    def __init__(
        self,
        store: UserDataStore,
        *,
        config: BaseConfig | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.store = store
        self.config = config
        self._clock = clock or datetime.now
        self._min_minutes = BaseConfig.MIN_DAILY_MINUTES
        self._history_limit = BaseConfig.DAILY_HISTORY_LIMIT
        self._performance_limit = BaseConfig.PERFORMANCE_HISTORY_LIMIT
        self._attendance_window = BaseConfig.ATTENDANCE_WINDOW_DAYS
        self._streak_decay = config.STREAK_DECAY if config is not None else True
        self._maintained_on: Optional[date] = None

    # ------------------------------------------------------------------
    # Snapshot access
    # ------------------------------------------------------------------
    @property
    def user_data(self) -> UserData:
        return self.store.user_data

    @property
    def challenge(self) -> Optional[Challenge]:
        return self.store.challenge

    @property
    def metrics(self) -> analytics.Metrics:
        return analytics.calculate_metrics(self.user_data)

    def now(self) -> datetime:
        return self._clock()

    def today(self) -> date:
        return self._clock().date()

    def load(self) -> UserData:
        """Hydrate from storage, then run the daily streak check and challenge evaluation."""
        self.store.load()
        self._maintained_on = None
        self._daily_tick()
        self.recompute_challenge_progress()
        return self.user_data

    def save_user_data(self, **changes: Any) -> UserData:
        data = self.store.save_user_data(**changes)
        if _CHALLENGE_INPUTS.intersection(changes):
            self.recompute_challenge_progress()
        return data

    def clear_user_data(self) -> UserData:
        """Irreversibly reset to defaults; the challenge is kept and re-evaluated."""
        data = self.store.clear_user_data()
        self.recompute_challenge_progress()
        return data

    def _daily_tick(self) -> None:
        """Decay a stale streak once per calendar day, on first access."""
        today = self.today()
        if not self._streak_decay or self._maintained_on == today:
            return
        self._maintained_on = today

        current = self.user_data.study_streak
        decayed = streaks.decay_stale_streak(current, today=today, history_limit=self._history_limit)
        if decayed is not current:
            logger.info(
                "Study streak reset after a missed day",
                extra={"previous_streak": current.current_streak},
            )
            self.store.save_user_data(study_streak=decayed)

    # ------------------------------------------------------------------
    # Profile and subjects
    # ------------------------------------------------------------------
    def update_profile(
        self,
        *,
        name: str | None = None,
        branch: str | None = None,
        year: str | None = None,
    ) -> UserData:
        self._daily_tick()
        changes = {
            key: value
            for key, value in {"name": name, "branch": branch, "year": year}.items()
            if value is not None
        }
        return self.store.save_user_data(**changes)

    def update_study_data(
        self,
        *,
        daily_study_hours: float | None = None,
        sleep_hours: float | None = None,
        screen_time: float | None = None,
    ) -> UserData:
        self._daily_tick()
        updates = {
            key: float(value)
            for key, value in {
                "daily_study_hours": daily_study_hours,
                "sleep_hours": sleep_hours,
                "screen_time": screen_time,
            }.items()
            if value is not None
        }
        study_data = self.user_data.study_data.model_copy(update=updates)
        return self.store.save_user_data(study_data=study_data)

    def set_baseline_data(self, subjects: Iterable[SubjectInput]) -> Optional[BaselineData]:
        """Capture the baseline snapshot once; later calls are no-ops."""
        self._daily_tick()
        snapshot = _coerce_subjects(subjects)
        if self.user_data.baseline_data is not None or not snapshot:
            return None

        baseline = BaselineData(
            subjects=snapshot,
            overall_gpa=analytics.mean_score(snapshot),
            recorded_at=self.now(),
        )
        self.store.save_user_data(baseline_data=baseline)
        logger.info("Baseline recorded", extra={"overall_gpa": baseline.overall_gpa})
        return baseline

    def update_performance_history(self, subjects: Iterable[SubjectInput]) -> Optional[PerformanceEntry]:
        self._daily_tick()
        snapshot = _coerce_subjects(subjects)
        if not snapshot:
            return None

        entry = PerformanceEntry(
            recorded_at=self.now(),
            subjects=snapshot,
            overall_gpa=analytics.mean_score(snapshot),
        )
        history = [*self.user_data.performance_history, entry][-self._performance_limit:]
        self.store.save_user_data(performance_history=history)
        return entry

    def record_subjects(self, subjects: Iterable[SubjectInput]) -> UserData:
        """Replace the subject list and snapshot it into baseline and history."""
        self._daily_tick()
        snapshot = _coerce_subjects(subjects)
        self.store.save_user_data(subjects=snapshot)
        self.set_baseline_data(snapshot)
        self.update_performance_history(snapshot)
        return self.user_data

    # ------------------------------------------------------------------
    # Goals
    # ------------------------------------------------------------------
    def add_daily_goal(self, text: str, priority: str = "medium") -> DailyGoal:
        self._daily_tick()
        if priority not in PRIORITIES:
            raise ValueError(f"Invalid priority: {priority}")

        goal = DailyGoal(
            id=_new_id(),
            text=text,
            completed=False,
            occurred_on=self.today(),
            priority=priority,
        )
        self.store.save_user_data(daily_goals=[*self.user_data.daily_goals, goal])
        return goal

    def toggle_goal_completion(self, goal_id: str) -> Optional[DailyGoal]:
        """Flip a goal's completion and refresh today's goal analytics."""
        self._daily_tick()
        data = self.user_data
        target = next((g for g in data.daily_goals if g.id == goal_id), None)
        if target is None:
            logger.debug("Goal not found; nothing to toggle", extra={"goal_id": goal_id})
            return None

        toggled = target.model_copy(update={"completed": not target.completed})
        goals = [toggled if g.id == goal_id else g for g in data.daily_goals]
        today_analytics = analytics.recompute_goal_analytics(goals, self.today())
        self.store.save_user_data(
            daily_goals=goals,
            goal_analytics=analytics.replace_for_day(
                data.goal_analytics, today_analytics, limit=self._history_limit
            ),
        )
        return toggled

    # ------------------------------------------------------------------
    # Weekly schedule
    # ------------------------------------------------------------------
    def update_weekly_schedule(self, day: str, *, planned: float, subjects: Iterable[str]) -> UserData:
        self._daily_tick()
        key = _normalize_day(day)
        schedule = dict(self.user_data.weekly_schedule)
        schedule[key] = schedule[key].model_copy(
            update={"planned": float(planned), "subjects": list(subjects)}
        )
        return self.store.save_user_data(weekly_schedule=schedule)

    def update_day_progress(self, day: str, completed: float) -> UserData:
        self._daily_tick()
        key = _normalize_day(day)
        schedule = dict(self.user_data.weekly_schedule)
        schedule[key] = schedule[key].model_copy(update={"completed": float(completed)})
        return self.store.save_user_data(weekly_schedule=schedule)

    # ------------------------------------------------------------------
    # Study sessions and streak
    # ------------------------------------------------------------------
    def start_study_session(self, duration: int, subject: str | None = None) -> str:
        """Create a pending session dated today and return its id."""
        self._daily_tick()
        if duration <= 0:
            raise ValueError("Session duration must be positive")

        session = StudySession(
            id=_new_id(),
            occurred_on=self.today(),
            duration=duration,
            completed=False,
            subject=subject,
            start_time=self.now(),
        )
        self.store.save_user_data(study_sessions=[*self.user_data.study_sessions, session])
        self.recompute_challenge_progress()
        return session.id

    def complete_study_session(self, session_id: str) -> Optional[StudySession]:
        """Complete a pending session, then refresh today's stats, streak and challenge."""
        self._daily_tick()
        data = self.user_data
        target = next((s for s in data.study_sessions if s.id == session_id), None)
        if target is None or target.completed:
            logger.debug("Session missing or already completed", extra={"session_id": session_id})
            return None

        today = self.today()
        completed = target.model_copy(update={"completed": True, "end_time": self.now()})
        sessions = [completed if s.id == session_id else s for s in data.study_sessions]

        today_stat = analytics.recompute_daily_stat(sessions, today)
        streak = streaks.update_streak(
            data.study_streak,
            today=today,
            today_minutes=today_stat.total_minutes,
            min_minutes=self._min_minutes,
            history_limit=self._history_limit,
        )
        self.store.save_user_data(
            study_sessions=sessions,
            daily_stats=analytics.replace_for_day(
                data.daily_stats, today_stat, limit=self._history_limit
            ),
            study_streak=streak,
        )
        logger.info(
            "Study session completed",
            extra={
                "duration": completed.duration,
                "today_minutes": today_stat.total_minutes,
                "current_streak": streak.current_streak,
            },
        )
        self.recompute_challenge_progress()
        return completed

    def check_streak_maintenance(self) -> StudyStreak:
        """Zero a streak that was not continued today; see ``streaks.check_streak_maintenance``."""
        data = self.user_data
        today = self.today()
        checked = streaks.check_streak_maintenance(
            data.study_streak,
            today=today,
            today_minutes=analytics.minutes_on(data, today),
            min_minutes=self._min_minutes,
        )
        if checked is not data.study_streak:
            self.store.save_user_data(study_streak=checked)
        return checked

    # ------------------------------------------------------------------
    # Attendance and stress
    # ------------------------------------------------------------------
    def mark_attendance(self, subject: str, present: bool, notes: str | None = None) -> AttendanceRecord:
        """Upsert today's record for ``subject`` and refresh its rolling attendance."""
        self._daily_tick()
        data = self.user_data
        today = self.today()

        existing = next(
            (r for r in data.attendance_records if r.occurred_on == today and r.subject == subject),
            None,
        )
        record = AttendanceRecord(
            id=existing.id if existing else _new_id(),
            occurred_on=today,
            subject=subject,
            present=present,
            notes=notes,
        )
        records = [r for r in data.attendance_records if r is not existing]
        records.append(record)

        attendance = analytics.attendance_percentage(
            records, subject, today, window_days=self._attendance_window
        )
        subjects = [
            s.model_copy(update={"attendance": float(attendance)})
            if s.name == subject and attendance is not None
            else s
            for s in data.subjects
        ]
        self.store.save_user_data(attendance_records=records, subjects=subjects)
        return record

    def record_stress_level(
        self,
        level: int,
        notes: str | None = None,
        factors: Iterable[str] | None = None,
    ) -> StressRecord:
        self._daily_tick()
        if not 1 <= level <= 10:
            raise ValueError(f"Stress level must be between 1 and 10, got {level}")

        data = self.user_data
        today = self.today()
        existing = analytics.today_stress_level(data, today)
        record = StressRecord(
            id=existing.id if existing else _new_id(),
            occurred_on=today,
            level=level,
            notes=notes,
            factors=list(factors or []),
        )
        self.store.save_user_data(
            stress_records=analytics.replace_for_day(
                data.stress_records, record, limit=self._history_limit
            )
        )
        return record

    # ------------------------------------------------------------------
    # Challenge
    # ------------------------------------------------------------------
    def start_challenge(self, kind: str) -> Challenge:
        """Replace any existing challenge with a fresh one and evaluate it."""
        challenge = challenges.new_challenge(kind, now=self.now())
        self.store.save_challenge(challenge)
        logger.info("Challenge started", extra={"challenge_type": kind})
        self.recompute_challenge_progress()
        return self.store.challenge

    def reset_challenge(self) -> None:
        self.store.clear_challenge()

    def recompute_challenge_progress(self) -> Optional[Challenge]:
        """Write new progress only when it changed; returns the updated challenge."""
        updated = challenges.evaluate_challenge(
            self.store.challenge,
            self.user_data,
            now=self.now(),
            min_minutes=self._min_minutes,
        )
        if updated is None:
            return None

        self.store.save_challenge(updated)
        if updated.completed:
            logger.info("Challenge completed", extra={"challenge": updated.name})
        return updated

    def challenge_percent(self) -> int:
        return challenges.challenge_percent(self.challenge)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def get_weekly_actual_hours(self) -> float:
        return analytics.weekly_actual_hours(self.user_data, self.today())

    def get_study_completion_rate(self) -> int:
        return analytics.study_completion_rate(self.user_data, self.today())

    def get_goal_completion_trend(self) -> list[analytics.TrendPoint]:
        return analytics.goal_completion_trend(self.user_data)

    def get_today_goals(self) -> list[DailyGoal]:
        return analytics.today_goals(self.user_data, self.today())

    def get_today_attendance(self) -> list[AttendanceRecord]:
        return analytics.today_attendance(self.user_data, self.today())

    def get_today_stress_level(self) -> Optional[StressRecord]:
        return analytics.today_stress_level(self.user_data, self.today())

    def get_stress_trend(self) -> list[StressRecord]:
        return analytics.stress_trend(self.user_data)

    def get_stress_direction(self) -> str:
        return analytics.stress_direction(self.get_stress_trend())

    def get_average_stress_level(self) -> float:
        return analytics.average_stress_level(self.user_data)

    def get_weekly_sleep_hours(self) -> float:
        return analytics.weekly_sleep_hours(self.user_data)

    def weekly_schedule_summary(self) -> analytics.ScheduleSummary:
        return analytics.weekly_schedule_summary(self.user_data)

    def goal_summary(self) -> analytics.GoalSummary:
        return analytics.goal_summary(self.user_data)

    def streak_days_maintained(self) -> int:
        return streaks.days_maintained(self.user_data.study_streak)

    def get_achievements(self) -> list[str]:
        return achievements.achievements(self.user_data)

    def check_burnout(self) -> bool:
        return achievements.burnout_risk(self.user_data, self.today())


__all__ = ["StudyTracker"]
