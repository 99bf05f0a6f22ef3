"""Tests for the study streak: advancing, maintenance checks and daily decay."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from trackmystudy.models import DailyStat, StreakDay, StudyStreak
from trackmystudy.services import streaks


def _study(tracker, minutes: int, subject: str | None = None) -> None:
    tracker.complete_study_session(tracker.start_study_session(minutes, subject))


class TestUpdateStreak:
    def test_continues_yesterdays_streak(self, tracker, clock):
        yesterday = clock().date() - timedelta(days=1)
        tracker.save_user_data(
            study_streak=StudyStreak(current_streak=2, longest_streak=2, last_study_date=yesterday)
        )

        _study(tracker, 45, "Math")

        streak = tracker.user_data.study_streak
        [stat] = tracker.user_data.daily_stats
        assert (stat.total_minutes, stat.completed_sessions, stat.total_sessions) == (45, 1, 1)
        assert streak.current_streak == 3
        assert streak.longest_streak == 3
        assert streak.last_study_date == clock().date()
        assert streak.streak_history[-1] == StreakDay(occurred_on=clock().date(), maintained=True)

    def test_below_daily_minimum_changes_nothing(self, tracker):
        _study(tracker, 20)

        streak = tracker.user_data.study_streak
        assert streak == StudyStreak()
        assert tracker.user_data.daily_stats[0].total_minutes == 20

    def test_short_sessions_add_up_to_the_minimum(self, tracker):
        _study(tracker, 20)
        _study(tracker, 15)

        assert tracker.user_data.study_streak.current_streak == 1

    def test_first_qualifying_day_starts_a_streak(self, tracker, clock):
        _study(tracker, 30)

        streak = tracker.user_data.study_streak
        assert streak.current_streak == 1
        assert streak.longest_streak == 1
        assert streak.last_study_date == clock().date()

    def test_second_session_same_day_only_extends_history(self, tracker):
        _study(tracker, 40)
        _study(tracker, 40)

        streak = tracker.user_data.study_streak
        assert streak.current_streak == 1
        assert len(streak.streak_history) == 2
        assert all(day.maintained for day in streak.streak_history)

    def test_gap_restarts_at_one_and_keeps_longest(self):
        today = date(2025, 3, 12)
        streak = StudyStreak(
            current_streak=5, longest_streak=8, last_study_date=today - timedelta(days=3)
        )

        updated = streaks.update_streak(streak, today=today, today_minutes=60)

        assert updated.current_streak == 1
        assert updated.longest_streak == 8

    def test_consecutive_days_grow_the_streak(self, tracker, clock):
        for _ in range(4):
            _study(tracker, 30)
            clock.advance(days=1)

        streak = tracker.user_data.study_streak
        assert streak.current_streak == 4
        assert streak.longest_streak == 4
        assert tracker.streak_days_maintained() == 4

    def test_history_is_capped(self):
        today = date(2025, 3, 12)
        streak = StudyStreak()
        for offset in range(35):
            streak = streaks.update_streak(
                streak, today=today + timedelta(days=offset), today_minutes=30
            )

        assert len(streak.streak_history) == 30
        assert streak.streak_history[0].occurred_on == today + timedelta(days=5)
        assert streak.current_streak == 35


class TestMaintenanceCheck:
    def test_resets_when_yesterdays_streak_is_not_continued(self, tracker, clock):
        yesterday = clock().date() - timedelta(days=1)
        tracker.save_user_data(
            study_streak=StudyStreak(current_streak=4, longest_streak=6, last_study_date=yesterday)
        )
        _study(tracker, 10)

        checked = tracker.check_streak_maintenance()

        assert checked.current_streak == 0
        assert checked.longest_streak == 6
        assert tracker.user_data.study_streak.current_streak == 0

    def test_leaves_streak_alone_once_today_qualifies(self, tracker, clock):
        yesterday = clock().date() - timedelta(days=1)
        tracker.save_user_data(
            study_streak=StudyStreak(current_streak=4, longest_streak=6, last_study_date=yesterday)
        )
        _study(tracker, 30)

        assert tracker.check_streak_maintenance().current_streak == 5

    def test_unrelated_dates_are_not_touched(self):
        today = date(2025, 3, 12)
        streak = StudyStreak(current_streak=2, longest_streak=2, last_study_date=today)
        assert streaks.check_streak_maintenance(streak, today=today, today_minutes=0) is streak


class TestDecay:
    def test_stale_streak_decays_on_load(self, tracker, tracker_factory, clock):
        tracker.save_user_data(
            study_streak=StudyStreak(
                current_streak=4,
                longest_streak=4,
                last_study_date=clock().date() - timedelta(days=3),
            )
        )

        reloaded = tracker_factory()

        streak = reloaded.user_data.study_streak
        assert streak.current_streak == 0
        assert streak.longest_streak == 4
        assert streak.streak_history[-1] == StreakDay(
            occurred_on=clock().date() - timedelta(days=1), maintained=False
        )

    def test_decay_on_first_mutation_of_a_new_day(self, tracker, clock):
        _study(tracker, 45)
        clock.advance(days=2)

        tracker.add_daily_goal("Back at it")

        streak = tracker.user_data.study_streak
        assert streak.current_streak == 0
        assert [day.maintained for day in streak.streak_history] == [True, False]

    def test_decay_runs_once_per_day(self, tracker, clock):
        _study(tracker, 45)
        clock.advance(days=2)

        tracker.add_daily_goal("One")
        tracker.add_daily_goal("Two")

        assert len(tracker.user_data.study_streak.streak_history) == 2

    def test_yesterdays_streak_survives_the_morning(self, tracker, clock):
        _study(tracker, 45)
        clock.advance(days=1)

        tracker.add_daily_goal("Morning plan")

        assert tracker.user_data.study_streak.current_streak == 1

    def test_decay_can_be_disabled(self, tracker, tracker_factory, clock, test_config):
        test_config.STREAK_DECAY = False
        tracker.save_user_data(
            study_streak=StudyStreak(
                current_streak=4,
                longest_streak=4,
                last_study_date=clock().date() - timedelta(days=3),
            )
        )

        reloaded = tracker_factory(test_config)

        assert reloaded.user_data.study_streak.current_streak == 4

    def test_zero_streak_is_left_alone(self):
        today = date(2025, 3, 12)
        streak = StudyStreak(last_study_date=today - timedelta(days=10))
        assert streaks.decay_stale_streak(streak, today=today) is streak


class TestQualifyingRun:
    @pytest.fixture
    def today(self):
        return date(2025, 3, 12)

    def _stat(self, day: date, minutes: int) -> DailyStat:
        return DailyStat(occurred_on=day, total_minutes=minutes, completed_sessions=1, total_sessions=1)

    def test_counts_back_from_today_until_a_gap(self, today):
        stats = [
            self._stat(today - timedelta(days=4), 60),
            self._stat(today - timedelta(days=2), 30),
            self._stat(today - timedelta(days=1), 45),
            self._stat(today, 31),
        ]
        assert streaks.qualifying_run(stats, today=today, limit=5) == 3

    def test_short_day_breaks_the_run(self, today):
        stats = [self._stat(today - timedelta(days=1), 29), self._stat(today, 60)]
        assert streaks.qualifying_run(stats, today=today, limit=5) == 1

    def test_run_is_bounded_by_limit(self, today):
        stats = [self._stat(today - timedelta(days=n), 60) for n in range(10)]
        assert streaks.qualifying_run(stats, today=today, limit=5) == 5

    def test_nothing_today_means_zero(self, today):
        stats = [self._stat(today - timedelta(days=1), 60)]
        assert streaks.qualifying_run(stats, today=today, limit=5) == 0
