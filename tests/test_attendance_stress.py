from __future__ import annotations

from datetime import date, timedelta

import pytest

from trackmystudy.models import AttendanceRecord, StressRecord
from trackmystudy.services import analytics


class TestAttendance:
    def test_rolling_percentage_updates_subject(self, tracker, clock, subject_factory):
        tracker.save_user_data(subjects=[subject_factory("Math", attendance=0), subject_factory("Physics")])

        tracker.mark_attendance("Math", True)
        clock.advance(days=1)
        tracker.mark_attendance("Math", False)
        clock.advance(days=1)
        tracker.mark_attendance("Math", True)

        subjects = {s.name: s for s in tracker.user_data.subjects}
        assert subjects["Math"].attendance == 67
        assert subjects["Physics"].attendance == 90.0
        assert len(tracker.user_data.attendance_records) == 3

    def test_same_day_mark_replaces_record(self, tracker, subject_factory):
        tracker.save_user_data(subjects=[subject_factory("Math")])

        first = tracker.mark_attendance("Math", False, notes="sick")
        second = tracker.mark_attendance("Math", True)

        [record] = tracker.user_data.attendance_records
        assert record.id == first.id == second.id
        assert record.present is True
        assert record.notes is None
        assert tracker.user_data.subjects[0].attendance == 100

    def test_other_subjects_get_their_own_record(self, tracker):
        tracker.mark_attendance("Math", True)
        tracker.mark_attendance("Physics", False)

        assert len(tracker.get_today_attendance()) == 2

    def test_unknown_subject_records_without_touching_subjects(self, tracker, subject_factory):
        tracker.save_user_data(subjects=[subject_factory("Math", attendance=75)])

        record = tracker.mark_attendance("Chemistry", True)

        assert record.subject == "Chemistry"
        assert [s.attendance for s in tracker.user_data.subjects] == [75]

    def test_today_attendance_only_lists_today(self, tracker, clock):
        tracker.mark_attendance("Math", True)
        clock.advance(days=1)
        tracker.mark_attendance("Physics", True)

        assert [r.subject for r in tracker.get_today_attendance()] == ["Physics"]

    def test_window_excludes_old_records(self):
        today = date(2025, 3, 12)
        records = [
            AttendanceRecord(id="old", occurred_on=today - timedelta(days=31), subject="Math", present=False),
            AttendanceRecord(id="edge", occurred_on=today - timedelta(days=30), subject="Math", present=True),
            AttendanceRecord(id="now", occurred_on=today, subject="Math", present=True),
        ]

        assert analytics.attendance_percentage(records, "Math", today) == 100
        assert analytics.attendance_percentage(records, "Physics", today) is None


class TestStress:
    def test_record_for_today(self, tracker, clock):
        record = tracker.record_stress_level(6, notes="exams", factors=["exams", "sleep"])

        assert record.occurred_on == clock().date()
        assert tracker.get_today_stress_level() == record
        assert tracker.user_data.stress_records == [record]

    def test_same_day_replaces_and_keeps_id(self, tracker):
        first = tracker.record_stress_level(8)
        second = tracker.record_stress_level(3)

        assert second.id == first.id
        assert [r.level for r in tracker.user_data.stress_records] == [3]

    @pytest.mark.parametrize("level", [0, 11, -1])
    def test_out_of_range_level_is_rejected(self, tracker, level):
        with pytest.raises(ValueError):
            tracker.record_stress_level(level)
        assert tracker.user_data.stress_records == []

    def test_average_and_trend(self, tracker, clock):
        for level in [2, 4, 5, 7, 3, 6, 8, 9]:
            tracker.record_stress_level(level)
            clock.advance(days=1)

        trend = tracker.get_stress_trend()
        assert [r.level for r in trend] == [4, 5, 7, 3, 6, 8, 9]
        assert tracker.get_average_stress_level() == 5.5
        assert tracker.get_stress_direction() == "up"

    def test_records_are_capped(self, tracker, clock):
        for _ in range(32):
            tracker.record_stress_level(5)
            clock.advance(days=1)

        records = tracker.user_data.stress_records
        assert len(records) == 30
        assert records[0].occurred_on == clock().date() - timedelta(days=30)

    def test_no_records(self, tracker):
        assert tracker.get_today_stress_level() is None
        assert tracker.get_average_stress_level() == 0.0
        assert tracker.get_stress_trend() == []
        assert tracker.get_stress_direction() == "flat"

    def test_average_rounds_half_up(self, tracker, clock):
        for level in [1, 2, 2, 2]:
            tracker.record_stress_level(level)
            clock.advance(days=1)

        # 7 / 4 == 1.75
        assert tracker.get_average_stress_level() == 1.8

    @pytest.mark.parametrize(
        "level,label",
        [(1, "Very Low"), (2, "Very Low"), (4, "Low"), (5, "Moderate"), (8, "High"), (10, "Very High")],
    )
    def test_stress_label(self, level, label):
        assert analytics.stress_label(level) == label

    def test_direction_down(self):
        day = date(2025, 3, 1)
        trend = [
            StressRecord(id=str(n), occurred_on=day + timedelta(days=n), level=level)
            for n, level in enumerate([9, 9, 8, 3, 2, 2])
        ]
        assert analytics.stress_direction(trend) == "down"
