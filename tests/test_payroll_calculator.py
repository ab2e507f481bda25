"""
Attendance classification and deduction arithmetic (no database).

Tests:
  - classify_day          : absent / half day / late / present rules and their order
  - excess_leave_days     : only the longest absence run beyond the grace period
  - metrics aggregation   : tallies partition the records, late counts as present
  - salary & deductions   : per-day salary, deduction formula, net never below 0
  - timing / policy       : office overrides fall back to defaults field by field
"""

from __future__ import annotations

from datetime import date, time, timedelta
from decimal import Decimal

import pytest

from paytrack.core.config import settings
from paytrack.services.payroll_calculator import (
    AttendanceMetrics,
    AttendanceRecord,
    PayrollPolicy,
    TimingConfig,
    calculate_attendance_metrics,
    calculate_salary_and_deductions,
    classify_day,
    excess_leave_days,
    longest_absence_streak,
    parse_time_of_day,
    resolve_timing,
)

POLICY = PayrollPolicy()
TIMING = TimingConfig(duty_hours=8, reporting_time=time(9, 0))
DAY = date(2026, 6, 1)


def _rec(punch_in: str | None, punch_out: str | None, day: date = DAY) -> AttendanceRecord:
    return AttendanceRecord(
        date=day,
        punch_in=time.fromisoformat(punch_in) if punch_in else None,
        punch_out=time.fromisoformat(punch_out) if punch_out else None,
    )


class TestClassifyDay:
    @pytest.mark.parametrize(
        "punch_in, punch_out",
        [(None, "18:00"), ("09:00", None), (None, None)],
    )
    def test_missing_punch_is_absent(self, punch_in, punch_out) -> None:
        assert classify_day(_rec(punch_in, punch_out), TIMING, POLICY).status == "absent"

    def test_non_positive_work_time_is_absent(self) -> None:
        assert classify_day(_rec("09:00", "09:00"), TIMING, POLICY).status == "absent"
        result = classify_day(_rec("18:00", "09:00"), TIMING, POLICY)
        assert result.status == "absent"
        assert result.worked_minutes == -540

    def test_sub_minute_work_time_is_absent(self) -> None:
        """30 seconds of work truncates to 0 whole minutes."""
        record = AttendanceRecord(DAY, time(9, 0, 0), time(9, 0, 30))
        assert classify_day(record, TIMING, POLICY).status == "absent"

    def test_half_duty_or_less_is_half_day(self) -> None:
        """Exactly half of an 8h duty (240 min) is still a half day."""
        result = classify_day(_rec("09:00", "13:00"), TIMING, POLICY)
        assert result.status == "half_day"
        assert result.worked_minutes == 240

    def test_half_day_wins_over_late(self) -> None:
        result = classify_day(_rec("11:00", "12:00"), TIMING, POLICY)
        assert result.status == "half_day"
        assert result.late_minutes == 120

    def test_just_over_half_duty_is_not_half_day(self) -> None:
        assert classify_day(_rec("09:00", "13:01"), TIMING, POLICY).status == "present"

    def test_fifteen_minutes_late_is_late(self) -> None:
        result = classify_day(_rec("09:15", "18:00"), TIMING, POLICY)
        assert result.status == "late"
        assert result.late_minutes == 15

    def test_fourteen_minutes_late_is_present(self) -> None:
        result = classify_day(_rec("09:14", "18:00"), TIMING, POLICY)
        assert result.status == "present"
        assert result.late_minutes == 14

    def test_early_arrival_is_present(self) -> None:
        result = classify_day(_rec("08:30", "17:30"), TIMING, POLICY)
        assert result.status == "present"
        assert result.worked_minutes == 540
        assert result.late_minutes == -30

    def test_grace_period_comes_from_policy(self) -> None:
        strict = PayrollPolicy(late_grace_minutes=5)
        assert classify_day(_rec("09:05", "18:00"), TIMING, strict).status == "late"

    def test_reporting_time_comes_from_timing(self) -> None:
        timing = TimingConfig(duty_hours=8, reporting_time=time(9, 30))
        assert classify_day(_rec("09:40", "18:00"), timing, POLICY).status == "present"
        assert classify_day(_rec("09:45", "18:00"), timing, POLICY).status == "late"


class TestExcessLeave:
    def test_five_absences_then_present(self) -> None:
        statuses = ["absent"] * 5 + ["present"]
        assert longest_absence_streak(statuses) == 5
        assert excess_leave_days(statuses) == 3

    def test_runs_within_grace_are_free(self) -> None:
        statuses = ["absent", "absent", "present", "absent", "absent", "late"]
        assert excess_leave_days(statuses) == 0

    def test_only_longest_run_counts(self) -> None:
        """Runs of 3 and 4: excess is 4 - 2, not (3 - 2) + (4 - 2)."""
        statuses = (
            ["absent"] * 3 + ["present"] + ["absent"] * 4 + ["half_day"]
        )
        assert excess_leave_days(statuses) == 2

    def test_half_day_breaks_a_run(self) -> None:
        statuses = ["absent", "absent", "half_day", "absent", "absent"]
        assert excess_leave_days(statuses) == 0

    def test_empty_sequence(self) -> None:
        assert excess_leave_days([]) == 0

    def test_custom_grace(self) -> None:
        assert excess_leave_days(["absent"] * 3, grace_days=0) == 3


class TestAttendanceMetrics:
    def test_tallies_partition_records(self) -> None:
        records = [
            _rec("09:00", "18:00", date(2026, 6, 1)),
            _rec("09:20", "18:00", date(2026, 6, 2)),
            _rec("09:00", "12:00", date(2026, 6, 3)),
            _rec(None, None, date(2026, 6, 4)),
        ]
        metrics = calculate_attendance_metrics(records, TIMING, POLICY)

        assert metrics.present_days == 2  # includes the late day
        assert metrics.late_days == 1
        assert metrics.half_days == 1
        assert metrics.absent_days == 1
        assert len(metrics.days) == len(records)
        non_late_present = metrics.present_days - metrics.late_days
        assert (
            non_late_present + metrics.late_days + metrics.half_days + metrics.absent_days
            == len(records)
        )

    def test_records_are_sorted_before_streaks(self) -> None:
        """Unsorted input: absences on 1st, 2nd, 3rd form one run."""
        records = [
            _rec(None, None, date(2026, 6, 3)),
            _rec("09:00", "18:00", date(2026, 6, 4)),
            _rec(None, None, date(2026, 6, 1)),
            _rec(None, None, date(2026, 6, 2)),
        ]
        metrics = calculate_attendance_metrics(records, TIMING, POLICY)

        assert [d.date.day for d in metrics.days] == [1, 2, 3, 4]
        assert metrics.excess_leaves == 1

    def test_five_consecutive_absences(self) -> None:
        start = date(2026, 6, 1)
        records = [_rec(None, None, start + timedelta(days=i)) for i in range(5)]
        records.append(_rec("09:00", "18:00", start + timedelta(days=5)))
        metrics = calculate_attendance_metrics(records, TIMING, POLICY)

        assert metrics.absent_days == 5
        assert metrics.excess_leaves == 3

    def test_no_records(self) -> None:
        metrics = calculate_attendance_metrics([], TIMING, POLICY)
        assert metrics == AttendanceMetrics()


class TestSalaryAndDeductions:
    def test_reference_example(self) -> None:
        metrics = AttendanceMetrics(absent_days=2, half_days=1, excess_leaves=0)
        salary = calculate_salary_and_deductions(3000, metrics, 30)

        assert salary.per_day_salary == pytest.approx(100.0)
        assert salary.total_deductions == pytest.approx(250.0)
        assert salary.net_salary == pytest.approx(2750.0)

    def test_excess_leave_costs_double(self) -> None:
        metrics = AttendanceMetrics(absent_days=5, excess_leaves=3)
        salary = calculate_salary_and_deductions(Decimal("3000.00"), metrics, 30)
        # 5 x 100 + 3 x 2 x 100
        assert salary.total_deductions == pytest.approx(1100.0)
        assert salary.net_salary == pytest.approx(1900.0)

    def test_zero_working_days(self) -> None:
        metrics = AttendanceMetrics(absent_days=3)
        salary = calculate_salary_and_deductions(3000, metrics, 0)
        assert salary.per_day_salary == 0
        assert salary.total_deductions == 0
        assert salary.net_salary == 3000

    def test_net_never_below_zero(self) -> None:
        metrics = AttendanceMetrics(absent_days=30, excess_leaves=28)
        salary = calculate_salary_and_deductions(3000, metrics, 30)
        assert salary.total_deductions > salary.base_salary
        assert salary.net_salary == 0

    def test_missing_salary_is_zero(self) -> None:
        salary = calculate_salary_and_deductions(None, AttendanceMetrics(absent_days=1), 26)
        assert salary.base_salary == 0
        assert salary.net_salary == 0

    def test_penalty_multiplier_from_policy(self) -> None:
        metrics = AttendanceMetrics(excess_leaves=1)
        salary = calculate_salary_and_deductions(
            3000, metrics, 30, PayrollPolicy(excess_leave_penalty_days=1)
        )
        assert salary.total_deductions == pytest.approx(100.0)


class TestTimingAndPolicy:
    def test_defaults_without_override(self) -> None:
        timing = resolve_timing(None, None, POLICY)
        assert timing.duty_hours == 8.0
        assert timing.reporting_time == time(9, 0)
        assert timing.duty_minutes == 480
        assert timing.half_duty_minutes == 240

    def test_partial_override(self) -> None:
        timing = resolve_timing(None, "10:00:00", POLICY)
        assert timing.duty_hours == 8.0
        assert timing.reporting_time == time(10, 0)

        timing = resolve_timing(Decimal("6.5"), None, POLICY)
        assert timing.duty_minutes == 390
        assert timing.half_duty_minutes == 195
        assert timing.reporting_time == time(9, 0)

    def test_zero_duty_hours_falls_back(self) -> None:
        assert resolve_timing(0, None, POLICY).duty_hours == 8.0

    def test_half_duty_rounds_half_up(self) -> None:
        """7.75h = 465 min; half of 465 = 232.5 -> 233."""
        timing = TimingConfig(duty_hours=7.75, reporting_time=time(9, 0))
        assert timing.duty_minutes == 465
        assert timing.half_duty_minutes == 233

    def test_parse_time_of_day(self) -> None:
        assert parse_time_of_day("09:00") == time(9, 0)
        assert parse_time_of_day(" 09:30:15 ") == time(9, 30, 15)
        assert parse_time_of_day(time(8, 0)) == time(8, 0)

    def test_policy_from_settings(self, monkeypatch) -> None:
        monkeypatch.setattr(settings, "DEFAULT_DUTY_HOURS", 9.0)
        monkeypatch.setattr(settings, "DEFAULT_REPORTING_TIME", "08:30")
        monkeypatch.setattr(settings, "LATE_GRACE_MINUTES", 10)
        monkeypatch.setattr(settings, "ABSENCE_GRACE_DAYS", 1)

        policy = PayrollPolicy.from_settings()
        assert policy.default_duty_hours == 9.0
        assert policy.default_reporting_time == time(8, 30)
        assert policy.late_grace_minutes == 10
        assert policy.absence_grace_days == 1
