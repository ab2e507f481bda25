"""
Attendance-to-payroll calculation.

Pure functions over plain values: no database, no HTTP. Callers resolve the
employee's timing and the month's working days first and pass them in,
together with a PayrollPolicy built from settings.

Pipeline:
  classify_day                    -> one status per attendance record
  excess_leave_days               -> penalty days from the longest absence run
  calculate_attendance_metrics    -> tallies for a period
  calculate_salary_and_deductions -> per-day salary, deduction, net salary
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from typing import Iterable, Literal

from paytrack.core.config import Settings, settings

DayStatus = Literal["present", "late", "half_day", "absent"]

_ANCHOR = date(2000, 1, 1)


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def parse_time_of_day(value: str | time) -> time:
    """Accepts a time or an "HH:MM" / "HH:MM:SS" string."""
    if isinstance(value, time):
        return value
    return time.fromisoformat(value.strip())


@dataclass(frozen=True)
class PayrollPolicy:
    default_duty_hours: float = 8.0
    default_reporting_time: time = time(9, 0)
    late_grace_minutes: int = 15
    absence_grace_days: int = 2
    excess_leave_penalty_days: float = 2.0

    @classmethod
    def from_settings(cls, source: Settings | None = None) -> PayrollPolicy:
        s = source or settings
        return cls(
            default_duty_hours=s.DEFAULT_DUTY_HOURS,
            default_reporting_time=parse_time_of_day(s.DEFAULT_REPORTING_TIME),
            late_grace_minutes=s.LATE_GRACE_MINUTES,
            absence_grace_days=s.ABSENCE_GRACE_DAYS,
            excess_leave_penalty_days=s.EXCESS_LEAVE_PENALTY_DAYS,
        )


@dataclass(frozen=True)
class TimingConfig:
    duty_hours: float
    reporting_time: time

    @property
    def duty_minutes(self) -> int:
        return round_half_up(self.duty_hours * 60)

    @property
    def half_duty_minutes(self) -> int:
        return round_half_up(self.duty_minutes / 2)


def resolve_timing(
    duty_hours: float | Decimal | None,
    reporting_time: time | str | None,
    policy: PayrollPolicy,
) -> TimingConfig:
    """
    Timing from an office+position override, falling back field by field
    to the policy defaults (empty or zero duty hours count as missing).
    """
    hours = float(duty_hours) if duty_hours else policy.default_duty_hours
    reporting = (
        parse_time_of_day(reporting_time)
        if reporting_time
        else policy.default_reporting_time
    )
    return TimingConfig(duty_hours=hours, reporting_time=reporting)


@dataclass(frozen=True)
class AttendanceRecord:
    date: date
    punch_in: time | None
    punch_out: time | None


@dataclass(frozen=True)
class DayResult:
    date: date
    status: DayStatus
    worked_minutes: int | None = None
    late_minutes: int | None = None


@dataclass
class AttendanceMetrics:
    present_days: int = 0
    late_days: int = 0
    half_days: int = 0
    absent_days: int = 0
    excess_leaves: int = 0
    days: list[DayResult] = field(default_factory=list)


@dataclass(frozen=True)
class SalaryBreakdown:
    base_salary: float
    per_day_salary: float
    total_deductions: float
    net_salary: float


def _minutes_between(start: time, end: time) -> int:
    """Whole minutes from start to end on the same day, truncated toward zero."""
    delta = datetime.combine(_ANCHOR, end) - datetime.combine(_ANCHOR, start)
    return int(delta.total_seconds() / 60)


def classify_day(
    record: AttendanceRecord, timing: TimingConfig, policy: PayrollPolicy
) -> DayResult:
    """
    Status of one attendance record. Rules are checked in order:
    missing punch or no positive work time -> absent, work of at most half
    the duty time -> half day, arrival late by the grace period or more ->
    late, otherwise present.
    """
    late_minutes = (
        _minutes_between(timing.reporting_time, record.punch_in)
        if record.punch_in is not None
        else None
    )
    if record.punch_in is None or record.punch_out is None:
        return DayResult(record.date, "absent", late_minutes=late_minutes)

    worked = _minutes_between(record.punch_in, record.punch_out)
    if worked <= 0:
        return DayResult(record.date, "absent", worked, late_minutes)
    if worked <= timing.half_duty_minutes:
        return DayResult(record.date, "half_day", worked, late_minutes)
    if late_minutes >= policy.late_grace_minutes:
        return DayResult(record.date, "late", worked, late_minutes)
    return DayResult(record.date, "present", worked, late_minutes)


def longest_absence_streak(statuses: Iterable[str]) -> int:
    longest = current = 0
    for status in statuses:
        if status == "absent":
            current += 1
            longest = max(longest, current)
        else:
            current = 0
    return longest


def excess_leave_days(statuses: Iterable[str], grace_days: int = 2) -> int:
    """Days of the single longest absence run beyond the grace period."""
    return max(0, longest_absence_streak(statuses) - grace_days)


def calculate_attendance_metrics(
    records: Iterable[AttendanceRecord],
    timing: TimingConfig,
    policy: PayrollPolicy,
) -> AttendanceMetrics:
    metrics = AttendanceMetrics()
    for record in sorted(records, key=lambda r: r.date):
        result = classify_day(record, timing, policy)
        metrics.days.append(result)
        if result.status == "absent":
            metrics.absent_days += 1
        elif result.status == "half_day":
            metrics.half_days += 1
        elif result.status == "late":
            # late arrivals still count as present days
            metrics.late_days += 1
            metrics.present_days += 1
        else:
            metrics.present_days += 1

    metrics.excess_leaves = excess_leave_days(
        (d.status for d in metrics.days), policy.absence_grace_days
    )
    return metrics


def calculate_salary_and_deductions(
    base_salary: float | Decimal | None,
    metrics: AttendanceMetrics,
    working_days: int,
    policy: PayrollPolicy | None = None,
) -> SalaryBreakdown:
    penalty = (policy or PayrollPolicy()).excess_leave_penalty_days
    base = float(base_salary or 0)
    per_day = base / working_days if working_days else 0.0

    deductions = (
        metrics.absent_days * per_day
        + metrics.half_days * (per_day / 2)
        + metrics.excess_leaves * penalty * per_day
    )
    return SalaryBreakdown(
        base_salary=base,
        per_day_salary=per_day,
        total_deductions=deductions,
        net_salary=max(0.0, base - deductions),
    )
