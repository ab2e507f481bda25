"""
Payroll generation against the data store.

Loads employees and attendance, hands plain values to the calculator in
payroll_calculator and writes one payroll row per (employee, month, year).
Employees are processed one after another within the request.
"""

import logging
import math
from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from paytrack.db.models import Attendance, Employee, Office, OfficePosition, Payroll, Position
from paytrack.schemas.payroll import (
    AttendanceTotals,
    DailyBreakdownRow,
    DateRange,
    EmployeeInfo,
    EmployeePayrollDetailsResponse,
    PayrollReportResponse,
    PayrollReportRow,
    PayrollSummary,
    SalaryTotals,
)
from paytrack.services.payroll_calculator import (
    AttendanceMetrics,
    AttendanceRecord,
    PayrollPolicy,
    SalaryBreakdown,
    TimingConfig,
    calculate_attendance_metrics,
    calculate_salary_and_deductions,
    resolve_timing,
)
from paytrack.working_days import resolve_working_days, working_days_count

logger = logging.getLogger(__name__)


def _money(value: float) -> Decimal:
    return Decimal(f"{value:.2f}")


def _to_record(row: Attendance) -> AttendanceRecord:
    return AttendanceRecord(date=row.work_date, punch_in=row.punch_in, punch_out=row.punch_out)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    first = date(year, month, 1)
    last = (first + timedelta(days=32)).replace(day=1) - timedelta(days=1)
    return first, last


async def get_timing_config(
    db: AsyncSession, employee: Employee, policy: PayrollPolicy
) -> TimingConfig:
    """Office+position override for the employee, or the policy defaults."""
    if employee.office_id is None or employee.position_id is None:
        return resolve_timing(None, None, policy)

    result = await db.execute(
        select(OfficePosition)
        .where(
            OfficePosition.office_id == employee.office_id,
            OfficePosition.position_id == employee.position_id,
        )
        .limit(1)
    )
    override = result.scalar_one_or_none()
    if override is None:
        return resolve_timing(None, None, policy)
    return resolve_timing(override.duty_hours, override.reporting_time, policy)


async def save_payroll(
    db: AsyncSession,
    employee_id: str,
    year: int,
    month: int,
    metrics: AttendanceMetrics,
    salary: SalaryBreakdown,
) -> Payroll:
    """Insert or overwrite the payroll row of (employee, month, year)."""
    result = await db.execute(
        select(Payroll).where(
            Payroll.employee_id == employee_id,
            Payroll.month == month,
            Payroll.year == year,
        )
    )
    payroll = result.scalar_one_or_none()
    if payroll is None:
        payroll = Payroll(employee_id=employee_id, month=month, year=year)
        db.add(payroll)

    payroll.present_days = metrics.present_days
    payroll.half_days = metrics.half_days
    payroll.late_days = metrics.late_days
    payroll.leaves = metrics.absent_days
    payroll.excess_leaves = metrics.excess_leaves
    payroll.deductions_amount = _money(salary.total_deductions)
    payroll.net_salary = _money(salary.net_salary)

    await db.flush()
    return payroll


async def build_payroll_report(
    db: AsyncSession,
    date_from: date,
    date_to: date,
    *,
    office: int | None = None,
    position: int | None = None,
    page: int = 1,
    limit: int = 10,
    policy: PayrollPolicy | None = None,
) -> PayrollReportResponse:
    """
    Payroll for every employee with attendance in [date_from, date_to],
    one page at a time, ordered by name. Working days are those of the
    month of date_from, and that month is the payroll period saved.
    """
    policy = policy or PayrollPolicy.from_settings()
    year, month = date_from.year, date_from.month
    working_days = await working_days_count(year, month)

    with_attendance = select(Attendance.employee_id).where(
        Attendance.work_date.between(date_from, date_to)
    )
    filters = [Employee.employee_id.in_(with_attendance)]
    if office is not None:
        filters.append(Employee.office_id == office)
    if position is not None:
        filters.append(Employee.position_id == position)

    total = (
        await db.execute(select(func.count()).select_from(Employee).where(*filters))
    ).scalar_one()
    q = (
        select(Employee, Office.name, Position.title)
        .outerjoin(Office, Employee.office_id == Office.id)
        .outerjoin(Position, Employee.position_id == Position.id)
        .where(*filters)
    )
    pages = math.ceil(total / limit) if total > 0 else 1
    date_range = DateRange(date_from=date_from, date_to=date_to)

    result = await db.execute(
        q.order_by(Employee.name).limit(limit).offset((page - 1) * limit)
    )
    rows = result.all()
    if not rows:
        return PayrollReportResponse(
            data=[],
            date_range=date_range,
            total=total,
            page=page,
            limit=limit,
            pages=pages,
            message="No employees found",
        )

    ids = [employee.employee_id for employee, _, _ in rows]
    att_result = await db.execute(
        select(Attendance).where(
            Attendance.employee_id.in_(ids),
            Attendance.work_date.between(date_from, date_to),
        )
    )
    records_by_employee: dict[str, list[AttendanceRecord]] = defaultdict(list)
    for att in att_result.scalars().all():
        records_by_employee[att.employee_id].append(_to_record(att))

    data: list[PayrollReportRow] = []
    total_net = 0.0
    total_deductions = 0.0

    for employee, office_name, position_title in rows:
        timing = await get_timing_config(db, employee, policy)
        metrics = calculate_attendance_metrics(
            records_by_employee[employee.employee_id], timing, policy
        )
        salary = calculate_salary_and_deductions(
            employee.monthly_salary, metrics, working_days, policy
        )
        await save_payroll(db, employee.employee_id, year, month, metrics, salary)

        data.append(
            PayrollReportRow(
                employee_id=employee.employee_id,
                name=employee.name,
                email=employee.email,
                office_name=office_name,
                position_title=position_title,
                present_days=metrics.present_days,
                late_days=metrics.late_days,
                half_days=metrics.half_days,
                absent_days=metrics.absent_days,
                excess_leaves=metrics.excess_leaves,
                base_salary=round(salary.base_salary, 2),
                per_day_salary=round(salary.per_day_salary, 2),
                total_deductions=round(salary.total_deductions, 2),
                net_salary=round(salary.net_salary, 2),
            )
        )
        total_net += salary.net_salary
        total_deductions += salary.total_deductions

    await db.commit()
    logger.info(
        "Payroll %d-%02d generated: employees=%d, working_days=%d, net=%.2f",
        year, month, len(data), working_days, total_net,
    )

    return PayrollReportResponse(
        data=data,
        summary=PayrollSummary(
            total_employees=len(data),
            total_net_salary=f"{total_net:.2f}",
            total_deductions=f"{total_deductions:.2f}",
            net_payroll=f"{total_net:.2f}",
            working_days=working_days,
        ),
        date_range=date_range,
        total=total,
        page=page,
        limit=limit,
        pages=pages,
    )


async def build_employee_details(
    db: AsyncSession,
    employee: Employee,
    date_from: date,
    date_to: date,
    policy: PayrollPolicy | None = None,
) -> EmployeePayrollDetailsResponse:
    """
    Per-day breakdown over the working days of date_from's month that fall
    inside the range. A working day without an attendance row is absent.
    """
    policy = policy or PayrollPolicy.from_settings()
    calendar = await resolve_working_days(date_from.year, date_from.month)
    days = [d for d in calendar.days if date_from <= d <= date_to]

    result = await db.execute(
        select(Attendance).where(
            Attendance.employee_id == employee.employee_id,
            Attendance.work_date.between(date_from, date_to),
        )
    )
    by_date = {att.work_date: att for att in result.scalars().all()}

    records = [
        _to_record(by_date[d]) if d in by_date else AttendanceRecord(d, None, None)
        for d in days
    ]
    timing = await get_timing_config(db, employee, policy)
    metrics = calculate_attendance_metrics(records, timing, policy)
    salary = calculate_salary_and_deductions(
        employee.monthly_salary, metrics, calendar.count, policy
    )

    daily_rows = []
    for day in metrics.days:
        att = by_date.get(day.date)
        daily_rows.append(
            DailyBreakdownRow(
                date=day.date,
                status=day.status,
                recorded=att is not None,
                punch_in=att.punch_in if att else None,
                punch_out=att.punch_out if att else None,
                worked_minutes=day.worked_minutes,
                late_minutes=day.late_minutes,
            )
        )

    return EmployeePayrollDetailsResponse(
        employee=EmployeeInfo(
            employee_id=employee.employee_id,
            name=employee.name,
            email=employee.email,
            office_id=employee.office_id,
            position_id=employee.position_id,
            monthly_salary=float(employee.monthly_salary or 0),
            joining_date=employee.joining_date,
        ),
        working_days=calendar.count,
        daily_rows=daily_rows,
        totals=AttendanceTotals(
            present_days=metrics.present_days,
            late_days=metrics.late_days,
            half_days=metrics.half_days,
            absent_days=metrics.absent_days,
            excess_leaves=metrics.excess_leaves,
        ),
        salary=SalaryTotals(
            base_salary=round(salary.base_salary, 2),
            per_day_salary=round(salary.per_day_salary, 2),
            total_deductions=round(salary.total_deductions, 2),
            net_salary=round(salary.net_salary, 2),
        ),
    )


async def pending_attendance_days(
    db: AsyncSession, employee_id: str, year: int, month: int
) -> tuple[list[date], list[date]]:
    """(working days of the month, those without an attendance row)."""
    working = list((await resolve_working_days(year, month)).days)
    first, last = month_bounds(year, month)
    result = await db.execute(
        select(Attendance.work_date).where(
            Attendance.employee_id == employee_id,
            Attendance.work_date.between(first, last),
        )
    )
    recorded = set(result.scalars().all())
    return working, [d for d in working if d not in recorded]
