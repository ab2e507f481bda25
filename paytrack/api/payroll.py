"""
Payroll API routes.

Reports recompute payroll from attendance on every call and overwrite the
stored (employee, month, year) rows.
"""

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from paytrack.core.errors import bad_request, parse_iso_date, require_period, server_errors
from paytrack.db.models import Attendance, Employee, Office, Position
from paytrack.db.session import get_db
from paytrack.schemas.payroll import (
    AttendanceDaysResponse,
    EmployeePayrollDetailsResponse,
    GeneratePayrollRequest,
    OfficeListResponse,
    OfficeOption,
    PayrollReportResponse,
    PendingDaysResponse,
    PositionListResponse,
    PositionOption,
)
from paytrack.services.payroll_service import (
    build_employee_details,
    build_payroll_report,
    month_bounds,
    pending_attendance_days,
)

router = APIRouter()

_RANGE_REQUIRED = "date_from and date_to are required"


def _parse_range(date_from: str | None, date_to: str | None):
    if not date_from or not date_to:
        raise bad_request(_RANGE_REQUIRED)
    df = parse_iso_date(date_from, "date_from")
    dt = parse_iso_date(date_to, "date_to")
    if dt < df:
        raise bad_request("date_to must not be earlier than date_from")
    return df, dt


@router.get(
    "/reports",
    response_model=PayrollReportResponse,
    summary="Payroll report for a date range",
)
async def get_payroll_reports(
    date_from: str | None = Query(default=None, description="ISO date YYYY-MM-DD"),
    date_to: str | None = Query(default=None, description="ISO date YYYY-MM-DD"),
    office: int | None = Query(default=None),
    position: int | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=1000),
    db: AsyncSession = Depends(get_db),
) -> PayrollReportResponse:
    df, dt = _parse_range(date_from, date_to)
    with server_errors("Failed to fetch payroll reports"):
        return await build_payroll_report(
            db, df, dt, office=office, position=position, page=page, limit=limit
        )


@router.post(
    "/generate",
    response_model=PayrollReportResponse,
    summary="Generate payroll for a date range",
)
async def generate_payroll(
    body: GeneratePayrollRequest | None = Body(default=None),
    date_from: str | None = Query(default=None),
    date_to: str | None = Query(default=None),
    office: int | None = Query(default=None),
    position: int | None = Query(default=None),
    page: int | None = Query(default=None, ge=1),
    limit: int | None = Query(default=None, ge=1, le=1000),
    db: AsyncSession = Depends(get_db),
) -> PayrollReportResponse:
    # Query parameters take precedence over the JSON body
    body = body or GeneratePayrollRequest()
    df, dt = _parse_range(
        date_from or (body.date_from.isoformat() if body.date_from else None),
        date_to or (body.date_to.isoformat() if body.date_to else None),
    )
    with server_errors("Failed to generate payroll"):
        return await build_payroll_report(
            db,
            df,
            dt,
            office=office if office is not None else body.office,
            position=position if position is not None else body.position,
            page=page if page is not None else body.page,
            limit=limit if limit is not None else body.limit,
        )


@router.get(
    "/employee/{employee_id}",
    response_model=EmployeePayrollDetailsResponse,
    summary="Per-day payroll breakdown for one employee",
)
async def get_employee_payroll_details(
    employee_id: str,
    date_from: str | None = Query(default=None),
    date_to: str | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
) -> EmployeePayrollDetailsResponse:
    df, dt = _parse_range(date_from, date_to)
    with server_errors("Failed to fetch employee payroll details"):
        result = await db.execute(
            select(Employee).where(Employee.employee_id == employee_id)
        )
        employee = result.scalar_one_or_none()
        if employee is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Employee not found",
            )
        return await build_employee_details(db, employee, df, dt)


@router.get(
    "/offices",
    response_model=OfficeListResponse,
    summary="Offices for the report filter dropdown",
)
async def get_offices_for_filter(
    db: AsyncSession = Depends(get_db),
) -> OfficeListResponse:
    with server_errors("Failed to fetch offices"):
        result = await db.execute(select(Office).order_by(Office.name))
        return OfficeListResponse(
            data=[OfficeOption.model_validate(o) for o in result.scalars().all()]
        )


@router.get(
    "/positions",
    response_model=PositionListResponse,
    summary="Positions for the report filter dropdown",
)
async def get_positions_for_filter(
    db: AsyncSession = Depends(get_db),
) -> PositionListResponse:
    with server_errors("Failed to fetch positions"):
        result = await db.execute(select(Position).order_by(Position.title))
        return PositionListResponse(
            data=[PositionOption.model_validate(p) for p in result.scalars().all()]
        )


@router.get(
    "/attendance-days",
    response_model=AttendanceDaysResponse,
    summary="Dates of a month with at least one attendance row",
)
async def get_attendance_days_in_month(
    year: int | None = Query(default=None),
    month: int | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
) -> AttendanceDaysResponse:
    y, m = require_period(year, month, "year and month are required")
    with server_errors("Failed to fetch attendance days"):
        first, last = month_bounds(y, m)
        result = await db.execute(
            select(Attendance.work_date)
            .where(Attendance.work_date.between(first, last))
            .distinct()
            .order_by(Attendance.work_date)
        )
        return AttendanceDaysResponse(days=list(result.scalars().all()))


@router.get(
    "/pending-days",
    response_model=PendingDaysResponse,
    summary="Working days of a month without an attendance row for an employee",
)
async def get_employee_pending_attendance_days(
    employee_id: str | None = Query(default=None),
    year: int | None = Query(default=None),
    month: int | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
) -> PendingDaysResponse:
    message = "employee_id, year and month are required"
    if not employee_id:
        raise bad_request(message)
    y, m = require_period(year, month, message)
    with server_errors("Failed to fetch pending attendance"):
        working, pending = await pending_attendance_days(db, employee_id, y, m)
        return PendingDaysResponse(
            employee_id=employee_id,
            year=y,
            month=m,
            working_days=len(working),
            attendance_recorded=len(working) - len(pending),
            pending_attendance_dates=pending,
            absent_days=len(pending),
        )
