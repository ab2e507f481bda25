import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from paytrack.core.errors import parse_iso_date, server_errors
from paytrack.db.models import Attendance, Employee
from paytrack.db.session import get_db
from paytrack.schemas.attendance import AttendanceCreate, AttendanceResponse, AttendanceUpdate

logger = logging.getLogger(__name__)

router = APIRouter()


async def _find_record(db: AsyncSession, employee_id: str, day: date) -> Attendance | None:
    result = await db.execute(
        select(Attendance).where(
            Attendance.employee_id == employee_id,
            Attendance.work_date == day,
        )
    )
    return result.scalar_one_or_none()


async def _get_record(db: AsyncSession, employee_id: str, work_date: str) -> Attendance:
    record = await _find_record(db, employee_id, parse_iso_date(work_date, "date"))
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Attendance record not found",
        )
    return record


@router.get(
    "/{employee_id}/{work_date}",
    response_model=AttendanceResponse,
    summary="Attendance record of an employee for one date",
)
async def get_attendance(
    employee_id: str,
    work_date: str,
    db: AsyncSession = Depends(get_db),
) -> AttendanceResponse:
    record = await _get_record(db, employee_id, work_date)
    return AttendanceResponse.model_validate(record)


@router.post(
    "/",
    response_model=AttendanceResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record attendance for a pending day",
)
async def create_attendance(
    body: AttendanceCreate,
    db: AsyncSession = Depends(get_db),
) -> AttendanceResponse:
    employee = await db.get(Employee, body.employee_id)
    if employee is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Employee not found",
        )

    duplicate = HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=f"Attendance for '{body.employee_id}' on {body.work_date} already exists",
    )
    if await _find_record(db, body.employee_id, body.work_date) is not None:
        raise duplicate

    record = Attendance(
        employee_id=body.employee_id,
        work_date=body.work_date,
        punch_in=body.punch_in,
        punch_out=body.punch_out,
    )
    db.add(record)
    try:
        await db.commit()
    except IntegrityError:
        # another request inserted the same (employee, date) after the check above
        await db.rollback()
        raise duplicate
    await db.refresh(record)
    logger.info("Attendance recorded: employee=%s date=%s", record.employee_id, record.work_date)
    return AttendanceResponse.model_validate(record)


@router.put(
    "/{employee_id}/{work_date}",
    response_model=AttendanceResponse,
    summary="Update punch-in / punch-out of an attendance record",
)
async def update_attendance(
    employee_id: str,
    work_date: str,
    body: AttendanceUpdate,
    db: AsyncSession = Depends(get_db),
) -> AttendanceResponse:
    record = await _get_record(db, employee_id, work_date)

    # Only fields present in the body are changed; an explicit null clears a punch
    changes = body.model_dump(exclude_unset=True)
    for field_name, value in changes.items():
        setattr(record, field_name, value)

    with server_errors("Failed to update attendance"):
        await db.commit()
        await db.refresh(record)
    return AttendanceResponse.model_validate(record)
