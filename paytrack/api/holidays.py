from fastapi import APIRouter, Query

from paytrack.core.errors import require_period, server_errors
from paytrack.schemas.payroll import WorkingDaysResponse
from paytrack.working_days import resolve_working_days

router = APIRouter()


@router.get(
    "/working-days",
    response_model=WorkingDaysResponse,
    summary="Working days of a month",
)
async def get_working_days(
    year: int | None = Query(default=None),
    month: int | None = Query(default=None),
) -> WorkingDaysResponse:
    y, m = require_period(year, month, "year and month are required")
    with server_errors("Failed to fetch working days"):
        calendar = await resolve_working_days(y, m)
        return WorkingDaysResponse(
            working_days=calendar.count,
            days=list(calendar.days),
            source=calendar.source,
        )
