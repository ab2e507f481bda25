from datetime import date, time
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class PayrollReportRow(BaseModel):
    employee_id: str
    name: str
    email: str | None
    office_name: str | None
    position_title: str | None
    present_days: int
    late_days: int
    half_days: int
    absent_days: int
    excess_leaves: int
    base_salary: float
    per_day_salary: float
    total_deductions: float
    net_salary: float


class PayrollSummary(BaseModel):
    total_employees: int
    total_net_salary: str  # 2-decimal string, e.g. "12345.67"
    total_deductions: str
    net_payroll: str
    working_days: int


class DateRange(BaseModel):
    date_from: date
    date_to: date


class PayrollReportResponse(BaseModel):
    success: bool = True
    data: list[PayrollReportRow]
    summary: PayrollSummary | None = None
    date_range: DateRange
    total: int
    page: int
    limit: int
    pages: int
    message: str | None = None


class GeneratePayrollRequest(BaseModel):
    date_from: date | None = None
    date_to: date | None = None
    office: int | None = None
    position: int | None = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=1000)


class OfficeOption(BaseModel):
    id: int
    name: str

    model_config = {"from_attributes": True}


class PositionOption(BaseModel):
    id: int
    title: str

    model_config = {"from_attributes": True}


class OfficeListResponse(BaseModel):
    success: bool = True
    data: list[OfficeOption]


class PositionListResponse(BaseModel):
    success: bool = True
    data: list[PositionOption]


class EmployeeInfo(BaseModel):
    employee_id: str
    name: str
    email: str | None
    office_id: int | None
    position_id: int | None
    monthly_salary: float
    joining_date: date | None

    model_config = {"from_attributes": True}


class DailyBreakdownRow(BaseModel):
    date: date
    status: Literal["present", "late", "half_day", "absent"]
    recorded: bool
    punch_in: time | None = None
    punch_out: time | None = None
    worked_minutes: int | None = None
    late_minutes: int | None = None


class AttendanceTotals(BaseModel):
    present_days: int
    late_days: int
    half_days: int
    absent_days: int
    excess_leaves: int


class SalaryTotals(BaseModel):
    base_salary: float
    per_day_salary: float
    total_deductions: float
    net_salary: float


class EmployeePayrollDetailsResponse(BaseModel):
    success: bool = True
    employee: EmployeeInfo
    working_days: int
    daily_rows: list[DailyBreakdownRow]
    totals: AttendanceTotals
    salary: SalaryTotals


class AttendanceDaysResponse(BaseModel):
    success: bool = True
    days: list[date]


class PendingDaysResponse(BaseModel):
    success: bool = True
    employee_id: str
    year: int
    month: int
    working_days: int
    attendance_recorded: int
    pending_attendance_dates: list[date]
    absent_days: int


class WorkingDaysResponse(BaseModel):
    """Body of the working-days service; keys are camelCase on the wire."""

    model_config = ConfigDict(populate_by_name=True)

    working_days: int = Field(alias="workingDays")
    days: list[date]
    source: Literal["api", "local"]
