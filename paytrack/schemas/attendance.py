from datetime import date, time

from pydantic import BaseModel, field_validator


class AttendanceCreate(BaseModel):
    employee_id: str
    work_date: date
    punch_in: time | None = None
    punch_out: time | None = None

    @field_validator("employee_id")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Field must not be empty")
        return v.strip()


class AttendanceUpdate(BaseModel):
    punch_in: time | None = None
    punch_out: time | None = None


class AttendanceResponse(BaseModel):
    id: int
    employee_id: str
    work_date: date
    punch_in: time | None
    punch_out: time | None

    model_config = {"from_attributes": True}
