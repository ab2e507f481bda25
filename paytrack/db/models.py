from datetime import date, datetime, time
from decimal import Decimal

from sqlalchemy import (
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Time,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class Office(Base):
    __tablename__ = "offices"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<Office id={self.id} name={self.name}>"


class Position(Base):
    __tablename__ = "positions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<Position id={self.id} title={self.title}>"


class OfficePosition(Base):
    """Timing override for employees of one position in one office."""

    __tablename__ = "office_positions"

    __table_args__ = (
        UniqueConstraint("office_id", "position_id", name="uq_office_position"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    office_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("offices.id", ondelete="CASCADE"), nullable=False
    )
    position_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("positions.id", ondelete="CASCADE"), nullable=False
    )
    reporting_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    duty_hours: Mapped[Decimal | None] = mapped_column(Numeric(4, 2), nullable=True)


class Employee(Base):
    __tablename__ = "employees"

    employee_id: Mapped[str] = mapped_column(String(50), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    office_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("offices.id", ondelete="SET NULL"), nullable=True
    )
    position_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("positions.id", ondelete="SET NULL"), nullable=True
    )
    monthly_salary: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=0
    )
    joining_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    office: Mapped["Office | None"] = relationship("Office", lazy="raise")
    position: Mapped["Position | None"] = relationship("Position", lazy="raise")
    attendance: Mapped[list["Attendance"]] = relationship(
        "Attendance", back_populates="employee", lazy="raise"
    )

    def __repr__(self) -> str:
        return f"<Employee employee_id={self.employee_id} name={self.name}>"


class Attendance(Base):
    __tablename__ = "attendance"

    __table_args__ = (
        UniqueConstraint("employee_id", "work_date", name="uq_attendance_employee_date"),
        Index("ix_attendance_work_date", "work_date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[str] = mapped_column(
        String(50),
        ForeignKey("employees.employee_id", ondelete="CASCADE"),
        nullable=False,
    )
    work_date: Mapped[date] = mapped_column(Date, nullable=False)
    punch_in: Mapped[time | None] = mapped_column(Time, nullable=True)
    punch_out: Mapped[time | None] = mapped_column(Time, nullable=True)

    employee: Mapped["Employee"] = relationship("Employee", back_populates="attendance")

    def __repr__(self) -> str:
        return (
            f"<Attendance employee_id={self.employee_id} work_date={self.work_date} "
            f"punch_in={self.punch_in} punch_out={self.punch_out}>"
        )


class Payroll(Base):
    """One row per (employee, month, year); recomputation overwrites it."""

    __tablename__ = "payroll"

    __table_args__ = (
        UniqueConstraint("employee_id", "month", "year", name="uq_payroll_period"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[str] = mapped_column(
        String(50),
        ForeignKey("employees.employee_id", ondelete="CASCADE"),
        nullable=False,
    )
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    present_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    half_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    late_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    leaves: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    excess_leaves: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    deductions_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=0
    )
    net_salary: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return (
            f"<Payroll employee_id={self.employee_id} period={self.year}-{self.month:02d} "
            f"net_salary={self.net_salary}>"
        )
