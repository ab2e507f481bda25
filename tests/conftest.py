"""
conftest.py — shared fixtures for all tests.

Strategy:
- API tests run the real FastAPI app through httpx ASGITransport.
- get_db is overridden with sessions on a fresh in-memory SQLite database
  (aiosqlite, StaticPool) per test, created from the ORM metadata.
- The working-days service is disabled, so every month comes from the local
  calendar with Sunday as the only weekly day off.
- payroll_data seeds June 2026 (26 working days: Mon–Sat) with attendance
  whose expected payroll is spelled out in the fixture docstring.
"""

from __future__ import annotations

from datetime import date, time
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from paytrack.core.config import settings
from paytrack.db.models import Attendance, Base, Employee, Office, OfficePosition, Position
from paytrack.db.session import get_db
from paytrack.main import app

# ---------------------------------------------------------------------------
# Settings: local calendar only
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def local_calendar(monkeypatch):
    monkeypatch.setattr(settings, "WORKING_DAYS_API_ENABLED", False)
    monkeypatch.setattr(settings, "WEEKLY_DAYS_OFF", [6])
    monkeypatch.setattr(settings, "PUBLIC_HOLIDAYS", [])
    monkeypatch.setattr(settings, "DEFAULT_DUTY_HOURS", 8.0)
    monkeypatch.setattr(settings, "DEFAULT_REPORTING_TIME", "09:00")
    monkeypatch.setattr(settings, "LATE_GRACE_MINUTES", 15)
    monkeypatch.setattr(settings, "ABSENCE_GRACE_DAYS", 2)
    monkeypatch.setattr(settings, "EXCESS_LEAVE_PENALTY_DAYS", 2.0)


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def db(session_factory) -> AsyncSession:
    """Raw DB session for direct queries in tests."""
    async with session_factory() as session:
        yield session


# ---------------------------------------------------------------------------
# HTTP client fixture
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncClient:
    """HTTPX async client whose requests use the test database."""

    async def _override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.pop(get_db, None)


# ---------------------------------------------------------------------------
# Seed data
# ---------------------------------------------------------------------------


def _att(employee_id: str, day: int, punch_in: str | None, punch_out: str | None) -> Attendance:
    return Attendance(
        employee_id=employee_id,
        work_date=date(2026, 6, day),
        punch_in=time.fromisoformat(punch_in) if punch_in else None,
        punch_out=time.fromisoformat(punch_out) if punch_out else None,
    )


@pytest_asyncio.fixture
async def payroll_data(session_factory) -> dict:
    """
    Offices/positions plus three employees with attendance in 2026:

    EMP-A "Alice": salary 26000 (1000/day), Head Office + Clerk,
      override reporting 09:30, 8h duty. June:
        01 09:00-18:00 present     02 09:45-18:00 late
        03 09:00-12:00 half day    04 09:00-none  absent
        05 none-none   absent      06 18:00-09:00 absent
        08 09:00-18:00 present
      -> present 3 (late 1), half 1, absent 3, excess 1
      -> deduction 3000 + 500 + 2000 = 5500, net 20500

    EMP-B "Bob": salary 13000 (500/day), no office, defaults 09:00/8h.
        01 09:15-18:00 late        02 09:14-18:00 present
      -> present 2 (late 1), deduction 0, net 13000

    EMP-C "Carol": attendance only in July -> not in the June report.
    """
    async with session_factory() as session:
        head = Office(name="Head Office")
        branch = Office(name="Branch")
        clerk = Position(title="Clerk")
        driver = Position(title="Driver")
        session.add_all([head, branch, clerk, driver])
        await session.flush()

        session.add(
            OfficePosition(
                office_id=head.id,
                position_id=clerk.id,
                reporting_time=time(9, 30),
                duty_hours=Decimal("8.00"),
            )
        )
        session.add_all(
            [
                Employee(
                    employee_id="EMP-A",
                    name="Alice",
                    email="alice@example.com",
                    office_id=head.id,
                    position_id=clerk.id,
                    monthly_salary=Decimal("26000.00"),
                    joining_date=date(2024, 3, 1),
                ),
                Employee(
                    employee_id="EMP-B",
                    name="Bob",
                    email="bob@example.com",
                    monthly_salary=Decimal("13000.00"),
                ),
                Employee(
                    employee_id="EMP-C",
                    name="Carol",
                    office_id=branch.id,
                    position_id=driver.id,
                    monthly_salary=Decimal("20000.00"),
                ),
            ]
        )
        await session.flush()

        session.add_all(
            [
                _att("EMP-A", 1, "09:00", "18:00"),
                _att("EMP-A", 2, "09:45", "18:00"),
                _att("EMP-A", 3, "09:00", "12:00"),
                _att("EMP-A", 4, "09:00", None),
                _att("EMP-A", 5, None, None),
                _att("EMP-A", 6, "18:00", "09:00"),
                _att("EMP-A", 8, "09:00", "18:00"),
                _att("EMP-B", 1, "09:15", "18:00"),
                _att("EMP-B", 2, "09:14", "18:00"),
                Attendance(
                    employee_id="EMP-C",
                    work_date=date(2026, 7, 1),
                    punch_in=time(9, 0),
                    punch_out=time(18, 0),
                ),
            ]
        )
        await session.commit()

        return {
            "head_office_id": head.id,
            "branch_office_id": branch.id,
            "clerk_id": clerk.id,
            "driver_id": driver.id,
        }
