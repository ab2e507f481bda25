"""
Seed script: one office, one position with a timing override and a
sample employee.

Usage:
    python -m paytrack.db.seed
"""

import asyncio
from datetime import date, time
from decimal import Decimal

from sqlalchemy import select

from paytrack.db.models import Employee, Office, OfficePosition, Position
from paytrack.db.session import AsyncSessionLocal


async def create_reference_data(session) -> tuple[Office, Position]:
    result = await session.execute(select(Office).where(Office.name == "Head Office"))
    office = result.scalar_one_or_none()
    if office is None:
        office = Office(name="Head Office")
        session.add(office)

    result = await session.execute(select(Position).where(Position.title == "Clerk"))
    position = result.scalar_one_or_none()
    if position is None:
        position = Position(title="Clerk")
        session.add(position)

    await session.flush()

    result = await session.execute(
        select(OfficePosition).where(
            OfficePosition.office_id == office.id,
            OfficePosition.position_id == position.id,
        )
    )
    if result.scalar_one_or_none() is None:
        session.add(
            OfficePosition(
                office_id=office.id,
                position_id=position.id,
                reporting_time=time(9, 30),
                duty_hours=Decimal("8.00"),
            )
        )
        print(f"Created timing override for office={office.id} position={position.id}")
    return office, position


async def create_sample_employee(session, office: Office, position: Position) -> Employee:
    employee = await session.get(Employee, "EMP001")
    if employee:
        print("Sample employee already exists, skipping.")
        return employee

    employee = Employee(
        employee_id="EMP001",
        name="Sample Employee",
        email="sample.employee@example.com",
        office_id=office.id,
        position_id=position.id,
        monthly_salary=Decimal("30000.00"),
        joining_date=date.today(),
    )
    session.add(employee)
    await session.flush()
    print(f"Created employee: employee_id={employee.employee_id}")
    return employee


async def main():
    async with AsyncSessionLocal() as session:
        async with session.begin():
            office, position = await create_reference_data(session)
            await create_sample_employee(session, office, position)
            print("Seed complete.")


if __name__ == "__main__":
    asyncio.run(main())
