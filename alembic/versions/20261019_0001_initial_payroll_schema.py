"""initial: offices, positions, office_positions, employees, attendance, payroll

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "0001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- offices / positions ---
    op.create_table(
        "offices",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "positions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    # --- office_positions (timing override) ---
    op.create_table(
        "office_positions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("office_id", sa.Integer(), nullable=False),
        sa.Column("position_id", sa.Integer(), nullable=False),
        sa.Column("reporting_time", sa.Time(), nullable=True),
        sa.Column("duty_hours", sa.Numeric(4, 2), nullable=True),
        sa.ForeignKeyConstraint(["office_id"], ["offices.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["position_id"], ["positions.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("office_id", "position_id", name="uq_office_position"),
    )

    # --- employees ---
    op.create_table(
        "employees",
        sa.Column("employee_id", sa.String(50), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("office_id", sa.Integer(), nullable=True),
        sa.Column("position_id", sa.Integer(), nullable=True),
        sa.Column("monthly_salary", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("joining_date", sa.Date(), nullable=True),
        sa.ForeignKeyConstraint(["office_id"], ["offices.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["position_id"], ["positions.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("employee_id"),
    )

    # --- attendance ---
    op.create_table(
        "attendance",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("employee_id", sa.String(50), nullable=False),
        sa.Column("work_date", sa.Date(), nullable=False),
        sa.Column("punch_in", sa.Time(), nullable=True),
        sa.Column("punch_out", sa.Time(), nullable=True),
        sa.ForeignKeyConstraint(
            ["employee_id"], ["employees.employee_id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("employee_id", "work_date", name="uq_attendance_employee_date"),
    )
    op.create_index("ix_attendance_work_date", "attendance", ["work_date"])

    # --- payroll ---
    op.create_table(
        "payroll",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("employee_id", sa.String(50), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("present_days", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("half_days", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("late_days", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("leaves", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("excess_leaves", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("deductions_amount", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("net_salary", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(
            ["employee_id"], ["employees.employee_id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("employee_id", "month", "year", name="uq_payroll_period"),
    )


def downgrade() -> None:
    op.drop_table("payroll")
    op.drop_index("ix_attendance_work_date", table_name="attendance")
    op.drop_table("attendance")
    op.drop_table("employees")
    op.drop_table("office_positions")
    op.drop_table("positions")
    op.drop_table("offices")
