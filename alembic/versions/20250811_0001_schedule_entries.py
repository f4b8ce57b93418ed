"""Schedule entries table.

Revision ID: 20250811_0001
Revises:
Create Date: 2025-08-11 09:00:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20250811_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "scheduleentry",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("employee_id", sa.Integer(), nullable=False),
        sa.Column("store_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("shift_start", sa.String(length=5), nullable=False),
        sa.Column("shift_end", sa.String(length=5), nullable=False),
        sa.Column("shift_type", sa.String(length=32), nullable=False),
        sa.Column("hours", sa.Float(), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False, server_default=sa.text("'SCHEDULED'")),
        sa.Column("violation_warnings", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_by", sa.String(length=120), nullable=False, server_default=sa.text("'system'")),
        sa.Column("notes", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("dedup_key", sa.String(length=120), nullable=True),
        sa.UniqueConstraint("employee_id", "date", name="uq_scheduleentry_employee_date"),
    )
    op.create_index("ix_scheduleentry_employee_id", "scheduleentry", ["employee_id"])
    op.create_index("ix_scheduleentry_store_id", "scheduleentry", ["store_id"])
    op.create_index("ix_scheduleentry_date", "scheduleentry", ["date"])


def downgrade() -> None:
    op.drop_index("ix_scheduleentry_date", table_name="scheduleentry")
    op.drop_index("ix_scheduleentry_store_id", table_name="scheduleentry")
    op.drop_index("ix_scheduleentry_employee_id", table_name="scheduleentry")
    op.drop_table("scheduleentry")
