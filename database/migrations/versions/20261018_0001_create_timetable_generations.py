"""create timetable generations

Revision ID: 20261018_0001
Revises: None
Create Date: 2026-10-18 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "timetable_generations",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("branch", sa.String(length=50), nullable=False),
        sa.Column("divisions", sa.String(length=200), nullable=False),
        sa.Column("academic_year", sa.String(length=20), nullable=True),
        sa.Column("source", sa.String(length=20), nullable=False, server_default="algorithmic"),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="complete"),
        sa.Column("dropped_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("seed", sa.Integer(), nullable=True),
        sa.Column("headers", sa.JSON(), nullable=False),
        sa.Column("rows", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_timetable_generations_branch", "timetable_generations", ["branch"])
    op.create_index("ix_timetable_generations_created_at", "timetable_generations", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_timetable_generations_created_at", table_name="timetable_generations")
    op.drop_index("ix_timetable_generations_branch", table_name="timetable_generations")
    op.drop_table("timetable_generations")
