"""Add contamination_logs table and batch approval columns.

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-18
"""

revision = "0002"
down_revision = "0001"
branch_labels = None
depends_on = None

from alembic import op
import sqlalchemy as sa


def upgrade() -> None:
    op.add_column(
        "production_batches",
        sa.Column("approval_status", sa.String(20), nullable=False, server_default="pending"),
    )
    op.add_column("production_batches", sa.Column("approved_by", sa.String(100)))
    op.add_column("production_batches", sa.Column("approved_at", sa.DateTime()))
    op.add_column("production_batches", sa.Column("approval_notes", sa.Text()))
    op.create_index(
        "ix_production_batches_approval_status", "production_batches", ["approval_status"]
    )

    op.create_table(
        "contamination_logs",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "batch_id",
            sa.String(36),
            sa.ForeignKey("production_batches.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("reported_date", sa.Date(), nullable=False),
        sa.Column("contamination_type", sa.String(100), nullable=False),
        sa.Column("contaminated_bags", sa.Integer(), nullable=False),
        sa.Column("severity", sa.String(20), nullable=False),
        sa.Column("corrective_action", sa.Text(), nullable=False),
        sa.Column("worker_notes", sa.Text()),
        sa.Column("reported_by", sa.String(100)),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_contamination_logs_batch_id", "contamination_logs", ["batch_id"])
    op.create_index("ix_contamination_logs_reported_date", "contamination_logs", ["reported_date"])


def downgrade() -> None:
    op.drop_table("contamination_logs")
    op.drop_index("ix_production_batches_approval_status", table_name="production_batches")
    op.drop_column("production_batches", "approval_notes")
    op.drop_column("production_batches", "approved_at")
    op.drop_column("production_batches", "approved_by")
    op.drop_column("production_batches", "approval_status")
