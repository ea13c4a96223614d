"""Initial schema: production_batches and activity_logs.

Revision ID: 0001
Revises:
Create Date: 2026-10-18
"""

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

from alembic import op
import sqlalchemy as sa


def upgrade() -> None:
    op.create_table(
        "production_batches",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("batch_number", sa.String(50), nullable=False),
        sa.Column("product_type", sa.String(100), nullable=False),
        sa.Column("substrate_type", sa.String(100), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("current_stage", sa.String(30), nullable=False, server_default="batch_creation"),
        # Inoculation
        sa.Column("inoculation_date", sa.Date()),
        sa.Column("spawn_quantity_grams", sa.Float()),
        sa.Column("spawn_supplier", sa.String(100)),
        sa.Column("spawn_added_by", sa.String(100)),
        sa.Column("inoculation_notes", sa.Text()),
        # Incubation
        sa.Column("incubation_start_date", sa.Date()),
        sa.Column("incubation_room_temp", sa.Float()),
        sa.Column("incubation_room_humidity", sa.Float()),
        sa.Column("incubation_notes", sa.Text()),
        # Fruiting
        sa.Column("fruiting_start_date", sa.Date()),
        sa.Column("fruiting_room_temp", sa.Float()),
        sa.Column("fruiting_room_humidity", sa.Float()),
        sa.Column("light_exposure", sa.String(100)),
        sa.Column("fruiting_notes", sa.Text()),
        # Harvesting
        sa.Column("harvest_date", sa.Date()),
        sa.Column("harvested_weight_kg", sa.Float()),
        sa.Column("damaged_weight_kg", sa.Float()),
        sa.Column("harvested_by", sa.String(100)),
        sa.Column("harvest_notes", sa.Text()),
        # Post-harvest
        sa.Column("post_harvest_date", sa.Date()),
        sa.Column("substrate_collected_kg", sa.Float()),
        sa.Column("substrate_condition", sa.String(50)),
        sa.Column("mycelium_reuse_status", sa.Boolean()),
        sa.Column("post_harvest_notes", sa.Text()),
        # Metadata
        sa.Column("notes", sa.Text()),
        sa.Column("is_deleted", sa.Boolean(), server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_production_batches_batch_number", "production_batches", ["batch_number"], unique=True)
    op.create_index("ix_production_batches_start_date", "production_batches", ["start_date"])
    op.create_index("ix_production_batches_current_stage", "production_batches", ["current_stage"])
    op.create_index("ix_production_batches_harvest_date", "production_batches", ["harvest_date"])
    op.create_index("ix_production_batches_created_at", "production_batches", ["created_at"])

    op.create_table(
        "activity_logs",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("actor", sa.String(100)),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("entity_type", sa.String(50), nullable=False),
        sa.Column("entity_id", sa.String(36)),
        sa.Column("entity_code", sa.String(100)),
        sa.Column("summary", sa.Text()),
        sa.Column("details", sa.JSON()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_activity_logs_action", "activity_logs", ["action"])
    op.create_index("ix_activity_logs_entity_type", "activity_logs", ["entity_type"])
    op.create_index("ix_activity_logs_created_at", "activity_logs", ["created_at"])


def downgrade() -> None:
    op.drop_table("activity_logs")
    op.drop_table("production_batches")
