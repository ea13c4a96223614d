"""ProductionBatch — one mushroom production run.

A batch is created with its product, substrate and start date, then moves
through six fixed stages.  Each stage owns a group of columns below; they
stay NULL until that stage is worked.

Lifecycle:  batch_creation → inoculation → incubation → fruiting →
            harvesting → post_harvest → completed

Only the pointer (``current_stage``) is stored.  Stage status is derived in
``app.workflow.stages``.

Approval is a separate track: a manager approves or rejects a batch at any
stage, recording who decided and when.
"""

import uuid
from datetime import date, datetime

from sqlalchemy import Boolean, Date, DateTime, Float, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.workflow.stages import DEFAULT_STAGE

APPROVAL_PENDING = "pending"
APPROVAL_APPROVED = "approved"
APPROVAL_REJECTED = "rejected"
APPROVAL_STATUSES = (APPROVAL_PENDING, APPROVAL_APPROVED, APPROVAL_REJECTED)


class ProductionBatch(Base):
    __tablename__ = "production_batches"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    # Human-readable, unique — MB-YYYYMMDD-NNN when generated
    batch_number: Mapped[str] = mapped_column(
        String(50), unique=True, nullable=False, index=True
    )

    # ── Batch creation ───────────────────────────────────────
    product_type: Mapped[str] = mapped_column(String(100), nullable=False)
    substrate_type: Mapped[str] = mapped_column(String(100), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)

    # Six stage keys or "completed".  Plain string, not an Enum column,
    # so legacy values can still be read back.
    current_stage: Mapped[str] = mapped_column(
        String(30), default=DEFAULT_STAGE, nullable=False, index=True
    )

    # ── Inoculation ──────────────────────────────────────────
    inoculation_date: Mapped[date | None] = mapped_column(Date)
    spawn_quantity_grams: Mapped[float | None] = mapped_column(Float)
    spawn_supplier: Mapped[str | None] = mapped_column(String(100))
    spawn_added_by: Mapped[str | None] = mapped_column(String(100))
    inoculation_notes: Mapped[str | None] = mapped_column(Text)

    # ── Incubation ───────────────────────────────────────────
    incubation_start_date: Mapped[date | None] = mapped_column(Date)
    incubation_room_temp: Mapped[float | None] = mapped_column(Float)  # °C
    incubation_room_humidity: Mapped[float | None] = mapped_column(Float)  # %
    incubation_notes: Mapped[str | None] = mapped_column(Text)

    # ── Fruiting ─────────────────────────────────────────────
    fruiting_start_date: Mapped[date | None] = mapped_column(Date)
    fruiting_room_temp: Mapped[float | None] = mapped_column(Float)  # °C
    fruiting_room_humidity: Mapped[float | None] = mapped_column(Float)  # %
    light_exposure: Mapped[str | None] = mapped_column(String(100))
    fruiting_notes: Mapped[str | None] = mapped_column(Text)

    # ── Harvesting ───────────────────────────────────────────
    harvest_date: Mapped[date | None] = mapped_column(Date, index=True)
    harvested_weight_kg: Mapped[float | None] = mapped_column(Float)
    damaged_weight_kg: Mapped[float | None] = mapped_column(Float)
    harvested_by: Mapped[str | None] = mapped_column(String(100))
    harvest_notes: Mapped[str | None] = mapped_column(Text)

    # ── Post-harvest ─────────────────────────────────────────
    post_harvest_date: Mapped[date | None] = mapped_column(Date)
    substrate_collected_kg: Mapped[float | None] = mapped_column(Float)
    # good | fair | poor | contaminated
    substrate_condition: Mapped[str | None] = mapped_column(String(50))
    mycelium_reuse_status: Mapped[bool | None] = mapped_column(Boolean)
    post_harvest_notes: Mapped[str | None] = mapped_column(Text)

    # ── Approval ─────────────────────────────────────────────
    # pending | approved | rejected.  Set only through the approve/reject
    # endpoints, independent of current_stage.
    approval_status: Mapped[str] = mapped_column(
        String(20), default=APPROVAL_PENDING, nullable=False, index=True
    )
    approved_by: Mapped[str | None] = mapped_column(String(100))
    approved_at: Mapped[datetime | None] = mapped_column(DateTime)
    approval_notes: Mapped[str | None] = mapped_column(Text)

    # ── Metadata ─────────────────────────────────────────────
    notes: Mapped[str | None] = mapped_column(Text)
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    def __repr__(self) -> str:
        return f"<ProductionBatch(batch_number={self.batch_number}, stage={self.current_stage})>"
