"""Production batch service — CRUD plus the stage workflow.

Handles:
  - Auto-generating a unique batch_number (MB-YYYYMMDD-NNN)
  - Partial updates, with a ``stage_changed`` activity entry whenever
    ``current_stage`` moves
  - Stage edits: only the batch's current stage accepts edits, and only
    for the fields that stage owns
  - Quick progression: finishing the current stage with standard values
  - Manager approval: approving or rejecting a pending batch
  - Building the six-stage workflow view for a batch

All functions add to the caller's session and flush; the request-scoped
session (``get_db``) commits.
"""

import logging
from datetime import date, datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.middleware.exceptions import (
    BusinessLogicError,
    InvalidStageError,
    ResourceNotFoundError,
)
from app.models.production_batch import (
    APPROVAL_APPROVED,
    APPROVAL_PENDING,
    APPROVAL_REJECTED,
    APPROVAL_STATUSES,
    ProductionBatch,
)
from app.schemas.production_batch import ApprovalDecision, BatchCreate, BatchUpdate, StageEdit
from app.schemas.workflow import WorkflowOut
from app.utils.activity import log_activity
from app.workflow.fields import STAGE_ATTRIBUTES
from app.workflow.progression import next_stage, next_stage_action, quick_progress_defaults
from app.workflow.stages import (
    COMPLETED_MARKER,
    STAGE_KEYS,
    Stage,
    display_name,
    is_completed,
    is_known_stage,
    normalize_stage,
)
from app.workflow.summary import build_workflow_summary

logger = logging.getLogger(__name__)

ENTITY_TYPE = "production_batch"

# Columns that may not be cleared through a PATCH
_REQUIRED_FIELDS = {"batch_number", "product_type", "substrate_type", "start_date", "current_stage"}


async def generate_batch_number(db: AsyncSession, today: date | None = None) -> str:
    """Generate MB-YYYYMMDD-NNN where NNN resets daily."""
    day = (today or datetime.utcnow().date()).strftime("%Y%m%d")
    prefix = f"{settings.batch_number_prefix}-{day}-"

    result = await db.execute(
        select(func.count(ProductionBatch.id)).where(
            ProductionBatch.batch_number.like(f"{prefix}%")
        )
    )
    count = result.scalar() or 0
    return f"{prefix}{count + 1:03d}"


async def _ensure_unique_number(db: AsyncSession, batch_number: str) -> None:
    existing = (
        await db.execute(
            select(ProductionBatch.id).where(ProductionBatch.batch_number == batch_number)
        )
    ).scalar_one_or_none()
    if existing:
        raise BusinessLogicError(
            f"Batch number already in use: {batch_number}",
            error_code="DUPLICATE_BATCH_NUMBER",
        )


def _check_not_cleared(data: dict) -> None:
    cleared = sorted(k for k, v in data.items() if k in _REQUIRED_FIELDS and v is None)
    if cleared:
        raise BusinessLogicError(f"Cannot clear required fields: {', '.join(cleared)}")


async def _record_stage_change(
    db: AsyncSession,
    batch: ProductionBatch,
    old_stage: str,
    actor: str | None = None,
    action: str = "stage_changed",
) -> None:
    logger.info(
        "Batch %s moved from %s to %s", batch.batch_number, old_stage, batch.current_stage
    )
    await log_activity(
        db,
        action=action,
        entity_type=ENTITY_TYPE,
        entity_id=batch.id,
        entity_code=batch.batch_number,
        summary=f"{batch.batch_number} moved to {display_name(batch.current_stage)}",
        details={"from": old_stage, "to": batch.current_stage},
        actor=actor,
    )


# ── CRUD ─────────────────────────────────────────────────────

async def create_batch(
    body: BatchCreate,
    db: AsyncSession,
    actor: str | None = None,
) -> ProductionBatch:
    if body.batch_number:
        await _ensure_unique_number(db, body.batch_number)
        batch_number = body.batch_number
    else:
        batch_number = await generate_batch_number(db)

    batch = ProductionBatch(
        batch_number=batch_number,
        product_type=body.product_type,
        substrate_type=body.substrate_type,
        start_date=body.start_date,
        notes=body.notes,
        current_stage=Stage.BATCH_CREATION.value,
    )
    db.add(batch)
    await db.flush()

    await log_activity(
        db,
        action="created",
        entity_type=ENTITY_TYPE,
        entity_id=batch.id,
        entity_code=batch.batch_number,
        summary=f"Created batch {batch.batch_number} — {batch.product_type} on {batch.substrate_type}",
        actor=actor,
    )
    logger.info("Created production batch %s", batch.batch_number)
    return batch


async def get_batch(batch_id: str, db: AsyncSession) -> ProductionBatch:
    batch = (
        await db.execute(
            select(ProductionBatch).where(
                ProductionBatch.id == batch_id,
                ProductionBatch.is_deleted == False,  # noqa: E712
            )
        )
    ).scalar_one_or_none()
    if not batch:
        raise ResourceNotFoundError("Production batch", batch_id)
    return batch


async def list_batches(
    db: AsyncSession,
    *,
    stage: str | None = None,
    active_only: bool = False,
    approval_status: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> tuple[list[ProductionBatch], int]:
    """Return (page, total) of non-deleted batches, newest first."""
    stmt = select(ProductionBatch).where(ProductionBatch.is_deleted == False)  # noqa: E712

    if stage:
        if not is_known_stage(stage):
            raise InvalidStageError(stage)
        stmt = stmt.where(ProductionBatch.current_stage == stage)
    if active_only:
        stmt = stmt.where(ProductionBatch.current_stage.in_(STAGE_KEYS))
    if approval_status:
        if approval_status not in APPROVAL_STATUSES:
            raise BusinessLogicError(
                f"Unknown approval status: {approval_status}",
                error_code="INVALID_APPROVAL_STATUS",
            )
        stmt = stmt.where(ProductionBatch.approval_status == approval_status)

    total = (
        await db.execute(select(func.count()).select_from(stmt.subquery()))
    ).scalar() or 0

    result = await db.execute(
        stmt.order_by(ProductionBatch.created_at.desc()).limit(limit).offset(offset)
    )
    return list(result.scalars().all()), total


async def all_batches(db: AsyncSession) -> list[ProductionBatch]:
    result = await db.execute(
        select(ProductionBatch).where(ProductionBatch.is_deleted == False)  # noqa: E712
    )
    return list(result.scalars().all())


async def update_batch(
    batch: ProductionBatch,
    body: BatchUpdate,
    db: AsyncSession,
    actor: str | None = None,
) -> ProductionBatch:
    data = body.model_dump(exclude_unset=True)
    _check_not_cleared(data)

    if "batch_number" in data and data["batch_number"] != batch.batch_number:
        await _ensure_unique_number(db, data["batch_number"])

    old_stage = batch.current_stage
    for field, value in data.items():
        setattr(batch, field, value)
    await db.flush()

    if batch.current_stage != old_stage:
        await _record_stage_change(db, batch, old_stage, actor)
    else:
        await log_activity(
            db,
            action="updated",
            entity_type=ENTITY_TYPE,
            entity_id=batch.id,
            entity_code=batch.batch_number,
            summary=f"Updated batch {batch.batch_number}",
            details={"fields": sorted(data)},
            actor=actor,
        )
    return batch


async def delete_batch(
    batch: ProductionBatch,
    db: AsyncSession,
    actor: str | None = None,
) -> None:
    batch.is_deleted = True
    await db.flush()
    await log_activity(
        db,
        action="deleted",
        entity_type=ENTITY_TYPE,
        entity_id=batch.id,
        entity_code=batch.batch_number,
        summary=f"Deleted batch {batch.batch_number}",
        actor=actor,
    )


# ── Workflow ─────────────────────────────────────────────────

async def edit_stage(
    batch: ProductionBatch,
    stage: str,
    body: StageEdit,
    db: AsyncSession,
    actor: str | None = None,
) -> ProductionBatch:
    """Save fields for ``stage``; only the batch's current stage is editable.

    Raises:
        InvalidStageError: ``stage`` is not one of the six stage keys.
        StageNotEditableError: ``stage`` is not the batch's current stage.
        BusinessLogicError: the body carries fields owned by another stage.
    """
    try:
        target = Stage(stage)
    except ValueError:
        raise InvalidStageError(stage)

    data = body.model_dump(exclude_unset=True)
    advance = data.pop("advance", False)
    _check_not_cleared(data)

    foreign = sorted(set(data) - STAGE_ATTRIBUTES[target])
    if foreign:
        raise BusinessLogicError(
            f"Fields not part of the {target.display_name} stage: {', '.join(foreign)}",
            error_code="FIELDS_NOT_IN_STAGE",
        )

    def apply(stage_key: str) -> None:
        for field, value in data.items():
            setattr(batch, field, value)

    summary = build_workflow_summary(batch, on_edit_stage=apply)
    # Raises StageNotEditableError unless target is the current stage
    summary.get(target).request_edit()

    old_stage = normalize_stage(batch.current_stage)
    if advance:
        batch.current_stage = next_stage(target)
    await db.flush()

    await log_activity(
        db,
        action="stage_edited",
        entity_type=ENTITY_TYPE,
        entity_id=batch.id,
        entity_code=batch.batch_number,
        summary=f"Recorded {target.display_name} details for {batch.batch_number}",
        details={"stage": target.value, "fields": sorted(data)},
        actor=actor,
    )
    if batch.current_stage != old_stage:
        await _record_stage_change(db, batch, old_stage, actor)
    return batch


async def advance_batch(
    batch: ProductionBatch,
    db: AsyncSession,
    operator: str | None = None,
    today: date | None = None,
) -> ProductionBatch:
    """Finish the current stage with standard values and move to the next.

    Values already recorded for the stage are kept; only missing ones are
    filled with the defaults from ``quick_progress_defaults``.
    """
    current = normalize_stage(batch.current_stage)
    if is_completed(current):
        raise BusinessLogicError(
            f"Batch {batch.batch_number} is already complete",
            error_code="BATCH_ALREADY_COMPLETE",
        )
    if not is_known_stage(current):
        raise InvalidStageError(
            current,
            f"Batch {batch.batch_number} has an unrecognised stage '{current}'; "
            "set current_stage explicitly before advancing",
        )

    defaults = quick_progress_defaults(current, operator=operator, today=today)
    for field, value in defaults.items():
        if field == "current_stage":
            continue
        existing = getattr(batch, field)
        if existing is None or existing == "":
            setattr(batch, field, value)
    batch.current_stage = defaults.get("current_stage", next_stage(current))
    await db.flush()

    await _record_stage_change(db, batch, current, operator, action="advanced")
    return batch


# ── Approval ─────────────────────────────────────────────

async def _decide(
    batch: ProductionBatch,
    decision: str,
    body: ApprovalDecision,
    db: AsyncSession,
) -> ProductionBatch:
    if batch.approval_status != APPROVAL_PENDING:
        raise BusinessLogicError(
            f"Batch {batch.batch_number} was already {batch.approval_status}",
            error_code="BATCH_ALREADY_REVIEWED",
        )

    batch.approval_status = decision
    batch.approved_by = body.reviewer
    batch.approved_at = datetime.utcnow()
    batch.approval_notes = body.notes
    await db.flush()

    await log_activity(
        db,
        action=decision,
        entity_type=ENTITY_TYPE,
        entity_id=batch.id,
        entity_code=batch.batch_number,
        summary=f"Batch {batch.batch_number} {decision} by {body.reviewer}",
        details={"notes": body.notes} if body.notes else None,
        actor=body.reviewer,
    )
    logger.info("Batch %s %s by %s", batch.batch_number, decision, body.reviewer)
    return batch


async def approve_batch(
    batch: ProductionBatch, body: ApprovalDecision, db: AsyncSession
) -> ProductionBatch:
    return await _decide(batch, APPROVAL_APPROVED, body, db)


async def reject_batch(
    batch: ProductionBatch, body: ApprovalDecision, db: AsyncSession
) -> ProductionBatch:
    return await _decide(batch, APPROVAL_REJECTED, body, db)


def workflow_view(batch: ProductionBatch) -> WorkflowOut:
    """Six-stage summary for ``batch`` as an API response."""
    summary = build_workflow_summary(batch, date_format=settings.date_format)
    current = summary.current_stage
    complete = current == COMPLETED_MARKER
    has_next = is_known_stage(current) and not complete
    return WorkflowOut.from_summary(
        batch.id,
        summary,
        current_stage_name=display_name(current),
        next_stage=next_stage(current) if has_next else None,
        next_action=next_stage_action(current) if has_next else None,
        is_complete=complete,
    )
