"""Production batch router — batch records and their stage workflow.

Endpoints:
    POST   /api/production-batches/                       Create batch
    GET    /api/production-batches/                       List batches (filters: stage, active_only, approval_status)
    GET    /api/production-batches/{batch_id}             Single batch
    PATCH  /api/production-batches/{batch_id}             Update batch fields
    DELETE /api/production-batches/{batch_id}             Soft-delete batch
    GET    /api/production-batches/{batch_id}/workflow    Six-stage summary
    PATCH  /api/production-batches/{batch_id}/stages/{stage}  Edit the current stage
    POST   /api/production-batches/{batch_id}/advance     Quick progress to the next stage
    POST   /api/production-batches/{batch_id}/approve     Manager approval
    POST   /api/production-batches/{batch_id}/reject      Manager rejection
    POST   /api/production-batches/{batch_id}/contamination  Report contamination
    GET    /api/production-batches/{batch_id}/contamination  Contamination reports
"""

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.schemas.common import PaginatedResponse
from app.schemas.contamination import ContaminationCreate, ContaminationOut
from app.schemas.production_batch import (
    AdvanceRequest,
    ApprovalDecision,
    BatchCreate,
    BatchOut,
    BatchSummary,
    BatchUpdate,
    StageEdit,
)
from app.schemas.workflow import WorkflowOut
from app.services import contamination, production
from app.utils.cache import invalidate_cache

router = APIRouter()


# ── Create ───────────────────────────────────────────────────

@router.post("/", response_model=BatchOut, status_code=status.HTTP_201_CREATED)
async def create_batch(
    body: BatchCreate,
    db: AsyncSession = Depends(get_db),
):
    """Create a batch at the ``batch_creation`` stage.

    A batch number (MB-YYYYMMDD-NNN) is generated when none is supplied.
    """
    batch = await production.create_batch(body, db)
    await invalidate_cache("analytics:*")
    return BatchOut.model_validate(batch)


# ── List ─────────────────────────────────────────────────────

@router.get("/", response_model=PaginatedResponse[BatchSummary])
async def list_batches(
    stage: str | None = Query(None, description="Stage key or 'completed'"),
    active_only: bool = Query(False),
    approval_status: str | None = Query(None, description="pending, approved or rejected"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    items, total = await production.list_batches(
        db,
        stage=stage,
        active_only=active_only,
        approval_status=approval_status,
        limit=limit,
        offset=offset,
    )
    return PaginatedResponse[BatchSummary](
        items=[BatchSummary.model_validate(b) for b in items],
        total=total,
        limit=limit,
        offset=offset,
    )


# ── Detail ───────────────────────────────────────────────────

@router.get("/{batch_id}", response_model=BatchOut)
async def get_batch(batch_id: str, db: AsyncSession = Depends(get_db)):
    batch = await production.get_batch(batch_id, db)
    return BatchOut.model_validate(batch)


# ── Update ───────────────────────────────────────────────────

@router.patch("/{batch_id}", response_model=BatchOut)
async def update_batch(
    batch_id: str,
    body: BatchUpdate,
    db: AsyncSession = Depends(get_db),
):
    batch = await production.get_batch(batch_id, db)
    batch = await production.update_batch(batch, body, db)
    await invalidate_cache("analytics:*")
    return BatchOut.model_validate(batch)


# ── Delete ───────────────────────────────────────────────────

@router.delete("/{batch_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_batch(batch_id: str, db: AsyncSession = Depends(get_db)):
    batch = await production.get_batch(batch_id, db)
    await production.delete_batch(batch, db)
    await invalidate_cache("analytics:*")


# ── Workflow ─────────────────────────────────────────────────

@router.get("/{batch_id}/workflow", response_model=WorkflowOut)
async def get_workflow(batch_id: str, db: AsyncSession = Depends(get_db)):
    """Status, fields and edit-ability of all six stages for one batch."""
    batch = await production.get_batch(batch_id, db)
    return production.workflow_view(batch)


@router.patch("/{batch_id}/stages/{stage}", response_model=WorkflowOut)
async def edit_stage(
    batch_id: str,
    stage: str,
    body: StageEdit,
    db: AsyncSession = Depends(get_db),
):
    """Record details for the batch's current stage.

    Returns 409 when ``stage`` is not the current stage.  With
    ``"advance": true`` the batch moves on to the next stage afterwards.
    """
    batch = await production.get_batch(batch_id, db)
    batch = await production.edit_stage(batch, stage, body, db)
    await invalidate_cache("analytics:*")
    return production.workflow_view(batch)


@router.post("/{batch_id}/advance", response_model=WorkflowOut)
async def advance_batch(
    batch_id: str,
    body: AdvanceRequest | None = Body(None),
    db: AsyncSession = Depends(get_db),
):
    """Finish the current stage with standard values and move on."""
    batch = await production.get_batch(batch_id, db)
    operator = body.operator if body else None
    batch = await production.advance_batch(batch, db, operator=operator)
    await invalidate_cache("analytics:*")
    return production.workflow_view(batch)


# ── Approval ─────────────────────────────────────────────────

@router.post("/{batch_id}/approve", response_model=BatchOut)
async def approve_batch(
    batch_id: str,
    body: ApprovalDecision,
    db: AsyncSession = Depends(get_db),
):
    """Approve a pending batch.  422 if it was already approved or rejected."""
    batch = await production.get_batch(batch_id, db)
    batch = await production.approve_batch(batch, body, db)
    await invalidate_cache("analytics:*")
    return BatchOut.model_validate(batch)


@router.post("/{batch_id}/reject", response_model=BatchOut)
async def reject_batch(
    batch_id: str,
    body: ApprovalDecision,
    db: AsyncSession = Depends(get_db),
):
    batch = await production.get_batch(batch_id, db)
    batch = await production.reject_batch(batch, body, db)
    await invalidate_cache("analytics:*")
    return BatchOut.model_validate(batch)


# ── Contamination ────────────────────────────────────────────

@router.post(
    "/{batch_id}/contamination",
    response_model=ContaminationOut,
    status_code=status.HTTP_201_CREATED,
)
async def report_contamination(
    batch_id: str,
    body: ContaminationCreate,
    db: AsyncSession = Depends(get_db),
):
    batch = await production.get_batch(batch_id, db)
    log = await contamination.report_contamination(batch, body, db)
    await invalidate_cache("analytics:*")
    return ContaminationOut.model_validate(log)


@router.get("/{batch_id}/contamination", response_model=list[ContaminationOut])
async def list_contamination(batch_id: str, db: AsyncSession = Depends(get_db)):
    batch = await production.get_batch(batch_id, db)
    logs = await contamination.list_contamination(batch, db)
    return [ContaminationOut.model_validate(log) for log in logs]
