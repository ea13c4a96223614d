"""Contamination reporting for production batches.

A report never moves the batch through its stages; it is recorded, written
to the activity trail as ``contamination_reported``, and counted by the
production analytics.
"""

import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.contamination_log import ContaminationLog
from app.models.production_batch import ProductionBatch
from app.schemas.contamination import ContaminationCreate
from app.services.production import ENTITY_TYPE
from app.utils.activity import log_activity

logger = logging.getLogger(__name__)


async def report_contamination(
    batch: ProductionBatch,
    body: ContaminationCreate,
    db: AsyncSession,
    today: date | None = None,
) -> ContaminationLog:
    log = ContaminationLog(
        batch_id=batch.id,
        reported_date=body.reported_date or today or date.today(),
        contamination_type=body.contamination_type,
        contaminated_bags=body.contaminated_bags,
        severity=body.severity,
        corrective_action=body.corrective_action,
        worker_notes=body.worker_notes,
        reported_by=body.reported_by,
    )
    db.add(log)
    await db.flush()

    await log_activity(
        db,
        action="contamination_reported",
        entity_type=ENTITY_TYPE,
        entity_id=batch.id,
        entity_code=batch.batch_number,
        summary=(
            f"Contamination reported for {batch.batch_number}: "
            f"{log.contamination_type} ({log.severity} severity, {log.contaminated_bags} bags)"
        ),
        details={
            "contamination_log_id": log.id,
            "severity": log.severity,
            "contaminated_bags": log.contaminated_bags,
        },
        actor=body.reported_by,
    )
    logger.warning(
        "Contamination on batch %s: %s, %s severity, %d bags",
        batch.batch_number, log.contamination_type, log.severity, log.contaminated_bags,
    )
    return log


async def list_contamination(batch: ProductionBatch, db: AsyncSession) -> list[ContaminationLog]:
    """Reports for one batch, most recent first."""
    result = await db.execute(
        select(ContaminationLog)
        .where(ContaminationLog.batch_id == batch.id)
        .order_by(ContaminationLog.reported_date.desc(), ContaminationLog.created_at.desc())
    )
    return list(result.scalars().all())


async def all_contamination(db: AsyncSession) -> list[ContaminationLog]:
    result = await db.execute(select(ContaminationLog))
    return list(result.scalars().all())
