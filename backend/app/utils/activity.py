"""Lightweight helper for recording activity log entries.

Usage:
    await log_activity(
        db, action="stage_changed", entity_type="production_batch",
        entity_id=batch.id, entity_code=batch.batch_number,
        summary="MB-20250301-001 moved to Fruiting",
        details={"from": "incubation", "to": "fruiting"},
    )

The row is added to the current session and committed with the
enclosing transaction — no extra flush is performed.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.activity_log import ActivityLog


async def log_activity(
    db: AsyncSession,
    *,
    action: str,
    entity_type: str,
    entity_id: str | None = None,
    entity_code: str | None = None,
    summary: str | None = None,
    details: dict | None = None,
    actor: str | None = None,
) -> None:
    """Append an activity log entry to the current DB session."""
    entry = ActivityLog(
        actor=actor,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        entity_code=entity_code,
        summary=summary,
        details=details,
    )
    db.add(entry)
