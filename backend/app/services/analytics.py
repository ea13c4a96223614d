"""Production analytics — yield and stage aggregation over batch records.

Pure functions: callers fetch the batches and contamination reports, these
only aggregate.  Both may be ORM rows or mappings.
"""

from collections import defaultdict
from collections.abc import Iterable
from datetime import date, datetime
from typing import Any

from app.models.production_batch import APPROVAL_PENDING, APPROVAL_STATUSES
from app.schemas.analytics import MonthlyYieldOut, ProductionSummaryOut
from app.workflow.fields import read_attribute
from app.workflow.stages import (
    COMPLETED_MARKER,
    STAGE_KEYS,
    is_known_stage,
    normalize_stage,
    stage_progress,
)

UNKNOWN_BUCKET = "unknown"


def _kg(value: Any) -> float:
    return float(value) if value is not None else 0.0


def production_summary(
    batches: Iterable[Any],
    contamination_logs: Iterable[Any] = (),
) -> ProductionSummaryOut:
    """Farm-wide totals.  Contamination reports for batches outside
    ``batches`` (e.g. soft-deleted ones) are ignored.
    """
    stage_counts = {key: 0 for key in (*STAGE_KEYS, COMPLETED_MARKER, UNKNOWN_BUCKET)}
    approval_counts = {status: 0 for status in APPROVAL_STATUSES}
    harvested = damaged = progress_total = 0.0
    total = 0
    batch_ids = set()

    for batch in batches:
        total += 1
        batch_ids.add(read_attribute(batch, "id"))
        approval = read_attribute(batch, "approval_status") or APPROVAL_PENDING
        approval_counts[approval] = approval_counts.get(approval, 0) + 1
        stage = normalize_stage(read_attribute(batch, "current_stage"))
        stage_counts[stage if is_known_stage(stage) else UNKNOWN_BUCKET] += 1
        harvested += _kg(read_attribute(batch, "harvested_weight_kg"))
        damaged += _kg(read_attribute(batch, "damaged_weight_kg"))
        progress_total += stage_progress(stage)

    contaminated_ids = set()
    contaminated_bags = 0
    for log in contamination_logs:
        batch_id = read_attribute(log, "batch_id")
        if batch_id not in batch_ids:
            continue
        contaminated_ids.add(batch_id)
        contaminated_bags += int(read_attribute(log, "contaminated_bags") or 0)

    gross = harvested + damaged
    return ProductionSummaryOut(
        total_batches=total,
        active_batches=sum(stage_counts[key] for key in STAGE_KEYS),
        completed_batches=stage_counts[COMPLETED_MARKER],
        stage_counts=stage_counts,
        total_harvested_kg=round(harvested, 3),
        total_damaged_kg=round(damaged, 3),
        damage_rate_pct=round(damaged / gross * 100, 2) if gross else 0.0,
        average_progress=round(progress_total / total, 1) if total else 0.0,
        contaminated_batches=len(contaminated_ids),
        contaminated_bags=contaminated_bags,
        contamination_rate_pct=round(len(contaminated_ids) / total * 100, 2) if total else 0.0,
        approval_counts=approval_counts,
    )


def monthly_yield(batches: Iterable[Any]) -> list[MonthlyYieldOut]:
    """Harvested kg per ``YYYY-MM`` of harvest date, oldest month first.

    Batches without a harvest date or harvested weight are skipped.
    """
    buckets: dict[str, dict[str, float]] = defaultdict(
        lambda: {"harvested_kg": 0.0, "damaged_kg": 0.0, "batch_count": 0}
    )
    for batch in batches:
        harvest_date = read_attribute(batch, "harvest_date")
        weight = read_attribute(batch, "harvested_weight_kg")
        if harvest_date is None or weight is None:
            continue
        if isinstance(harvest_date, str):
            harvest_date = date.fromisoformat(harvest_date[:10])
        if isinstance(harvest_date, datetime):
            harvest_date = harvest_date.date()

        bucket = buckets[harvest_date.strftime("%Y-%m")]
        bucket["harvested_kg"] += _kg(weight)
        bucket["damaged_kg"] += _kg(read_attribute(batch, "damaged_weight_kg"))
        bucket["batch_count"] += 1

    return [
        MonthlyYieldOut(
            month=month,
            harvested_kg=round(values["harvested_kg"], 3),
            damaged_kg=round(values["damaged_kg"], 3),
            batch_count=int(values["batch_count"]),
        )
        for month, values in sorted(buckets.items())
    ]
