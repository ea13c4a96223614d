"""Schemas for production analytics."""

from pydantic import BaseModel


class ProductionSummaryOut(BaseModel):
    total_batches: int
    active_batches: int
    completed_batches: int
    # stage key (plus "completed" and "unknown") → count
    stage_counts: dict[str, int]
    total_harvested_kg: float
    total_damaged_kg: float
    # damaged / (harvested + damaged) × 100
    damage_rate_pct: float
    average_progress: float
    # batches with at least one contamination report
    contaminated_batches: int = 0
    contaminated_bags: int = 0
    # contaminated_batches / total_batches × 100
    contamination_rate_pct: float = 0.0
    # pending | approved | rejected → count
    approval_counts: dict[str, int] = {}


class MonthlyYieldOut(BaseModel):
    month: str  # YYYY-MM
    harvested_kg: float
    damaged_kg: float
    batch_count: int
