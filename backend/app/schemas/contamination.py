"""Pydantic schemas for contamination reports."""

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field

Severity = Literal["Low", "Medium", "High"]


class ContaminationCreate(BaseModel):
    """Body for POST /api/production-batches/{id}/contamination.

    ``reported_date`` defaults to today.
    """
    reported_date: date | None = None
    contamination_type: str = Field(..., min_length=1, max_length=100)
    contaminated_bags: int = Field(..., ge=1)
    severity: Severity
    corrective_action: str = Field(..., min_length=1)
    worker_notes: str | None = None
    reported_by: str | None = Field(None, max_length=100)


class ContaminationOut(BaseModel):
    id: str
    batch_id: str
    reported_date: date
    contamination_type: str
    contaminated_bags: int
    severity: str
    corrective_action: str
    worker_notes: str | None
    reported_by: str | None
    created_at: datetime

    model_config = {"from_attributes": True}
