"""Pydantic schemas for production batch CRUD and stage edits."""

from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator, model_validator

from app.workflow.stages import (
    COMPLETED_MARKER,
    STAGE_KEYS,
    display_name,
    is_known_stage,
    stage_progress,
)


def _check_stage(value: str | None) -> str | None:
    if value is not None and not is_known_stage(value):
        allowed = ", ".join((*STAGE_KEYS, COMPLETED_MARKER))
        raise ValueError(f"Unknown stage '{value}'. Expected one of: {allowed}")
    return value


# ── Stage field groups ───────────────────────────────────────
# Every field optional so PATCH (partial save) works.

class InoculationData(BaseModel):
    inoculation_date: date | None = None
    spawn_quantity_grams: float | None = Field(None, ge=0)
    spawn_supplier: str | None = Field(None, max_length=100)
    spawn_added_by: str | None = Field(None, max_length=100)
    inoculation_notes: str | None = None


class IncubationData(BaseModel):
    incubation_start_date: date | None = None
    incubation_room_temp: float | None = Field(None, ge=-10, le=60)
    incubation_room_humidity: float | None = Field(None, ge=0, le=100)
    incubation_notes: str | None = None


class FruitingData(BaseModel):
    fruiting_start_date: date | None = None
    fruiting_room_temp: float | None = Field(None, ge=-10, le=60)
    fruiting_room_humidity: float | None = Field(None, ge=0, le=100)
    light_exposure: str | None = Field(None, max_length=100)
    fruiting_notes: str | None = None


class HarvestingData(BaseModel):
    harvest_date: date | None = None
    harvested_weight_kg: float | None = Field(None, ge=0)
    damaged_weight_kg: float | None = Field(None, ge=0)
    harvested_by: str | None = Field(None, max_length=100)
    harvest_notes: str | None = None


class PostHarvestData(BaseModel):
    post_harvest_date: date | None = None
    substrate_collected_kg: float | None = Field(None, ge=0)
    substrate_condition: str | None = Field(None, max_length=50)
    mycelium_reuse_status: bool | None = None
    post_harvest_notes: str | None = None


# ── Create ───────────────────────────────────────────────────

class BatchCreate(BaseModel):
    """Payload for POST /api/production-batches.

    ``batch_number`` is generated (MB-YYYYMMDD-NNN) when omitted.
    """
    batch_number: str | None = Field(None, min_length=1, max_length=50)
    product_type: str = Field(..., min_length=1, max_length=100)
    substrate_type: str = Field(..., min_length=1, max_length=100)
    start_date: date
    notes: str | None = None


# ── Update (partial) ─────────────────────────────────────────

class BatchUpdate(
    InoculationData, IncubationData, FruitingData, HarvestingData, PostHarvestData
):
    batch_number: str | None = Field(None, min_length=1, max_length=50)
    product_type: str | None = Field(None, min_length=1, max_length=100)
    substrate_type: str | None = Field(None, min_length=1, max_length=100)
    start_date: date | None = None
    current_stage: str | None = None
    notes: str | None = None

    @field_validator("current_stage")
    @classmethod
    def _known_stage(cls, v: str | None) -> str | None:
        return _check_stage(v)


# ── Stage edit ───────────────────────────────────────────────

class StageEdit(BatchUpdate):
    """Body for PATCH /api/production-batches/{id}/stages/{stage}.

    Only the fields owned by ``stage`` may be sent; set ``advance`` to move
    the batch to the next stage once the values are saved.
    """
    advance: bool = False


class AdvanceRequest(BaseModel):
    operator: str | None = Field(None, max_length=100)


class ApprovalDecision(BaseModel):
    """Body for the approve and reject endpoints."""
    reviewer: str = Field(..., min_length=1, max_length=100)
    notes: str | None = None


# ── Response ─────────────────────────────────────────────────

class BatchOut(BaseModel):
    id: str
    batch_number: str
    product_type: str
    substrate_type: str
    start_date: date
    current_stage: str

    inoculation_date: date | None
    spawn_quantity_grams: float | None
    spawn_supplier: str | None
    spawn_added_by: str | None
    inoculation_notes: str | None

    incubation_start_date: date | None
    incubation_room_temp: float | None
    incubation_room_humidity: float | None
    incubation_notes: str | None

    fruiting_start_date: date | None
    fruiting_room_temp: float | None
    fruiting_room_humidity: float | None
    light_exposure: str | None
    fruiting_notes: str | None

    harvest_date: date | None
    harvested_weight_kg: float | None
    damaged_weight_kg: float | None
    harvested_by: str | None
    harvest_notes: str | None

    post_harvest_date: date | None
    substrate_collected_kg: float | None
    substrate_condition: str | None
    mycelium_reuse_status: bool | None
    post_harvest_notes: str | None

    approval_status: str
    approved_by: str | None
    approved_at: datetime | None
    approval_notes: str | None

    notes: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


# ── List (lightweight) ───────────────────────────────────────

class BatchSummary(BaseModel):
    id: str
    batch_number: str
    product_type: str
    substrate_type: str
    start_date: date
    current_stage: str
    stage_name: str | None = None
    progress: float = 0.0
    approval_status: str
    created_at: datetime

    model_config = {"from_attributes": True}

    @model_validator(mode="after")
    def _derive_stage(self):
        self.stage_name = display_name(self.current_stage)
        self.progress = round(stage_progress(self.current_stage), 1)
        return self
