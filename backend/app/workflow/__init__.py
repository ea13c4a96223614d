"""Production batch workflow: stage order, status derivation, display fields.

Pure functions over batch records.  No database or HTTP imports here.
"""

from app.workflow.fields import STAGE_FIELDS, StageField, project_stage_fields
from app.workflow.progression import next_stage, next_stage_action, quick_progress_defaults
from app.workflow.stages import (
    COMPLETED_MARKER,
    STAGE_ORDER,
    Stage,
    StageStatus,
    derive_stage_status,
    stage_progress,
)
from app.workflow.summary import (
    StageNotEditableError,
    StageSummary,
    WorkflowSummary,
    build_workflow_summary,
)

__all__ = [
    "COMPLETED_MARKER", "STAGE_ORDER", "Stage", "StageStatus",
    "derive_stage_status", "stage_progress",
    "STAGE_FIELDS", "StageField", "project_stage_fields",
    "next_stage", "next_stage_action", "quick_progress_defaults",
    "StageNotEditableError", "StageSummary", "WorkflowSummary", "build_workflow_summary",
]
