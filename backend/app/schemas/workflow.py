"""Response schemas for the workflow summary endpoint."""

from pydantic import BaseModel

from app.workflow.summary import WorkflowSummary


class StageFieldOut(BaseModel):
    label: str
    value: str
    is_set: bool


class StageSummaryOut(BaseModel):
    stage: str
    name: str
    status: str
    fields: list[StageFieldOut]
    editable: bool
    edit_label: str | None = None


class WorkflowOut(BaseModel):
    batch_id: str
    batch_number: str | None
    current_stage: str
    current_stage_name: str
    progress: float
    next_stage: str | None
    next_action: str | None
    is_complete: bool
    stages: list[StageSummaryOut]

    @classmethod
    def from_summary(
        cls,
        batch_id: str,
        summary: WorkflowSummary,
        *,
        current_stage_name: str,
        next_stage: str | None,
        next_action: str | None,
        is_complete: bool,
    ) -> "WorkflowOut":
        return cls(
            batch_id=batch_id,
            batch_number=summary.batch_number,
            current_stage=summary.current_stage,
            current_stage_name=current_stage_name,
            progress=round(summary.progress, 1),
            next_stage=next_stage,
            next_action=next_action,
            is_complete=is_complete,
            stages=[
                StageSummaryOut(
                    stage=view.stage.value,
                    name=view.name,
                    status=view.status.value,
                    fields=[
                        StageFieldOut(label=f.label, value=f.value, is_set=f.is_set)
                        for f in view.fields
                    ],
                    editable=view.editable,
                    edit_label=view.edit_action.label if view.edit_action else None,
                )
                for view in summary.stages
            ],
        )
