"""Workflow summary — the six stage views shown for one batch.

``build_workflow_summary`` derives, for each stage in order, its status and
its rendered fields.  Only the stage whose status is ``current`` carries an
edit action; triggering it hands the stage key to the caller's
``on_edit_stage`` callback.  Nothing here mutates the batch: advancing
``current_stage`` is the service layer's job.

Usage:
    summary = build_workflow_summary(batch, on_edit_stage=open_stage_form)
    for view in summary.stages:
        print(view.name, view.status.value)
    summary.editable_stage.edit_action.trigger()   # → open_stage_form("fruiting")
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from app.workflow.fields import DEFAULT_DATE_FORMAT, StageField, project_stage_fields, read_attribute
from app.workflow.stages import (
    STAGE_ORDER,
    Stage,
    StageStatus,
    derive_stage_status,
    normalize_stage,
    stage_progress,
    warn_if_unknown,
)

EditCallback = Callable[[str], Any]


class StageNotEditableError(Exception):
    """Raised when an edit is requested for a stage that is not current."""

    def __init__(self, stage: str, status: StageStatus | None = None):
        self.stage = stage
        self.status = status
        detail = f" (status: {status.value})" if status else ""
        super().__init__(f"Stage '{stage}' is not the current stage and cannot be edited{detail}")


@dataclass(frozen=True)
class EditAction:
    stage: str
    label: str
    callback: EditCallback | None = None

    def trigger(self) -> Any:
        if self.callback is None:
            return None
        return self.callback(self.stage)


@dataclass(frozen=True)
class StageSummary:
    stage: Stage
    name: str
    status: StageStatus
    fields: tuple[StageField, ...]
    edit_action: EditAction | None = None

    @property
    def editable(self) -> bool:
        return self.edit_action is not None

    def request_edit(self) -> Any:
        if self.edit_action is None:
            raise StageNotEditableError(self.stage.value, self.status)
        return self.edit_action.trigger()


@dataclass(frozen=True)
class WorkflowSummary:
    batch_number: str | None
    current_stage: str
    progress: float
    stages: tuple[StageSummary, ...]

    @property
    def editable_stage(self) -> StageSummary | None:
        for view in self.stages:
            if view.editable:
                return view
        return None

    def get(self, stage: Stage | str) -> StageSummary:
        return self.stages[Stage(stage).ordinal]


def build_workflow_summary(
    batch: Any,
    on_edit_stage: EditCallback | None = None,
    date_format: str = DEFAULT_DATE_FORMAT,
) -> WorkflowSummary:
    current = normalize_stage(read_attribute(batch, "current_stage"))
    warn_if_unknown(current)

    views = []
    for stage in STAGE_ORDER:
        status = derive_stage_status(current, stage)
        action = None
        if status is StageStatus.CURRENT:
            action = EditAction(stage.value, f"Edit {stage.display_name}", on_edit_stage)
        views.append(
            StageSummary(
                stage=stage,
                name=stage.display_name,
                status=status,
                fields=tuple(project_stage_fields(batch, stage, date_format)),
                edit_action=action,
            )
        )

    return WorkflowSummary(
        batch_number=read_attribute(batch, "batch_number"),
        current_stage=current,
        progress=stage_progress(current),
        stages=tuple(views),
    )
