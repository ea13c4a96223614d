"""Workflow summary and the current-stage edit gate."""

import logging
from datetime import date

import pytest

from app.workflow.stages import COMPLETED_MARKER, StageStatus
from app.workflow.summary import StageNotEditableError, build_workflow_summary


def _batch(current_stage, **fields):
    return {
        "batch_number": "MB-20250301-001",
        "product_type": "Oyster Mushroom",
        "substrate_type": "Straw",
        "start_date": date(2025, 3, 1),
        "current_stage": current_stage,
        **fields,
    }


@pytest.mark.unit
class TestBuildWorkflowSummary:
    def test_six_stage_views_in_order(self):
        summary = build_workflow_summary(_batch("fruiting"))
        assert [v.stage.value for v in summary.stages] == [
            "batch_creation", "inoculation", "incubation",
            "fruiting", "harvesting", "post_harvest",
        ]
        assert [v.status for v in summary.stages] == [
            StageStatus.COMPLETED,
            StageStatus.COMPLETED,
            StageStatus.COMPLETED,
            StageStatus.CURRENT,
            StageStatus.PENDING,
            StageStatus.PENDING,
        ]
        assert summary.batch_number == "MB-20250301-001"
        assert summary.progress == pytest.approx(400 / 7)

    def test_only_current_stage_is_editable(self):
        summary = build_workflow_summary(_batch("fruiting"))
        editable = [v.stage.value for v in summary.stages if v.editable]
        assert editable == ["fruiting"]
        assert summary.editable_stage.edit_action.label == "Edit Fruiting"

    def test_edit_action_hands_stage_key_to_callback(self):
        received = []
        summary = build_workflow_summary(_batch("fruiting"), on_edit_stage=received.append)
        summary.editable_stage.edit_action.trigger()
        assert received == ["fruiting"]

    def test_edit_request_for_other_stage_is_rejected(self):
        received = []
        summary = build_workflow_summary(_batch("fruiting"), on_edit_stage=received.append)

        with pytest.raises(StageNotEditableError) as exc_info:
            summary.get("incubation").request_edit()
        assert exc_info.value.stage == "incubation"
        assert exc_info.value.status is StageStatus.COMPLETED

        with pytest.raises(StageNotEditableError):
            summary.get("harvesting").request_edit()
        assert received == []

    def test_completed_batch_has_nothing_to_edit(self):
        summary = build_workflow_summary(_batch(COMPLETED_MARKER))
        assert summary.editable_stage is None
        assert {v.status for v in summary.stages} == {StageStatus.COMPLETED}
        assert summary.progress == pytest.approx(100.0)

    def test_unknown_stage_is_all_pending(self):
        summary = build_workflow_summary(_batch("drying"))
        assert {v.status for v in summary.stages} == {StageStatus.PENDING}
        assert summary.editable_stage is None
        assert summary.progress == 0.0

    def test_missing_stage_starts_at_batch_creation(self):
        summary = build_workflow_summary(_batch(None))
        assert summary.current_stage == "batch_creation"
        assert summary.editable_stage.edit_action.label == "Edit Batch Created"

    def test_completed_stage_shows_placeholders_for_skipped_fields(self):
        summary = build_workflow_summary(_batch("fruiting"))
        inoculation = summary.get("inoculation")
        assert inoculation.status is StageStatus.COMPLETED
        assert [f.value for f in inoculation.fields] == [
            "Not started", "Not set", "Not set", "Not set",
        ]

    def test_fields_use_date_format(self):
        summary = build_workflow_summary(_batch("inoculation"), date_format="%d.%m.%Y")
        start = summary.get("batch_creation").fields[3]
        assert start.value == "01.03.2025"

    def test_current_stage_with_missing_date(self):
        summary = build_workflow_summary(_batch("inoculation"))
        inoculation = summary.get("inoculation")
        assert inoculation.status is StageStatus.CURRENT
        assert inoculation.fields[0].label == "Inoculation Date"
        assert inoculation.fields[0].value == "Not started"

    def test_repeated_builds_are_identical(self):
        batch = _batch("harvesting", harvested_weight_kg=3.2)
        assert build_workflow_summary(batch) == build_workflow_summary(batch)

    def test_unknown_stage_warns_once_per_summary(self, caplog):
        with caplog.at_level(logging.WARNING, logger="app.workflow.stages"):
            build_workflow_summary(_batch("drying"))
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert "drying" in warnings[0].getMessage()
