"""Stage order, status derivation and progress."""

import logging

import pytest

from app.workflow.stages import (
    COMPLETED_MARKER,
    STAGE_KEYS,
    STAGE_ORDER,
    Stage,
    StageStatus,
    derive_stage_status,
    display_name,
    normalize_stage,
    stage_position,
    stage_progress,
    stage_statuses,
)


@pytest.mark.unit
class TestStageOrder:
    def test_six_stages_in_fixed_order(self):
        assert STAGE_KEYS == (
            "batch_creation",
            "inoculation",
            "incubation",
            "fruiting",
            "harvesting",
            "post_harvest",
        )
        assert [s.ordinal for s in STAGE_ORDER] == [0, 1, 2, 3, 4, 5]

    def test_display_names(self):
        assert [s.display_name for s in STAGE_ORDER] == [
            "Batch Created",
            "Inoculation",
            "Incubation",
            "Fruiting",
            "Harvesting",
            "Post-Harvest",
        ]
        assert display_name(COMPLETED_MARKER) == "Complete"
        assert display_name("legacy") == "legacy"

    def test_stage_is_a_string(self):
        assert Stage.FRUITING == "fruiting"
        assert Stage("harvesting") is Stage.HARVESTING

    def test_positions(self):
        assert stage_position("batch_creation") == 0
        assert stage_position(Stage.POST_HARVEST) == 5
        assert stage_position(COMPLETED_MARKER) == 6
        assert stage_position("drying") == -1
        assert stage_position(None) == -1

    def test_missing_stage_defaults_to_batch_creation(self):
        assert normalize_stage(None) == "batch_creation"
        assert normalize_stage("") == "batch_creation"
        assert normalize_stage("fruiting") == "fruiting"


@pytest.mark.unit
class TestDeriveStageStatus:
    @pytest.mark.parametrize("current", STAGE_KEYS)
    def test_exactly_one_current_stage(self, current):
        statuses = stage_statuses(current)
        current_stages = [s for s, status in statuses.items() if status is StageStatus.CURRENT]
        assert current_stages == [Stage(current)]

    @pytest.mark.parametrize("current", STAGE_KEYS)
    def test_statuses_are_monotonic(self, current):
        """completed* current pending* along the fixed order."""
        statuses = list(stage_statuses(current).values())
        position = STAGE_KEYS.index(current)
        assert statuses[:position] == [StageStatus.COMPLETED] * position
        assert statuses[position] is StageStatus.CURRENT
        assert statuses[position + 1:] == [StageStatus.PENDING] * (5 - position)

    def test_fruiting_example(self):
        assert derive_stage_status("fruiting", "incubation") is StageStatus.COMPLETED
        assert derive_stage_status("fruiting", "fruiting") is StageStatus.CURRENT
        assert derive_stage_status("fruiting", "harvesting") is StageStatus.PENDING

    def test_new_batch(self):
        statuses = stage_statuses(None)
        assert statuses[Stage.BATCH_CREATION] is StageStatus.CURRENT
        assert all(
            statuses[s] is StageStatus.PENDING for s in STAGE_ORDER[1:]
        )

    def test_completed_batch_has_every_stage_completed(self):
        statuses = stage_statuses(COMPLETED_MARKER)
        assert set(statuses.values()) == {StageStatus.COMPLETED}

    def test_unknown_current_stage_is_all_pending_and_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="app.workflow.stages"):
            statuses = stage_statuses("drying")
        assert set(statuses.values()) == {StageStatus.PENDING}
        assert "drying" in caplog.text
        assert len([r for r in caplog.records if "drying" in r.getMessage()]) == 1

    def test_single_stage_lookup_does_not_log(self, caplog):
        with caplog.at_level(logging.WARNING, logger="app.workflow.stages"):
            assert derive_stage_status("drying", "fruiting") is StageStatus.PENDING
        assert caplog.records == []

    def test_unknown_target_stage_is_pending(self):
        assert derive_stage_status("fruiting", "drying") is StageStatus.PENDING


@pytest.mark.unit
class TestStageProgress:
    @pytest.mark.parametrize(
        "current, expected",
        [
            ("batch_creation", 100 / 7),
            ("inoculation", 200 / 7),
            ("fruiting", 400 / 7),
            ("post_harvest", 600 / 7),
            (COMPLETED_MARKER, 100.0),
        ],
    )
    def test_progress(self, current, expected):
        assert stage_progress(current) == pytest.approx(expected)

    def test_unknown_stage_progress_is_zero(self):
        assert stage_progress("drying") == 0.0

    def test_progress_increases_along_the_order(self):
        values = [stage_progress(k) for k in (*STAGE_KEYS, COMPLETED_MARKER)]
        assert values == sorted(values)
        assert len(set(values)) == len(values)
