"""Production analytics aggregation."""

from datetime import date

import pytest

from app.services.analytics import monthly_yield, production_summary


@pytest.mark.unit
class TestProductionSummary:
    def test_empty(self):
        summary = production_summary([])
        assert summary.total_batches == 0
        assert summary.damage_rate_pct == 0.0
        assert summary.average_progress == 0.0

    def test_stage_counts_and_yield(self):
        batches = [
            {"current_stage": "fruiting"},
            {"current_stage": "fruiting"},
            {"current_stage": "completed", "harvested_weight_kg": 2.5, "damaged_weight_kg": 0.1},
            {"current_stage": "drying"},
        ]
        summary = production_summary(batches)
        assert summary.total_batches == 4
        assert summary.active_batches == 2
        assert summary.completed_batches == 1
        assert summary.stage_counts["fruiting"] == 2
        assert summary.stage_counts["unknown"] == 1
        assert summary.stage_counts["inoculation"] == 0
        assert summary.total_harvested_kg == 2.5
        assert summary.total_damaged_kg == 0.1
        assert summary.damage_rate_pct == pytest.approx(3.85)

    def test_average_progress(self):
        summary = production_summary(
            [{"current_stage": "completed"}, {"current_stage": "drying"}]
        )
        assert summary.average_progress == 50.0


@pytest.mark.unit
class TestMonthlyYield:
    def test_groups_by_harvest_month(self):
        batches = [
            {"harvest_date": date(2025, 4, 2), "harvested_weight_kg": 2.5, "damaged_weight_kg": 0.1},
            {"harvest_date": "2025-04-20", "harvested_weight_kg": 3.0},
            {"harvest_date": date(2025, 3, 30), "harvested_weight_kg": 1.0},
            {"harvest_date": None, "harvested_weight_kg": 9.0},
            {"harvest_date": date(2025, 5, 1), "harvested_weight_kg": None},
        ]
        rows = monthly_yield(batches)
        assert [r.month for r in rows] == ["2025-03", "2025-04"]
        april = rows[1]
        assert april.harvested_kg == 5.5
        assert april.damaged_kg == 0.1
        assert april.batch_count == 2


@pytest.mark.unit
class TestContaminationAndApprovalTotals:
    def test_contamination_rate(self):
        batches = [{"id": "a"}, {"id": "b"}, {"id": "c"}, {"id": "d"}]
        logs = [
            {"batch_id": "a", "contaminated_bags": 3},
            {"batch_id": "a", "contaminated_bags": 1},
            {"batch_id": "c", "contaminated_bags": 2},
            {"batch_id": "deleted", "contaminated_bags": 9},
        ]
        summary = production_summary(batches, logs)
        assert summary.contaminated_batches == 2
        assert summary.contaminated_bags == 6
        assert summary.contamination_rate_pct == 50.0

    def test_no_reports(self):
        summary = production_summary([{"id": "a"}])
        assert summary.contaminated_batches == 0
        assert summary.contamination_rate_pct == 0.0

    def test_approval_counts(self):
        batches = [
            {"approval_status": "approved"},
            {"approval_status": "rejected"},
            {"approval_status": None},
            {},
        ]
        assert production_summary(batches).approval_counts == {
            "pending": 2,
            "approved": 1,
            "rejected": 1,
        }
