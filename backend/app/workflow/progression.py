"""Quick progression — advancing a batch one stage with standard values.

The production floor can push a batch forward without filling in the stage
form; the values below are what gets recorded in that case.  Each entry is
keyed by the stage being finished (the batch's current stage) and includes
the new ``current_stage``.  Values already recorded through a stage edit are
kept; see ``app.services.production.advance_batch``.
"""

from __future__ import annotations

from datetime import date

from app.workflow.stages import COMPLETED_MARKER, STAGE_ORDER, Stage, stage_position

_NEXT_ACTION = {
    Stage.BATCH_CREATION.value: "Start Inoculation",
    Stage.INOCULATION.value: "Begin Incubation",
    Stage.INCUBATION.value: "Start Fruiting",
    Stage.FRUITING.value: "Record Harvest",
    Stage.HARVESTING.value: "Complete Post-Harvest",
    Stage.POST_HARVEST.value: "Mark Complete",
}


def next_stage(current_stage: Stage | str) -> str:
    """Stage key after ``current_stage``; the terminal marker after post-harvest.

    Unknown values and the terminal marker itself also map to the marker.
    """
    position = stage_position(current_stage)
    if 0 <= position < len(STAGE_ORDER) - 1:
        return STAGE_ORDER[position + 1].value
    return COMPLETED_MARKER


def next_stage_action(current_stage: Stage | str) -> str:
    key = current_stage.value if isinstance(current_stage, Stage) else current_stage
    return _NEXT_ACTION.get(key, "Complete")


def quick_progress_defaults(
    stage: Stage | str,
    operator: str | None = None,
    today: date | None = None,
) -> dict:
    today = today or date.today()
    key = stage.value if isinstance(stage, Stage) else stage

    if key == Stage.BATCH_CREATION.value:
        return {"current_stage": Stage.INOCULATION.value}
    if key == Stage.INOCULATION.value:
        return {
            "inoculation_date": today,
            "spawn_added_by": operator or "",
            "spawn_quantity_grams": 500.0,
            "spawn_supplier": "Local Supplier",
            "current_stage": Stage.INCUBATION.value,
        }
    if key == Stage.INCUBATION.value:
        return {
            "incubation_start_date": today,
            "incubation_room_temp": 25.0,
            "incubation_room_humidity": 85.0,
            "current_stage": Stage.FRUITING.value,
        }
    if key == Stage.FRUITING.value:
        return {
            "fruiting_start_date": today,
            "fruiting_room_temp": 18.0,
            "fruiting_room_humidity": 90.0,
            "light_exposure": "LED 12 hours/day",
            "current_stage": Stage.HARVESTING.value,
        }
    if key == Stage.HARVESTING.value:
        return {
            "harvest_date": today,
            "harvested_weight_kg": 2.5,
            "damaged_weight_kg": 0.1,
            "harvested_by": operator or "",
            "current_stage": Stage.POST_HARVEST.value,
        }
    if key == Stage.POST_HARVEST.value:
        return {
            "post_harvest_date": today,
            "substrate_collected_kg": 1.8,
            "substrate_condition": "good",
            "mycelium_reuse_status": True,
            "current_stage": COMPLETED_MARKER,
        }
    return {}
