"""Per-stage display fields.

``STAGE_FIELDS`` is a static table: for each stage, the ordered list of batch
attributes to show, how to render them, and the placeholder used when the
value is missing.  Adding a field or a stage is a table edit.

Placeholders are stage-specific on purpose ("Not started" for a stage date,
"Not recorded" for a measured weight, "Not assessed" for a judgement call).
A value is missing when it is ``None`` or an empty string; numeric zero is a
real measurement and is rendered.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from app.workflow.stages import Stage

DEFAULT_DATE_FORMAT = "%m/%d/%Y"


# ── Renderers ────────────────────────────────────────────────

def render_text(value: Any, date_format: str) -> str:
    return str(value)


def render_date(value: Any, date_format: str) -> str:
    if isinstance(value, str):
        try:
            value = date.fromisoformat(value[:10])
        except ValueError:
            return value
    if isinstance(value, datetime):
        value = value.date()
    return value.strftime(date_format)


def render_yes_no(value: Any, date_format: str) -> str:
    return "Yes" if value else "No"


def with_unit(unit: str) -> Callable[[Any, str], str]:
    """Renderer that appends ``unit`` to a number (``500g``, ``2.5kg``)."""

    def render(value: Any, date_format: str) -> str:
        number = float(value)
        if number.is_integer():
            return f"{int(number)}{unit}"
        return f"{number}{unit}"

    return render


# ── Field table ──────────────────────────────────────────────

@dataclass(frozen=True)
class FieldSpec:
    label: str
    attribute: str
    render: Callable[[Any, str], str]
    placeholder: str


@dataclass(frozen=True)
class StageField:
    label: str
    value: str
    attribute: str
    is_set: bool


STAGE_FIELDS: dict[Stage, tuple[FieldSpec, ...]] = {
    Stage.BATCH_CREATION: (
        FieldSpec("Batch Number", "batch_number", render_text, "N/A"),
        FieldSpec("Product Type", "product_type", render_text, "N/A"),
        FieldSpec("Substrate Type", "substrate_type", render_text, "N/A"),
        FieldSpec("Start Date", "start_date", render_date, "N/A"),
    ),
    Stage.INOCULATION: (
        FieldSpec("Inoculation Date", "inoculation_date", render_date, "Not started"),
        FieldSpec("Spawn Quantity", "spawn_quantity_grams", with_unit("g"), "Not set"),
        FieldSpec("Spawn Supplier", "spawn_supplier", render_text, "Not set"),
        FieldSpec("Added By", "spawn_added_by", render_text, "Not set"),
    ),
    Stage.INCUBATION: (
        FieldSpec("Start Date", "incubation_start_date", render_date, "Not started"),
        FieldSpec("Temperature", "incubation_room_temp", with_unit("°C"), "Not set"),
        FieldSpec("Humidity", "incubation_room_humidity", with_unit("%"), "Not set"),
    ),
    Stage.FRUITING: (
        FieldSpec("Start Date", "fruiting_start_date", render_date, "Not started"),
        FieldSpec("Temperature", "fruiting_room_temp", with_unit("°C"), "Not set"),
        FieldSpec("Humidity", "fruiting_room_humidity", with_unit("%"), "Not set"),
        FieldSpec("Light Exposure", "light_exposure", render_text, "Not set"),
    ),
    Stage.HARVESTING: (
        FieldSpec("Harvest Date", "harvest_date", render_date, "Not harvested"),
        FieldSpec("Harvested Weight", "harvested_weight_kg", with_unit("kg"), "Not recorded"),
        FieldSpec("Damaged Weight", "damaged_weight_kg", with_unit("kg"), "Not recorded"),
        FieldSpec("Harvested By", "harvested_by", render_text, "Not set"),
    ),
    Stage.POST_HARVEST: (
        FieldSpec("Date", "post_harvest_date", render_date, "Not completed"),
        FieldSpec("Substrate Collected", "substrate_collected_kg", with_unit("kg"), "Not recorded"),
        FieldSpec("Substrate Condition", "substrate_condition", render_text, "Not assessed"),
        FieldSpec("Mycelium Reusable", "mycelium_reuse_status", render_yes_no, "No"),
    ),
}

# Attributes each stage owns, plus the stage's free-text notes column.
# Used to restrict stage edits to the stage being edited.
STAGE_ATTRIBUTES: dict[Stage, frozenset[str]] = {
    Stage.BATCH_CREATION: frozenset({"product_type", "substrate_type", "start_date", "notes"}),
    Stage.INOCULATION: frozenset(
        {f.attribute for f in STAGE_FIELDS[Stage.INOCULATION]} | {"inoculation_notes"}
    ),
    Stage.INCUBATION: frozenset(
        {f.attribute for f in STAGE_FIELDS[Stage.INCUBATION]} | {"incubation_notes"}
    ),
    Stage.FRUITING: frozenset(
        {f.attribute for f in STAGE_FIELDS[Stage.FRUITING]} | {"fruiting_notes"}
    ),
    Stage.HARVESTING: frozenset(
        {f.attribute for f in STAGE_FIELDS[Stage.HARVESTING]} | {"harvest_notes"}
    ),
    Stage.POST_HARVEST: frozenset(
        {f.attribute for f in STAGE_FIELDS[Stage.POST_HARVEST]} | {"post_harvest_notes"}
    ),
}


def read_attribute(batch: Any, attribute: str) -> Any:
    """Read ``attribute`` from an ORM object, Pydantic model or mapping."""
    if isinstance(batch, Mapping):
        return batch.get(attribute)
    return getattr(batch, attribute, None)


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def project_stage_fields(
    batch: Any,
    stage: Stage | str,
    date_format: str = DEFAULT_DATE_FORMAT,
) -> list[StageField]:
    """Render the display fields of ``stage`` for ``batch``, in table order."""
    fields = []
    for field_def in STAGE_FIELDS[Stage(stage)]:
        raw = read_attribute(batch, field_def.attribute)
        if _is_missing(raw):
            fields.append(StageField(field_def.label, field_def.placeholder, field_def.attribute, False))
        else:
            fields.append(StageField(field_def.label, field_def.render(raw, date_format), field_def.attribute, True))
    return fields
