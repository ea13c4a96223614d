"""Production stage order and status derivation.

A batch moves through six fixed stages:

    batch_creation → inoculation → incubation → fruiting → harvesting → post_harvest

Only the current pointer is stored on the batch (``current_stage``).  Stage
status is derived from position alone, so every stage before the pointer is
``completed`` whether or not its fields were ever filled in.

Once post-harvest is finished the pointer is set to the terminal marker
``"completed"``, which sits after the last stage.  This is the seven-step
order of the production workflow page (six stages, then ``completed``), so a
finished batch reports every stage as ``completed`` rather than ``pending``.
"""

from __future__ import annotations

import enum
import logging

logger = logging.getLogger(__name__)


class Stage(str, enum.Enum):
    """The six production stages, each with an explicit ordinal."""

    def __new__(cls, key: str, ordinal: int, display_name: str):
        obj = str.__new__(cls, key)
        obj._value_ = key
        obj.ordinal = ordinal
        obj.display_name = display_name
        return obj

    BATCH_CREATION = ("batch_creation", 0, "Batch Created")
    INOCULATION = ("inoculation", 1, "Inoculation")
    INCUBATION = ("incubation", 2, "Incubation")
    FRUITING = ("fruiting", 3, "Fruiting")
    HARVESTING = ("harvesting", 4, "Harvesting")
    POST_HARVEST = ("post_harvest", 5, "Post-Harvest")


class StageStatus(str, enum.Enum):
    COMPLETED = "completed"
    CURRENT = "current"
    PENDING = "pending"


STAGE_ORDER: tuple[Stage, ...] = tuple(sorted(Stage, key=lambda s: s.ordinal))
STAGE_KEYS: tuple[str, ...] = tuple(s.value for s in STAGE_ORDER)

DEFAULT_STAGE = Stage.BATCH_CREATION.value

# Written to current_stage once post-harvest is done.  Not a stage.
COMPLETED_MARKER = "completed"
COMPLETED_DISPLAY_NAME = "Complete"

# Progress counts the terminal marker as a seventh step.
_PROGRESS_STEPS = len(STAGE_ORDER) + 1

_POSITIONS: dict[str, int] = {s.value: s.ordinal for s in STAGE_ORDER}
_POSITIONS[COMPLETED_MARKER] = len(STAGE_ORDER)


def _key(value: Stage | str | None) -> str | None:
    if isinstance(value, Stage):
        return value.value
    return value


def normalize_stage(value: Stage | str | None) -> str:
    """Return the stored stage key, defaulting to ``batch_creation``."""
    key = _key(value)
    return key if key else DEFAULT_STAGE


def stage_position(value: Stage | str | None) -> int:
    """Position in the fixed order; -1 for anything unrecognised."""
    return _POSITIONS.get(_key(value), -1)


def is_known_stage(value: Stage | str | None) -> bool:
    """True for the six stage keys and the terminal marker."""
    return _key(value) in _POSITIONS


def is_completed(value: Stage | str | None) -> bool:
    return _key(value) == COMPLETED_MARKER


def display_name(value: Stage | str | None) -> str:
    key = _key(value)
    if key == COMPLETED_MARKER:
        return COMPLETED_DISPLAY_NAME
    try:
        return Stage(key).display_name
    except ValueError:
        return key or ""


def warn_if_unknown(current_stage: Stage | str | None) -> bool:
    """Log a warning for an unrecognised stage pointer; True when logged."""
    key = normalize_stage(current_stage)
    if is_known_stage(key):
        return False
    logger.warning("Unrecognised current_stage %r; treating all stages as pending", key)
    return True


def derive_stage_status(current_stage: Stage | str | None, stage: Stage | str) -> StageStatus:
    """Status of ``stage`` for a batch whose pointer is ``current_stage``.

    An unrecognised ``current_stage`` sits at position -1, so every stage
    reports ``pending``.  Never raises; callers deriving a whole batch log
    the unknown value once through ``warn_if_unknown``.
    """
    current_index = stage_position(normalize_stage(current_stage))
    stage_index = stage_position(stage)

    if stage_index < 0:
        return StageStatus.PENDING
    if stage_index < current_index:
        return StageStatus.COMPLETED
    if stage_index == current_index:
        return StageStatus.CURRENT
    return StageStatus.PENDING


def stage_statuses(current_stage: Stage | str | None) -> dict[Stage, StageStatus]:
    """Status of all six stages, in order."""
    warn_if_unknown(current_stage)
    return {stage: derive_stage_status(current_stage, stage) for stage in STAGE_ORDER}


def stage_progress(current_stage: Stage | str | None) -> float:
    """Percentage complete: ``(position + 1) / 7 * 100``, 0 when unknown."""
    position = stage_position(normalize_stage(current_stage))
    if position < 0:
        return 0.0
    return (position + 1) / _PROGRESS_STEPS * 100
