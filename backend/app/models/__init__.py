"""Aggregate model imports for Alembic auto-detection."""

from app.models.production_batch import ProductionBatch  # noqa: F401
from app.models.activity_log import ActivityLog  # noqa: F401
from app.models.contamination_log import ContaminationLog  # noqa: F401
