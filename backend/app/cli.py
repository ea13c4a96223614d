"""Management CLI.

Usage:
    python -m app.cli init-db         # Create tables (dev only; use Alembic elsewhere)
    python -m app.cli stage-report    # Batch counts per production stage
"""

import asyncio
import sys

from app.database import Base, async_session, engine
from app.models import ContaminationLog, ProductionBatch  # noqa: F401 — register tables
from app.services.analytics import UNKNOWN_BUCKET, production_summary
from app.services.contamination import all_contamination
from app.services.production import all_batches
from app.workflow.stages import display_name


async def _init_db():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()


def init_db():
    asyncio.run(_init_db())
    print("Tables created.")


async def _stage_report():
    async with async_session() as db:
        batches = await all_batches(db)
        logs = await all_contamination(db)
    await engine.dispose()
    return production_summary(batches, logs)


def stage_report():
    summary = asyncio.run(_stage_report())
    for stage, count in summary.stage_counts.items():
        label = display_name(stage) if stage != UNKNOWN_BUCKET else "Unrecognised stage"
        print(f"  {label:<20} {count}")
    print(f"\n{summary.total_batches} batch(es), {summary.total_harvested_kg:.1f} kg harvested")
    print(
        f"{summary.contaminated_batches} contaminated ({summary.contamination_rate_pct:.1f}%), "
        f"{summary.approval_counts.get('pending', 0)} awaiting approval"
    )


if __name__ == "__main__":
    cmd = sys.argv[1] if len(sys.argv) > 1 else ""
    if cmd == "init-db":
        init_db()
    elif cmd == "stage-report":
        stage_report()
    else:
        print(__doc__)
        sys.exit(1)
