"""Production analytics router.

Endpoints:
    GET /api/analytics/production          Stage counts, yield, damage and contamination rates
    GET /api/analytics/production/monthly  Harvested kg per month
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.schemas.analytics import MonthlyYieldOut, ProductionSummaryOut
from app.services import analytics, contamination, production
from app.utils.cache import cached

router = APIRouter()


@router.get("/production", response_model=ProductionSummaryOut)
@cached(ttl=120, prefix="analytics")
async def production_summary(db: AsyncSession = Depends(get_db)):
    batches = await production.all_batches(db)
    logs = await contamination.all_contamination(db)
    return analytics.production_summary(batches, logs)


@router.get("/production/monthly", response_model=list[MonthlyYieldOut])
@cached(ttl=300, prefix="analytics")
async def monthly_yield(db: AsyncSession = Depends(get_db)):
    batches = await production.all_batches(db)
    return analytics.monthly_yield(batches)
