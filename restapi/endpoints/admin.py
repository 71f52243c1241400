"""Administrative endpoints for calendar generation and period repair."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.enums import PeriodType
from components.core.init_db import get_db
from components.lifecycle.orchestrator import PeriodLifecycleOrchestrator
from components.lifecycle.schemas import OrchestrationResult
from components.source_period.generator import generate_source_periods
from components.source_period.repository import SourcePeriodRepository
from components.source_period.schemas import GenerationSummary

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    responses={404: {"description": "Not found"}},
)


@router.post("/source-periods/generate", response_model=GenerationSummary)
async def generate_periods(start_year: int, end_year: int, db: AsyncSession = Depends(get_db)):
    """Create or replace the monthly, half-month and weekly calendar windows."""
    if end_year < start_year:
        raise HTTPException(status_code=400, detail="end_year must not precede start_year")
    periods = generate_source_periods(start_year, end_year)
    await SourcePeriodRepository(db).upsert_many(periods)
    return GenerationSummary(
        start_year=start_year,
        end_year=end_year,
        monthly=sum(1 for p in periods if p.period_type == PeriodType.MONTHLY),
        bi_monthly=sum(1 for p in periods if p.period_type == PeriodType.BI_MONTHLY),
        weekly=sum(1 for p in periods if p.period_type == PeriodType.WEEKLY),
    )


@router.post("/obligations/{obligation_id}/extend", response_model=OrchestrationResult)
async def extend_obligation_periods(obligation_id: str, db: AsyncSession = Depends(get_db)):
    """Materialize periods for source periods that have none yet."""
    return await PeriodLifecycleOrchestrator(db).extend_periods(obligation_id)


@router.post("/obligations/{obligation_id}/regenerate", response_model=OrchestrationResult)
async def regenerate_obligation_periods(obligation_id: str, db: AsyncSession = Depends(get_db)):
    """Rebuild every unfrozen period of the obligation."""
    return await PeriodLifecycleOrchestrator(db).regenerate_periods(obligation_id)
