"""Period endpoints for the API."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.exceptions import NotFoundError
from components.core.init_db import get_db
from components.lifecycle import triggers
from components.period import schemas
from components.period.matcher import OccurrenceMatcher
from components.period.repository import PeriodRepository

router = APIRouter(
    prefix="/periods",
    tags=["periods"],
    responses={404: {"description": "Not found"}},
)


@router.get("/", response_model=List[schemas.Period])
async def list_periods(obligation_id: str, include_inactive: bool = False, db: AsyncSession = Depends(get_db)):
    """List periods of one obligation ordered by start date."""
    return await PeriodRepository(db).list_for_obligation(obligation_id, active_only=not include_inactive)


@router.get("/{period_id}", response_model=schemas.Period)
async def get_period(period_id: str, db: AsyncSession = Depends(get_db)):
    period = await PeriodRepository(db).get(period_id)
    if period is None:
        raise HTTPException(status_code=404, detail="Period not found")
    return period


@router.post("/{period_id}/match", response_model=schemas.MatchResult)
async def match_period(period_id: str, db: AsyncSession = Depends(get_db)):
    """Re-run transaction matching for one period and refresh its summaries."""
    repository = PeriodRepository(db)
    before = await repository.get(period_id)
    if before is None:
        raise HTTPException(status_code=404, detail="Period not found")
    try:
        result = await OccurrenceMatcher(db).match_transactions_to_occurrences(period_id, before)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    if result.written:
        await triggers.handle_period_written(db, before, await repository.get(period_id))
    return result
