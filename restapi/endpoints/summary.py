"""Summary endpoints for the API."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.enums import OwnerType, PeriodType
from components.core.exceptions import SummaryNotFoundError
from components.core.init_db import get_db
from components.summary import schemas
from components.summary.recalculator import SummaryRecalculator
from components.summary.repository import SummaryRepository

router = APIRouter(
    prefix="/summaries",
    tags=["summaries"],
    responses={404: {"description": "Not found"}},
)


@router.get("/{owner_type}/{owner_id}/{period_type}", response_model=schemas.Summary)
async def get_summary(
    owner_type: OwnerType,
    owner_id: str,
    period_type: PeriodType,
    db: AsyncSession = Depends(get_db),
):
    key = schemas.SummaryKey(owner_id, owner_type, period_type)
    try:
        return await SummaryRepository(db).get_or_raise(key.summary_id)
    except SummaryNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.post("/{owner_type}/{owner_id}/{period_type}/rebuild", response_model=schemas.SummaryUpdateResult)
async def rebuild_summary(
    owner_type: OwnerType,
    owner_id: str,
    period_type: PeriodType,
    db: AsyncSession = Depends(get_db),
):
    """Recompute every bucket of the summary inside the configured window."""
    return await SummaryRecalculator(db).recalculate_full_summary(owner_id, owner_type, period_type)
