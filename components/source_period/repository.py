"""Repository for source period operations."""

from datetime import date
from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.enums import PeriodType
from components.core.exceptions import SourcePeriodNotFoundError
from components.source_period import schemas
from components.source_period.models import SourcePeriod


class SourcePeriodRepository:
    """Repository for source period operations."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def get(self, source_period_id: str) -> Optional[schemas.SourcePeriod]:
        source_period = await self.session.get(SourcePeriod, source_period_id)
        return schemas.SourcePeriod.model_validate(source_period) if source_period else None

    async def get_or_raise(self, source_period_id: str) -> schemas.SourcePeriod:
        source_period = await self.get(source_period_id)
        if source_period is None:
            raise SourcePeriodNotFoundError(source_period_id)
        return source_period

    async def get_overlapping(
        self, start: date, end: date, period_type: Optional[PeriodType] = None
    ) -> List[schemas.SourcePeriod]:
        """
        Get all source periods that share at least one day with [start, end].

        Args:
            start: Window start (inclusive)
            end: Window end (inclusive)
            period_type: Restrict to one calendar window type

        Returns:
            Source periods ordered by type and start date
        """
        query = select(SourcePeriod).where(
            SourcePeriod.start_date <= end,
            SourcePeriod.end_date >= start,
        )
        if period_type is not None:
            query = query.where(SourcePeriod.period_type == period_type)
        result = await self.session.execute(
            query.order_by(SourcePeriod.period_type, SourcePeriod.start_date)
        )
        return [schemas.SourcePeriod.model_validate(sp) for sp in result.scalars().all()]

    async def upsert_many(self, periods: Iterable[schemas.SourcePeriod]) -> int:
        """Insert or replace source periods by id and commit."""
        count = 0
        for period in periods:
            await self.session.merge(SourcePeriod(**period.model_dump()))
            count += 1
        await self.session.commit()
        return count
