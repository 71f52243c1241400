"""Repository for period operations."""

import logging
from datetime import date
from typing import Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.config import get_settings
from components.core.enums import OwnerType, PeriodType, RecordStatus
from components.core.exceptions import BatchWriteError, PeriodNotFoundError
from components.period import schemas
from components.period.models import Period

logger = logging.getLogger(__name__)


def _to_row(period: schemas.Period) -> Period:
    values = period.model_dump(exclude={"occurrences"})
    values["cadence"] = period.cadence.value
    values["occurrences"] = [o.model_dump(mode="json") for o in period.occurrences]
    return Period(**values)


class PeriodRepository:
    """Repository for period operations."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def get(self, period_id: str) -> Optional[schemas.Period]:
        period = await self.session.get(Period, period_id)
        return schemas.Period.model_validate(period) if period else None

    async def get_or_raise(self, period_id: str) -> schemas.Period:
        period = await self.get(period_id)
        if period is None:
            raise PeriodNotFoundError(period_id)
        return period

    async def get_many(self, period_ids: Iterable[str]) -> Dict[str, schemas.Period]:
        ids = list(period_ids)
        if not ids:
            return {}
        result = await self.session.execute(select(Period).where(Period.id.in_(ids)))
        return {p.id: schemas.Period.model_validate(p) for p in result.scalars().all()}

    async def list_for_obligation(
        self, obligation_id: str, active_only: bool = True
    ) -> List[schemas.Period]:
        query = select(Period).where(Period.obligation_id == obligation_id)
        if active_only:
            query = query.where(Period.record_status == RecordStatus.ACTIVE)
        result = await self.session.execute(query.order_by(Period.period_start, Period.id))
        return [schemas.Period.model_validate(p) for p in result.scalars().all()]

    async def list_for_bucket(
        self,
        owner_id: str,
        owner_type: OwnerType,
        source_period_id: str,
        period_type: PeriodType,
    ) -> List[schemas.Period]:
        """
        Get the active periods that feed one summary bucket.

        User summaries collect by owner, group summaries by group id.
        """
        owner_column = Period.group_id if owner_type == OwnerType.GROUP else Period.owner_id
        result = await self.session.execute(
            select(Period)
            .where(
                owner_column == owner_id,
                Period.source_period_id == source_period_id,
                Period.period_type == period_type,
                Period.record_status == RecordStatus.ACTIVE,
            )
            .order_by(Period.id)
        )
        return [schemas.Period.model_validate(p) for p in result.scalars().all()]

    async def list_source_period_ids(
        self,
        owner_id: str,
        owner_type: OwnerType,
        period_type: PeriodType,
        window_start: date,
        window_end: date,
    ) -> List[str]:
        """Distinct source period ids with active periods for the owner inside the window."""
        owner_column = Period.group_id if owner_type == OwnerType.GROUP else Period.owner_id
        result = await self.session.execute(
            select(Period.source_period_id)
            .where(
                owner_column == owner_id,
                Period.period_type == period_type,
                Period.record_status == RecordStatus.ACTIVE,
                Period.period_start <= window_end,
                Period.period_end >= window_start,
            )
            .distinct()
            .order_by(Period.source_period_id)
        )
        return list(result.scalars().all())

    async def save(self, period: schemas.Period) -> None:
        """Insert or replace one period and commit."""
        await self.session.merge(_to_row(period))
        await self.session.commit()

    async def save_many(
        self, periods: List[schemas.Period], chunk_size: Optional[int] = None
    ) -> int:
        """
        Insert or replace periods in sequentially committed chunks.

        Args:
            periods: Periods to write
            chunk_size: Items per commit, defaults to BATCH_WRITE_LIMIT

        Returns:
            Number of periods written

        Raises:
            BatchWriteError: a chunk failed; earlier chunks stay committed
        """
        chunk_size = chunk_size or get_settings().BATCH_WRITE_LIMIT
        committed = 0
        for chunk_index, offset in enumerate(range(0, len(periods), chunk_size)):
            chunk = periods[offset:offset + chunk_size]
            try:
                for period in chunk:
                    await self.session.merge(_to_row(period))
                await self.session.commit()
            except Exception as exc:
                await self.session.rollback()
                raise BatchWriteError(chunk_index, committed, str(exc)) from exc
            committed += len(chunk)
            logger.debug("Committed period chunk", extra={"chunk_index": chunk_index, "size": len(chunk)})
        return committed

    async def set_record_status(
        self, period_ids: Iterable[str], record_status: RecordStatus
    ) -> List[schemas.Period]:
        """
        Soft-delete or restore periods and commit.

        Returns:
            The periods as they were before the change
        """
        before = list((await self.get_many(period_ids)).values())
        for period in before:
            row = await self.session.get(Period, period.id)
            row.record_status = record_status
        await self.session.commit()
        return before
