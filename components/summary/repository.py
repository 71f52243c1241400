"""Repository for summary operations."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.exceptions import SummaryNotFoundError
from components.summary import schemas
from components.summary.models import Summary


class SummaryRepository:
    """Repository for summary operations."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def get(self, summary_id: str) -> Optional[schemas.Summary]:
        summary = await self.session.get(Summary, summary_id)
        return schemas.Summary.model_validate(summary) if summary else None

    async def get_or_raise(self, summary_id: str) -> schemas.Summary:
        summary = await self.get(summary_id)
        if summary is None:
            raise SummaryNotFoundError(summary_id)
        return summary

    async def get_for_update(self, summary_id: str) -> Optional[schemas.Summary]:
        """Read the summary holding a row lock until the next commit, where supported."""
        result = await self.session.execute(
            select(Summary).where(Summary.id == summary_id).with_for_update()
        )
        summary = result.scalars().first()
        return schemas.Summary.model_validate(summary) if summary else None

    async def save(self, summary: schemas.Summary) -> None:
        """Insert or replace the summary and commit."""
        values = summary.model_dump(exclude={"periods"})
        values["periods"] = {
            source_period_id: [entry.model_dump(mode="json") for entry in entries]
            for source_period_id, entries in summary.periods.items()
        }
        await self.session.merge(Summary(**values))
        await self.session.commit()
