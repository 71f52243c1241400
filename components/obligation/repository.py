"""Repository for obligation operations."""

from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.config import get_settings
from components.core.enums import RecordStatus
from components.core.exceptions import ObligationNotFoundError
from components.obligation import schemas
from components.obligation.models import Obligation


class ObligationRepository:
    """Repository for obligation operations."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def get(self, obligation_id: str) -> Optional[schemas.Obligation]:
        obligation = await self.session.get(Obligation, obligation_id)
        if obligation is None:
            return None
        return schemas.Obligation.model_validate(obligation)

    async def get_or_raise(self, obligation_id: str) -> schemas.Obligation:
        obligation = await self.get(obligation_id)
        if obligation is None:
            raise ObligationNotFoundError(obligation_id)
        return obligation

    async def create(self, data: schemas.ObligationCreate) -> schemas.Obligation:
        """Insert a new active obligation and commit."""
        values = data.model_dump()
        values["cadence"] = data.cadence.value
        if not data.currency:
            values["currency"] = get_settings().DEFAULT_CURRENCY
        obligation = Obligation(**values, status=RecordStatus.ACTIVE)
        self.session.add(obligation)
        await self.session.commit()
        await self.session.refresh(obligation)
        return schemas.Obligation.model_validate(obligation)

    async def update(
        self, obligation_id: str, data: schemas.ObligationUpdate
    ) -> Tuple[schemas.Obligation, schemas.Obligation]:
        """
        Apply a partial update and commit.

        Returns:
            The obligation before and after the update
        """
        obligation = await self.session.get(Obligation, obligation_id)
        if obligation is None:
            raise ObligationNotFoundError(obligation_id)
        before = schemas.Obligation.model_validate(obligation)

        for field, value in data.model_dump(exclude_unset=True).items():
            if field == "cadence" and value is not None:
                value = value.value
            setattr(obligation, field, value)

        await self.session.commit()
        await self.session.refresh(obligation)
        return before, schemas.Obligation.model_validate(obligation)

    async def link_transaction(
        self, obligation_id: str, transaction_id: str
    ) -> Tuple[schemas.Obligation, schemas.Obligation]:
        """Append a transaction id to the obligation's linked set."""
        current = await self.get_or_raise(obligation_id)
        if transaction_id in current.transaction_ids:
            return current, current
        update = schemas.ObligationUpdate(transaction_ids=current.transaction_ids + [transaction_id])
        return await self.update(obligation_id, update)

    async def unlink_transaction(
        self, obligation_id: str, transaction_id: str
    ) -> Tuple[schemas.Obligation, schemas.Obligation]:
        """Drop a transaction id from the obligation's linked set."""
        current = await self.get_or_raise(obligation_id)
        if transaction_id not in current.transaction_ids:
            return current, current
        remaining = [t for t in current.transaction_ids if t != transaction_id]
        return await self.update(obligation_id, schemas.ObligationUpdate(transaction_ids=remaining))

    async def list_for_owner(
        self, owner_id: str, active_only: bool = False
    ) -> List[schemas.Obligation]:
        query = select(Obligation).where(Obligation.owner_id == owner_id)
        if active_only:
            query = query.where(Obligation.status == RecordStatus.ACTIVE)
        result = await self.session.execute(query.order_by(Obligation.created_at, Obligation.id))
        return [schemas.Obligation.model_validate(o) for o in result.scalars().all()]

    async def list_linked_to(self, owner_id: str, transaction_id: str) -> List[schemas.Obligation]:
        """Obligations of the owner whose linked set holds the transaction."""
        return [o for o in await self.list_for_owner(owner_id) if transaction_id in o.transaction_ids]
