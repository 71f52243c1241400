"""Repository for transaction operations."""

from typing import Iterable, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.exceptions import TransactionNotFoundError
from components.transaction import schemas
from components.transaction.models import Transaction


class TransactionRepository:
    """Repository for transaction operations."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def get(self, transaction_id: str) -> Optional[schemas.Transaction]:
        transaction = await self.session.get(Transaction, transaction_id)
        return schemas.Transaction.model_validate(transaction) if transaction else None

    async def get_many(self, transaction_ids: Iterable[str]) -> List[schemas.Transaction]:
        """Fetch transactions by id; unknown ids are silently absent."""
        ids = list(transaction_ids)
        if not ids:
            return []
        result = await self.session.execute(
            select(Transaction).where(Transaction.id.in_(ids)).order_by(Transaction.transaction_date, Transaction.id)
        )
        return [schemas.Transaction.model_validate(t) for t in result.scalars().all()]

    async def create(self, data: schemas.TransactionCreate) -> schemas.Transaction:
        values = data.model_dump(exclude_none=True)
        transaction = Transaction(**values)
        self.session.add(transaction)
        await self.session.commit()
        await self.session.refresh(transaction)
        return schemas.Transaction.model_validate(transaction)

    async def update(
        self, transaction_id: str, data: schemas.TransactionUpdate
    ) -> Tuple[schemas.Transaction, schemas.Transaction]:
        """
        Apply a partial update and commit.

        Returns:
            The transaction before and after the update
        """
        transaction = await self.session.get(Transaction, transaction_id)
        if transaction is None:
            raise TransactionNotFoundError(transaction_id)
        before = schemas.Transaction.model_validate(transaction)

        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(transaction, field, value)

        await self.session.commit()
        await self.session.refresh(transaction)
        return before, schemas.Transaction.model_validate(transaction)

    async def delete(self, transaction_id: str) -> schemas.Transaction:
        """Remove the transaction and commit; returns the deleted record."""
        transaction = await self.session.get(Transaction, transaction_id)
        if transaction is None:
            raise TransactionNotFoundError(transaction_id)
        removed = schemas.Transaction.model_validate(transaction)
        await self.session.delete(transaction)
        await self.session.commit()
        return removed
