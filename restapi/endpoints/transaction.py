"""Transaction endpoints for the API."""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.exceptions import TransactionNotFoundError
from components.core.init_db import get_db
from components.lifecycle import triggers
from components.lifecycle.schemas import OrchestrationResult
from components.transaction import schemas
from components.transaction.repository import TransactionRepository

router = APIRouter(
    prefix="/transactions",
    tags=["transactions"],
    responses={404: {"description": "Not found"}},
)


class TransactionWriteResponse(BaseModel):
    """Stored transaction plus the re-matching it caused."""
    transaction: schemas.Transaction
    orchestration: OrchestrationResult


@router.get("/{transaction_id}", response_model=schemas.Transaction)
async def get_transaction(transaction_id: str, db: AsyncSession = Depends(get_db)):
    transaction = await TransactionRepository(db).get(transaction_id)
    if transaction is None:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return transaction


@router.patch("/{transaction_id}", response_model=TransactionWriteResponse)
async def update_transaction(
    transaction_id: str,
    data: schemas.TransactionUpdate,
    db: AsyncSession = Depends(get_db),
):
    """
    Correct a recorded transaction and re-match every obligation it is linked to.

    Re-matching rebuilds occurrence payments from scratch, so a re-dated
    transaction moves to the occurrence now closest to it.
    """
    try:
        _, after = await TransactionRepository(db).update(transaction_id, data)
    except TransactionNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    orchestration = await triggers.handle_transaction_changed(db, after)
    return TransactionWriteResponse(transaction=after, orchestration=orchestration)


@router.delete("/{transaction_id}", response_model=OrchestrationResult)
async def delete_transaction(transaction_id: str, db: AsyncSession = Depends(get_db)):
    """Delete a transaction, unlink it from its obligations and clear the payments it settled."""
    try:
        removed = await TransactionRepository(db).delete(transaction_id)
    except TransactionNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return await triggers.handle_transaction_changed(db, removed, removed=True)
