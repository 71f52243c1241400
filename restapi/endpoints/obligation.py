"""Obligation endpoints for the API."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.enums import RecordStatus
from components.core.exceptions import ObligationNotFoundError
from components.core.init_db import get_db
from components.lifecycle import triggers
from components.lifecycle.schemas import OrchestrationResult
from components.obligation import schemas
from components.obligation.repository import ObligationRepository
from components.transaction import schemas as transaction_schemas
from components.transaction.repository import TransactionRepository

router = APIRouter(
    prefix="/obligations",
    tags=["obligations"],
    responses={404: {"description": "Not found"}},
)


class ObligationWriteResponse(BaseModel):
    """Stored obligation plus what the downstream recompute did."""
    obligation: schemas.Obligation
    orchestration: OrchestrationResult


@router.post("/", response_model=ObligationWriteResponse, status_code=201)
async def create_obligation(
    data: schemas.ObligationCreate,
    db: AsyncSession = Depends(get_db),
):
    """
    Create an obligation and materialize its periods.

    The obligation is committed first; period generation problems are
    reported in ``orchestration.errors`` and never fail the request.
    """
    obligation = await ObligationRepository(db).create(data)
    orchestration = await triggers.handle_obligation_created(db, obligation)
    return ObligationWriteResponse(obligation=obligation, orchestration=orchestration)


@router.get("/", response_model=List[schemas.Obligation])
async def list_obligations(owner_id: str, active_only: bool = False, db: AsyncSession = Depends(get_db)):
    """List obligations of one owner."""
    return await ObligationRepository(db).list_for_owner(owner_id, active_only)


@router.get("/{obligation_id}", response_model=schemas.Obligation)
async def get_obligation(obligation_id: str, db: AsyncSession = Depends(get_db)):
    obligation = await ObligationRepository(db).get(obligation_id)
    if obligation is None:
        raise HTTPException(status_code=404, detail="Obligation not found")
    return obligation


async def _update(db: AsyncSession, obligation_id: str, data: schemas.ObligationUpdate) -> ObligationWriteResponse:
    try:
        before, after = await ObligationRepository(db).update(obligation_id, data)
    except ObligationNotFoundError:
        raise HTTPException(status_code=404, detail="Obligation not found")
    orchestration = await triggers.handle_obligation_updated(db, before, after)
    return ObligationWriteResponse(obligation=after, orchestration=orchestration)


@router.patch("/{obligation_id}", response_model=ObligationWriteResponse)
async def update_obligation(
    obligation_id: str,
    data: schemas.ObligationUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Update an obligation and propagate the change to its periods."""
    return await _update(db, obligation_id, data)


@router.post("/{obligation_id}/deactivate", response_model=ObligationWriteResponse)
async def deactivate_obligation(obligation_id: str, db: AsyncSession = Depends(get_db)):
    """Soft-delete an obligation; its periods stay queryable."""
    return await _update(db, obligation_id, schemas.ObligationUpdate(status=RecordStatus.INACTIVE))


@router.post("/{obligation_id}/transactions", response_model=ObligationWriteResponse, status_code=201)
async def record_transaction(
    obligation_id: str,
    data: transaction_schemas.TransactionCreate,
    db: AsyncSession = Depends(get_db),
):
    """Record a transaction and link it to the obligation, re-matching its periods."""
    repository = ObligationRepository(db)
    if await repository.get(obligation_id) is None:
        raise HTTPException(status_code=404, detail="Obligation not found")
    transaction = await TransactionRepository(db).create(data)
    before, after = await repository.link_transaction(obligation_id, transaction.id)
    orchestration = await triggers.handle_obligation_updated(db, before, after)
    return ObligationWriteResponse(obligation=after, orchestration=orchestration)
