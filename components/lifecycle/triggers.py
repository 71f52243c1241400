"""
Event handlers invoked after obligation, transaction and period writes commit.

Each handler binds the event to the log context and delegates to the
orchestrator. Delivery may be duplicated or reordered; every handler
recomputes from stored state, so repeating one is harmless.
"""

import uuid
from datetime import date
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from components.core.logging_config import LogContext
from components.lifecycle.orchestrator import PeriodLifecycleOrchestrator
from components.lifecycle.schemas import OrchestrationResult
from components.obligation.schemas import Obligation
from components.period.schemas import Period
from components.transaction.schemas import Transaction


def _event_id() -> str:
    return uuid.uuid4().hex


async def handle_obligation_created(
    session: AsyncSession, obligation: Obligation, today: Optional[date] = None
) -> OrchestrationResult:
    with LogContext.bind(event_id=_event_id(), obligation_id=obligation.id, owner_id=obligation.owner_id):
        return await PeriodLifecycleOrchestrator(session).on_obligation_created(obligation.id, today)


async def handle_obligation_updated(
    session: AsyncSession, before: Obligation, after: Obligation, today: Optional[date] = None
) -> OrchestrationResult:
    with LogContext.bind(event_id=_event_id(), obligation_id=after.id, owner_id=after.owner_id):
        return await PeriodLifecycleOrchestrator(session).on_obligation_updated(before, after, today)


async def handle_transaction_changed(
    session: AsyncSession, transaction: Transaction, today: Optional[date] = None, removed: bool = False
) -> OrchestrationResult:
    with LogContext.bind(event_id=_event_id(), owner_id=transaction.owner_id):
        return await PeriodLifecycleOrchestrator(session).on_transaction_changed(
            transaction.id, transaction.owner_id, today, removed
        )


async def handle_period_written(
    session: AsyncSession, before: Optional[Period], after: Optional[Period]
) -> OrchestrationResult:
    period = after or before
    with LogContext.bind(
        event_id=_event_id(),
        obligation_id=period.obligation_id if period else None,
        owner_id=period.owner_id if period else None,
    ):
        return await PeriodLifecycleOrchestrator(session).on_period_written(before, after)
