from datetime import date
from decimal import Decimal

import pytest
import pytest_asyncio

from components.core.enums import Cadence, OwnerType, PaymentType, PeriodType
from components.core.exceptions import TransactionNotFoundError
from components.lifecycle import triggers
from components.lifecycle.orchestrator import PeriodLifecycleOrchestrator
from components.obligation.repository import ObligationRepository
from components.obligation.schemas import ObligationCreate
from components.period.repository import PeriodRepository
from components.source_period.generator import generate_source_periods
from components.source_period.repository import SourcePeriodRepository
from components.summary.repository import SummaryRepository
from components.summary.schemas import SummaryKey
from components.transaction.repository import TransactionRepository
from components.transaction.schemas import TransactionCreate, TransactionUpdate

TODAY = date(2025, 1, 20)


@pytest_asyncio.fixture
async def gym(session):
    """Weekly gym fee from Jan 1, paid once on Jan 1."""
    await SourcePeriodRepository(session).upsert_many(generate_source_periods(2025, 2025))
    await TransactionRepository(session).create(TransactionCreate(
        id="gym-1", owner_id="user1", transaction_date=date(2025, 1, 1), amount=Decimal("-10.00"),
    ))
    obligation = await ObligationRepository(session).create(ObligationCreate(
        owner_id="user1",
        description="Gym",
        amount=Decimal("10.00"),
        cadence=Cadence.WEEKLY,
        first_date=date(2025, 1, 1),
        transaction_ids=["gym-1"],
    ))
    result = await PeriodLifecycleOrchestrator(session).on_obligation_created(obligation.id, TODAY)
    assert result.success, result.errors
    return obligation


@pytest.mark.asyncio
async def test_redated_transaction_moves_to_closest_occurrence(session, gym):
    periods = PeriodRepository(session)
    january = await periods.get(f"{gym.id}_2025M01")
    assert january.occurrences[0].transaction_id == "gym-1"

    _, after = await TransactionRepository(session).update("gym-1", TransactionUpdate(transaction_date=date(2025, 1, 9)))
    result = await triggers.handle_transaction_changed(session, after, TODAY)

    assert result.success, result.errors
    assert result.transaction_id == "gym-1"
    # month, first half-month and the two affected weeks
    assert result.periods_updated == 4

    january = await periods.get(f"{gym.id}_2025M01")
    assert not january.occurrences[0].is_paid
    assert january.occurrences[1].transaction_id == "gym-1"
    assert january.occurrences[1].payment_date == date(2025, 1, 9)
    assert january.occurrences[1].payment_type == PaymentType.CATCH_UP
    assert january.number_of_occurrences_paid == 1
    assert (await periods.get(f"{gym.id}_2025W01")).number_of_occurrences_paid == 0
    assert (await periods.get(f"{gym.id}_2025W02")).number_of_occurrences_paid == 1

    weekly = await SummaryRepository(session).get(SummaryKey("user1", OwnerType.USER, PeriodType.WEEKLY).summary_id)
    [first_week] = weekly.periods["2025W01"]
    [second_week] = weekly.periods["2025W02"]
    assert first_week.number_of_occurrences_paid == 0
    assert second_week.number_of_occurrences_paid == 1


@pytest.mark.asyncio
async def test_deleted_transaction_is_unlinked_and_cleared(session, gym):
    removed = await TransactionRepository(session).delete("gym-1")
    result = await triggers.handle_transaction_changed(session, removed, TODAY, removed=True)

    assert result.success, result.errors
    assert result.event == "transaction_removed"
    assert result.periods_updated == 3
    assert (await ObligationRepository(session).get(gym.id)).transaction_ids == []
    assert await TransactionRepository(session).get("gym-1") is None

    january = await PeriodRepository(session).get(f"{gym.id}_2025M01")
    assert january.number_of_occurrences_paid == 0
    assert january.total_amount_paid == Decimal("0.00")


@pytest.mark.asyncio
async def test_unchanged_match_writes_nothing(session, gym):
    _, after = await TransactionRepository(session).update("gym-1", TransactionUpdate(description="GYM FEE"))
    result = await triggers.handle_transaction_changed(session, after, TODAY)

    assert result.success
    assert result.periods_updated == 0
    assert result.summaries_updated == 0


@pytest.mark.asyncio
async def test_unknown_transaction_raises(session):
    repository = TransactionRepository(session)

    with pytest.raises(TransactionNotFoundError):
        await repository.update("missing", TransactionUpdate(amount=Decimal("5")))
    with pytest.raises(TransactionNotFoundError):
        await repository.delete("missing")
