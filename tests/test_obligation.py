from datetime import date
from decimal import Decimal

import pytest

from components.core.config import get_settings
from components.obligation.repository import ObligationRepository
from components.obligation.schemas import ObligationCreate


def _streaming(**overrides) -> ObligationCreate:
    values = dict(owner_id="user1", description="Streaming", amount=Decimal("-15.49"), first_date=date(2025, 1, 5))
    values.update(overrides)
    return ObligationCreate(**values)


@pytest.mark.asyncio
async def test_currency_defaults_to_configured_value(session, monkeypatch):
    monkeypatch.setattr(get_settings(), "DEFAULT_CURRENCY", "EUR")

    obligation = await ObligationRepository(session).create(_streaming())

    assert obligation.currency == "EUR"
    assert obligation.amount == Decimal("15.49")


@pytest.mark.asyncio
async def test_explicit_currency_is_kept(session):
    obligation = await ObligationRepository(session).create(_streaming(currency="GBP"))

    assert obligation.currency == "GBP"


@pytest.mark.asyncio
async def test_link_and_unlink_transaction(session):
    repository = ObligationRepository(session)
    obligation = await repository.create(_streaming())

    await repository.link_transaction(obligation.id, "t1")
    await repository.link_transaction(obligation.id, "t2")
    assert [o.id for o in await repository.list_linked_to("user1", "t1")] == [obligation.id]

    before, after = await repository.unlink_transaction(obligation.id, "t1")

    assert before.transaction_ids == ["t1", "t2"]
    assert after.transaction_ids == ["t2"]
    assert await repository.list_linked_to("user1", "t1") == []
    assert await repository.list_linked_to("other", "t2") == []
