import os

os.environ.setdefault("DB_URL", "sqlite+aiosqlite:///:memory:")

from datetime import date
from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from components.core.database import DatabaseManager
from components.core.enums import Cadence, PeriodType
from components.core.models import register_models
from components.obligation.repository import ObligationRepository
from components.obligation.schemas import Obligation, ObligationCreate
from components.period.materializer import PeriodMaterializer
from components.source_period.generator import generate_source_periods
from components.source_period.repository import SourcePeriodRepository
from components.source_period.schemas import DateWindow, SourcePeriod
from components.transaction.repository import TransactionRepository
from components.transaction.schemas import TransactionCreate

register_models()


@pytest_asyncio.fixture
async def db_manager():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    manager = DatabaseManager(engine)
    await manager.create_tables()
    yield manager
    await engine.dispose()


@pytest_asyncio.fixture
async def session(db_manager):
    async with db_manager.get_db() as db:
        yield db


@pytest.fixture
def make_obligation():
    def factory(**overrides) -> Obligation:
        values = dict(
            id="obl1",
            owner_id="user1",
            description="Rent",
            merchant_name="Landlord",
            amount=Decimal("1200.00"),
            cadence=Cadence.MONTHLY,
            first_date=date(2025, 1, 1),
        )
        values.update(overrides)
        return Obligation(**values)
    return factory


@pytest.fixture
def make_source_period():
    def factory(start: date, end: date, source_period_id: str = "2025M01",
                period_type: PeriodType = PeriodType.MONTHLY) -> SourcePeriod:
        return SourcePeriod(
            id=source_period_id,
            period_type=period_type,
            year=start.year,
            index=int(start.strftime("%Y%m")),
            start_date=start,
            end_date=end,
        )
    return factory


@pytest_asyncio.fixture
async def seeded_obligation(session):
    """Monthly rent with one January payment and its January periods materialized."""
    await SourcePeriodRepository(session).upsert_many(generate_source_periods(2025, 2025))
    await TransactionRepository(session).create(TransactionCreate(
        id="rent-jan",
        owner_id="user1",
        transaction_date=date(2025, 1, 1),
        amount=Decimal("-1200.00"),
    ))
    obligation = await ObligationRepository(session).create(ObligationCreate(
        owner_id="user1",
        description="Rent",
        merchant_name="Landlord",
        amount=Decimal("1200.00"),
        cadence=Cadence.MONTHLY,
        first_date=date(2025, 1, 1),
        transaction_ids=["rent-jan"],
    ))
    await PeriodMaterializer(session).materialize_periods(
        obligation, DateWindow.of(date(2025, 1, 1), date(2025, 1, 31)), today=date(2025, 1, 20)
    )
    return obligation, f"{obligation.id}_2025M01"
