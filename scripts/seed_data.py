"""Script to seed demo data into the database."""

import argparse
import asyncio
import logging
from datetime import date
from decimal import Decimal

from components.core.config import get_settings
from components.core.enums import Cadence, ObligationKind
from components.core.init_db import db_manager, get_db
from components.core.logging_config import configure_logging
from components.lifecycle import triggers
from components.obligation.repository import ObligationRepository
from components.obligation.schemas import ObligationCreate
from components.source_period.generator import generate_source_periods
from components.source_period.repository import SourcePeriodRepository
from components.transaction.repository import TransactionRepository
from components.transaction.schemas import TransactionCreate

logger = logging.getLogger("scripts.seed_data")

OWNER_ID = "demo_user"
GROUP_ID = "demo_household"


async def seed_data(reset: bool = False):
    """Seed calendar windows, demo obligations and a few payments."""
    if reset:
        await db_manager.drop_tables()
    await db_manager.create_tables()
    today = date.today()

    async for db in get_db():
        count = await SourcePeriodRepository(db).upsert_many(
            generate_source_periods(today.year - 1, today.year + 2)
        )
        logger.info("Seeded source periods", extra={"count": count})

        transactions = TransactionRepository(db)
        rent_payments = [
            await transactions.create(TransactionCreate(
                owner_id=OWNER_ID,
                transaction_date=date(today.year, month, 1),
                amount=Decimal("-1200.00"),
                description="RENT PAYMENT",
            ))
            for month in range(1, today.month + 1)
        ]

        obligations = [
            ObligationCreate(
                owner_id=OWNER_ID,
                group_id=GROUP_ID,
                description="Apartment rent",
                merchant_name="Oak Street Properties",
                amount=Decimal("-1200.00"),
                cadence=Cadence.MONTHLY,
                first_date=date(today.year, 1, 1),
                transaction_ids=[t.id for t in rent_payments],
            ),
            ObligationCreate(
                owner_id=OWNER_ID,
                description="Gym membership",
                merchant_name="Iron Works Gym",
                amount=Decimal("10.00"),
                cadence=Cadence.WEEKLY,
                first_date=date(today.year, 1, 1),
            ),
            ObligationCreate(
                owner_id=OWNER_ID,
                group_id=GROUP_ID,
                kind=ObligationKind.INFLOW,
                description="Salary",
                merchant_name="Acme Corp",
                amount=Decimal("2500.00"),
                cadence=Cadence.BIWEEKLY,
                first_date=date(today.year, 1, 3),
            ),
            ObligationCreate(
                owner_id=OWNER_ID,
                description="Car insurance",
                merchant_name="Safe Drive Mutual",
                amount=Decimal("840.00"),
                cadence=Cadence.ANNUALLY,
                first_date=date(today.year - 1, 3, 15),
            ),
        ]

        repository = ObligationRepository(db)
        for data in obligations:
            obligation = await repository.create(data)
            result = await triggers.handle_obligation_created(db, obligation)
            logger.info(
                "Seeded obligation",
                extra={"obligation_id": obligation.id, "periods": result.periods_created, "errors": len(result.errors)},
            )


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--reset", action="store_true", help="Drop all tables before seeding")
    args = parser.parse_args()
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL, settings.LOG_JSON)
    asyncio.run(seed_data(args.reset))
