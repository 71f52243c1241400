"""Script to import obligations and transactions from tab-separated files."""

import argparse
import asyncio
import logging
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from components.core.config import get_settings
from components.core.init_db import db_manager, get_db
from components.core.logging_config import configure_logging
from components.lifecycle import triggers
from components.obligation.repository import ObligationRepository
from components.obligation.schemas import ObligationCreate
from components.transaction.repository import TransactionRepository
from components.transaction.schemas import TransactionCreate

logger = logging.getLogger("scripts.import_csv_data")

OBLIGATION_COLUMNS = ["id", "owner_id", "description", "amount", "cadence", "first_date"]
TRANSACTION_COLUMNS = ["id", "obligation_id", "owner_id", "transaction_date", "amount"]


def parse_date(value) -> Optional[date]:
    """Parse date string in DD.MM.YYYY format to Python date object."""
    if value is None or pd.isna(value) or value == "":
        return None
    return datetime.strptime(str(value), "%d.%m.%Y").date()


def _optional(row: pd.Series, column: str) -> Optional[str]:
    if column not in row or pd.isna(row[column]) or row[column] == "":
        return None
    return str(row[column])


def _require_columns(frame: pd.DataFrame, columns: List[str], name: str) -> None:
    missing = [c for c in columns if c not in frame.columns]
    if missing:
        raise ValueError(f"{name} is missing columns: {', '.join(missing)}")


def load_obligations(frame: pd.DataFrame) -> Dict[str, ObligationCreate]:
    """Obligation rows keyed by their id in the file."""
    _require_columns(frame, OBLIGATION_COLUMNS, "obligations file")
    obligations = {}
    for _, row in frame.iterrows():
        obligations[str(row["id"])] = ObligationCreate(
            owner_id=str(row["owner_id"]),
            group_id=_optional(row, "group_id"),
            kind=_optional(row, "kind") or "outflow",
            description=str(row["description"]),
            merchant_name=_optional(row, "merchant_name"),
            amount=Decimal(str(row["amount"])),
            cadence=row["cadence"],
            first_date=parse_date(row["first_date"]),
            last_date=parse_date(row.get("last_date")),
            predicted_next_date=parse_date(row.get("predicted_next_date")),
        )
    return obligations


def load_transactions(frame: pd.DataFrame) -> Dict[str, List[TransactionCreate]]:
    """Transaction rows grouped by the obligation id in the file."""
    _require_columns(frame, TRANSACTION_COLUMNS, "transactions file")
    grouped: Dict[str, List[TransactionCreate]] = {}
    for _, row in frame.iterrows():
        grouped.setdefault(str(row["obligation_id"]), []).append(TransactionCreate(
            id=str(row["id"]),
            owner_id=str(row["owner_id"]),
            transaction_date=parse_date(row["transaction_date"]),
            amount=Decimal(str(row["amount"])),
            description=_optional(row, "description") or "",
        ))
    return grouped


async def import_data(data_dir: Path) -> None:
    """Import obligations with their transactions, then materialize periods."""
    obligations = load_obligations(pd.read_csv(data_dir / "obligations.csv", sep="\t", dtype=str))
    transactions_path = data_dir / "transactions.csv"
    transactions = (
        load_transactions(pd.read_csv(transactions_path, sep="\t", dtype=str))
        if transactions_path.exists() else {}
    )

    await db_manager.create_tables()
    async for db in get_db():
        transaction_repository = TransactionRepository(db)
        obligation_repository = ObligationRepository(db)
        for file_id, data in obligations.items():
            linked = []
            for transaction in transactions.get(file_id, []):
                linked.append((await transaction_repository.create(transaction)).id)
            obligation = await obligation_repository.create(data.model_copy(update={"transaction_ids": linked}))
            result = await triggers.handle_obligation_created(db, obligation)
            logger.info(
                "Imported obligation",
                extra={"obligation_id": obligation.id, "periods": result.periods_created, "errors": len(result.errors)},
            )


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("data_dir", type=Path, help="Directory holding obligations.csv and transactions.csv")
    args = parser.parse_args()
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL, settings.LOG_JSON)
    asyncio.run(import_data(args.data_dir))
