"""Script to convert exported legacy period documents into the current schema."""

import argparse
import asyncio
import json
import logging
from datetime import date
from pathlib import Path

from components.core.config import get_settings
from components.core.enums import ObligationKind
from components.core.init_db import db_manager, get_db
from components.core.logging_config import configure_logging
from components.period.legacy import migrate_period_document
from components.period.repository import PeriodRepository

logger = logging.getLogger("scripts.migrate_legacy_documents")


def convert_export(path: Path, kind: ObligationKind, today: date):
    """Read a JSON array of legacy period documents and convert each one."""
    documents = json.loads(path.read_text(encoding="utf-8"))
    periods, failures = [], []
    for doc in documents:
        try:
            periods.append(migrate_period_document(doc, today, kind))
        except (KeyError, ValueError, TypeError) as exc:
            logger.error("Could not convert document", extra={"document_id": doc.get("id"), "reason": str(exc)})
            failures.append(doc.get("id"))
    return periods, failures


async def migrate(path: Path, kind: ObligationKind, output: Path = None, write: bool = False) -> None:
    periods, failures = convert_export(path, kind, date.today())
    if output is not None:
        output.write_text(
            json.dumps([p.model_dump(mode="json") for p in periods], indent=2),
            encoding="utf-8",
        )
    if write:
        await db_manager.create_tables()
        async for db in get_db():
            await PeriodRepository(db).save_many(periods)
    logger.info("Legacy migration finished", extra={"converted": len(periods), "failed": len(failures)})


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("export", type=Path, help="JSON array of legacy period documents")
    parser.add_argument("--kind", choices=[k.value for k in ObligationKind], default=ObligationKind.OUTFLOW.value)
    parser.add_argument("--output", type=Path, help="Write converted periods as JSON")
    parser.add_argument("--write", action="store_true", help="Store converted periods in the database")
    args = parser.parse_args()
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL, settings.LOG_JSON)
    asyncio.run(migrate(args.export, ObligationKind(args.kind), args.output, args.write))
