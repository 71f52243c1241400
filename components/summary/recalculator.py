"""Rebuilds summary buckets from current period state."""

import logging
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from components.core.config import get_settings
from components.core.enums import OwnerType, PeriodType
from components.period.repository import PeriodRepository
from components.period.schemas import Period
from components.source_period.schemas import DateWindow
from components.summary.repository import SummaryRepository
from components.summary.schemas import (
    RecalculateOperation,
    Summary,
    SummaryEntry,
    SummaryKey,
    SummaryOperation,
    SummaryUpdateResult,
    UpdateNamesOperation,
)

logger = logging.getLogger(__name__)


def build_entry(period: Period) -> SummaryEntry:
    """One summary entry per period; counts are 0/1 so buckets sum cleanly."""
    fully_paid = period.number_of_occurrences > 0 and period.number_of_occurrences_unpaid == 0
    return SummaryEntry(
        period_id=period.id,
        obligation_id=period.obligation_id,
        kind=period.kind,
        group_id=period.group_id,
        merchant=period.merchant,
        description=period.description,
        user_custom_name=period.user_custom_name,
        total_amount_due=period.total_amount_due,
        total_amount_paid=period.total_amount_paid,
        total_amount_unpaid=period.total_amount_unpaid,
        total_amount_withheld=period.amount_withheld,
        amount_per_occurrence=period.amount_per_occurrence,
        is_due_period=period.is_due_period,
        due_period_count=1 if period.is_due_period else 0,
        status=period.status,
        status_counts={period.status.value: 1},
        fully_paid_count=1 if fully_paid else 0,
        unpaid_count=0 if fully_paid else 1,
        payment_progress_percentage=period.payment_progress_percentage,
        number_of_occurrences=period.number_of_occurrences,
        number_of_occurrences_paid=period.number_of_occurrences_paid,
        number_of_occurrences_unpaid=period.number_of_occurrences_unpaid,
        occurrence_status_text=period.occurrence_status_text,
        expected_due_date=period.expected_due_date,
    )


def build_bucket(periods: Iterable[Period]) -> List[SummaryEntry]:
    return [build_entry(p) for p in sorted(periods, key=lambda p: p.id)]


def full_rebuild_window(today: date) -> DateWindow:
    """Jan 1 of the year N years back through Dec 31 of the year N years ahead."""
    settings = get_settings()
    return DateWindow.of(
        date(today.year - settings.SUMMARY_WINDOW_YEARS_BACK, 1, 1),
        date(today.year + settings.SUMMARY_WINDOW_YEARS_FORWARD, 12, 31),
    )


class SummaryRecalculator:
    """Targeted and full recomputation of per-owner summaries."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.periods = PeriodRepository(session)
        self.summaries = SummaryRepository(session)

    async def _load(self, key: SummaryKey) -> Summary:
        summary = await self.summaries.get_for_update(key.summary_id)
        if summary is None:
            summary = Summary(
                id=key.summary_id,
                owner_id=key.owner_id,
                owner_type=key.owner_type,
                period_type=key.period_type,
            )
        return summary

    async def _bucket(self, key: SummaryKey, source_period_id: str) -> List[SummaryEntry]:
        periods = await self.periods.list_for_bucket(
            key.owner_id, key.owner_type, source_period_id, key.period_type
        )
        return build_bucket(periods)

    async def batch_update_summary(
        self, key: SummaryKey, operations: List[SummaryOperation]
    ) -> SummaryUpdateResult:
        """
        Apply several operations to one summary with a single read and write.

        Args:
            key: Owner, owner type and period type of the summary
            operations: Recalculate and name-update operations, applied in order

        Returns:
            SummaryUpdateResult listing touched buckets and per-bucket errors
        """
        result = SummaryUpdateResult(summary_id=key.summary_id)
        summary = await self._load(key)
        buckets: Dict[str, List[SummaryEntry]] = dict(summary.periods)

        for operation in operations:
            if isinstance(operation, RecalculateOperation):
                try:
                    entries = await self._bucket(key, operation.source_period_id)
                except Exception as exc:
                    logger.exception(
                        "Summary bucket recalculation failed",
                        extra={"summary_id": key.summary_id, "source_period_id": operation.source_period_id},
                    )
                    result.errors.append(f"{operation.source_period_id}: {exc}")
                    continue
                if entries:
                    buckets[operation.source_period_id] = entries
                    result.buckets_recalculated.append(operation.source_period_id)
                elif buckets.pop(operation.source_period_id, None) is not None:
                    result.buckets_removed.append(operation.source_period_id)
            elif isinstance(operation, UpdateNamesOperation):
                result.names_updated += self._apply_names(buckets, operation)

        await self._write(summary, buckets)
        result.total_item_count = sum(len(entries) for entries in buckets.values())
        logger.info(
            "Summary updated",
            extra={
                "summary_id": key.summary_id,
                "operations": len(operations),
                "items": result.total_item_count,
            },
        )
        return result

    @staticmethod
    def _apply_names(buckets: Dict[str, List[SummaryEntry]], operation: UpdateNamesOperation) -> int:
        updated = 0
        for source_period_id, entries in buckets.items():
            renamed = []
            for entry in entries:
                if entry.obligation_id == operation.obligation_id:
                    entry = entry.model_copy(update={
                        "merchant": operation.merchant,
                        "description": operation.description,
                        "user_custom_name": operation.user_custom_name,
                    })
                    updated += 1
                renamed.append(entry)
            buckets[source_period_id] = renamed
        return updated

    async def _write(
        self,
        summary: Summary,
        buckets: Dict[str, List[SummaryEntry]],
        window: Optional[DateWindow] = None,
    ) -> None:
        update = {
            "periods": dict(sorted(buckets.items())),
            "total_item_count": sum(len(entries) for entries in buckets.values()),
            "last_recalculated": datetime.utcnow(),
        }
        if window is not None:
            update["window_start"], update["window_end"] = window.start, window.end
        await self.summaries.save(summary.model_copy(update=update))

    async def recalculate_summary_bucket(
        self,
        owner_id: str,
        owner_type: OwnerType,
        source_period_id: str,
        period_type: PeriodType,
    ) -> SummaryUpdateResult:
        """Rebuild exactly one source period bucket of one summary."""
        key = SummaryKey(owner_id, owner_type, period_type)
        return await self.batch_update_summary(key, [RecalculateOperation(source_period_id=source_period_id)])

    async def recalculate_full_summary(
        self,
        owner_id: str,
        owner_type: OwnerType,
        period_type: PeriodType,
        today: Optional[date] = None,
    ) -> SummaryUpdateResult:
        """
        Rebuild every bucket of a summary inside the configured window.

        Buckets with no active periods left are removed; a bucket whose
        recomputation fails keeps its previous entries.
        """
        window = full_rebuild_window(today or date.today())
        key = SummaryKey(owner_id, owner_type, period_type)
        result = SummaryUpdateResult(summary_id=key.summary_id)

        summary = await self._load(key)
        source_period_ids = await self.periods.list_source_period_ids(
            owner_id, owner_type, period_type, window.start, window.end
        )

        buckets: Dict[str, List[SummaryEntry]] = {}
        for source_period_id in source_period_ids:
            try:
                entries = await self._bucket(key, source_period_id)
            except Exception as exc:
                logger.exception(
                    "Summary bucket recalculation failed",
                    extra={"summary_id": key.summary_id, "source_period_id": source_period_id},
                )
                result.errors.append(f"{source_period_id}: {exc}")
                if source_period_id in summary.periods:
                    buckets[source_period_id] = summary.periods[source_period_id]
                continue
            if entries:
                buckets[source_period_id] = entries
                result.buckets_recalculated.append(source_period_id)

        result.buckets_removed = sorted(set(summary.periods) - set(buckets))
        await self._write(summary, buckets, window)
        result.total_item_count = sum(len(entries) for entries in buckets.values())
        logger.info(
            "Summary rebuilt",
            extra={"summary_id": key.summary_id, "buckets": len(buckets), "errors": len(result.errors)},
        )
        return result
