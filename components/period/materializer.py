"""Builds and persists one period per (obligation, source period) pair."""

import logging
from datetime import date
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from components.calendar.utils import add_months
from components.core.config import get_settings
from components.core.exceptions import BatchWriteError, MissingAnchorDateError
from components.obligation.schemas import Obligation
from components.period.occurrences import generate_occurrences, predict_next_due_date
from components.period.proration import calculate_withholding
from components.period.repository import PeriodRepository
from components.period.schemas import MaterializeResult, Period
from components.period.status import refresh_period_totals
from components.source_period.repository import SourcePeriodRepository
from components.source_period.schemas import DateWindow, SourcePeriod

logger = logging.getLogger(__name__)


def period_id_for(obligation_id: str, source_period_id: str) -> str:
    return f"{obligation_id}_{source_period_id}"


def build_period(obligation: Obligation, source_period: SourcePeriod, today: date) -> Period:
    """
    Compute a fresh period for one source period.

    Occurrences start unpaid; callers run the matcher afterwards.
    """
    occurrences = generate_occurrences(obligation, source_period)
    withholding = calculate_withholding(obligation, source_period.window)
    expected_due, expected_draw = predict_next_due_date(obligation, source_period)

    period = Period(
        id=period_id_for(obligation.id, source_period.id),
        obligation_id=obligation.id,
        owner_id=obligation.owner_id,
        group_id=obligation.group_id,
        kind=obligation.kind,
        source_period_id=source_period.id,
        period_type=source_period.period_type,
        period_start=source_period.start_date,
        period_end=source_period.end_date,
        merchant=obligation.merchant_name,
        description=obligation.description,
        user_custom_name=obligation.user_custom_name,
        cadence=obligation.cadence,
        cycle_days=withholding.cycle_days,
        daily_withholding_rate=withholding.daily_rate,
        amount_withheld=withholding.amount_withheld,
        cycle_due_in_period=withholding.is_due_period,
        amount_due=withholding.amount_due,
        amount_per_occurrence=obligation.amount,
        occurrences=occurrences,
        expected_due_date=expected_due,
        expected_draw_date=expected_draw,
    )
    return refresh_period_totals(period, today)


def apply_display_fields(period: Period, obligation: Obligation) -> Period:
    """Copy of the period carrying the obligation's current display names."""
    return period.model_copy(update={
        "merchant": obligation.merchant_name,
        "description": obligation.description,
        "user_custom_name": obligation.user_custom_name,
    })


def calculate_generation_range(
    obligation: Obligation, months_forward: Optional[int] = None, today: Optional[date] = None
) -> DateWindow:
    """From the obligation's first known date through N months past today."""
    today = today or date.today()
    if months_forward is None:
        months_forward = get_settings().GENERATION_MONTHS_FORWARD
    start = obligation.first_date or obligation.last_date or obligation.predicted_next_date
    if start is None:
        raise MissingAnchorDateError(obligation.id)
    end = add_months(today, months_forward)
    return DateWindow.of(min(start, end), end)


class PeriodMaterializer:
    """Materializes periods for an obligation across the overlapping source periods."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.periods = PeriodRepository(session)
        self.source_periods = SourcePeriodRepository(session)

    async def materialize_periods(
        self,
        obligation: Obligation,
        window: Optional[DateWindow] = None,
        today: Optional[date] = None,
        only_missing: bool = False,
    ) -> MaterializeResult:
        """
        Build and write a period for every source period overlapping the window.

        Existing periods that hold paid occurrences are never rebuilt.

        Args:
            obligation: Obligation to expand
            window: Date range, defaults to the generation range
            today: Reference date, defaults to the current date
            only_missing: Leave every existing period untouched

        Returns:
            MaterializeResult with written and skipped period ids and
            per-unit error strings
        """
        today = today or date.today()
        result = MaterializeResult()
        if window is None:
            window = calculate_generation_range(obligation, today=today)

        source_periods = await self.source_periods.get_overlapping(window.start, window.end)
        existing = await self.periods.get_many(period_id_for(obligation.id, sp.id) for sp in source_periods)

        built: List[Period] = []
        for source_period in source_periods:
            period_id = period_id_for(obligation.id, source_period.id)
            current = existing.get(period_id)
            if current is not None and (only_missing or current.is_frozen):
                result.skipped_period_ids.append(period_id)
                continue
            try:
                built.append(build_period(obligation, source_period, today))
            except Exception as exc:
                logger.exception("Failed to build period", extra={"period_id": period_id})
                result.errors.append(f"{period_id}: {exc}")

        try:
            result.count = await self.periods.save_many(built)
            result.period_ids = [p.id for p in built]
        except BatchWriteError as exc:
            logger.error("Period batch write failed", extra={"obligation_id": obligation.id, "committed": exc.committed})
            result.count = exc.committed
            result.period_ids = [p.id for p in built[:exc.committed]]
            result.errors.append(str(exc))

        logger.info(
            "Materialized periods",
            extra={
                "obligation_id": obligation.id,
                "written": result.count,
                "skipped": len(result.skipped_period_ids),
                "errors": len(result.errors),
            },
        )
        return result
