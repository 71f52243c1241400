"""
Reacts to obligation, transaction and period writes by rebuilding the
derived records.

Every entry point catches its own failures and reports them on the
returned OrchestrationResult; nothing propagates back to the write that
triggered it.
"""

import logging
from datetime import date
from typing import Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from components.core.enums import RecordStatus
from components.lifecycle import cascade
from components.lifecycle.cascade import PeriodChange
from components.lifecycle.schemas import OrchestrationResult
from components.obligation import changes as obligation_changes
from components.obligation.repository import ObligationRepository
from components.obligation.schemas import Obligation
from components.period.materializer import PeriodMaterializer, apply_display_fields, build_period
from components.period.matcher import OccurrenceMatcher
from components.period.repository import PeriodRepository
from components.period.schemas import Period
from components.source_period.repository import SourcePeriodRepository
from components.summary.recalculator import SummaryRecalculator
from components.summary.schemas import SummaryKey, SummaryOperation, UpdateNamesOperation

logger = logging.getLogger(__name__)


class PeriodLifecycleOrchestrator:
    """Keeps periods and summaries in step with their obligations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.obligations = ObligationRepository(session)
        self.periods = PeriodRepository(session)
        self.source_periods = SourcePeriodRepository(session)
        self.materializer = PeriodMaterializer(session)
        self.matcher = OccurrenceMatcher(session)
        self.recalculator = SummaryRecalculator(session)

    async def _fail(self, result: OrchestrationResult, exc: Exception) -> None:
        logger.exception("Orchestration failed", extra={"event": result.event, "obligation_id": result.obligation_id})
        await self.session.rollback()
        result.errors.append(f"{type(exc).__name__}: {exc}")

    @staticmethod
    def _finish(result: OrchestrationResult) -> OrchestrationResult:
        result.success = not result.errors
        logger.info(
            "Orchestration finished",
            extra={
                "event": result.event,
                "obligation_id": result.obligation_id,
                "success": result.success,
                "periods_created": result.periods_created,
                "periods_updated": result.periods_updated,
                "periods_skipped": result.periods_skipped,
                "summaries_updated": result.summaries_updated,
            },
        )
        return result

    async def _match_periods(
        self, periods: List[Period], result: OrchestrationResult, today: Optional[date]
    ) -> List[PeriodChange]:
        """Re-run the matcher per period; failures are collected per period."""
        period_changes = []
        for period in periods:
            try:
                match, after = await self.matcher.match_period(period, today)
            except Exception as exc:
                logger.exception("Matching failed", extra={"period_id": period.id})
                await self.session.rollback()
                result.errors.append(f"{period.id}: {exc}")
                continue
            if match.written:
                period_changes.append((period, after))
        return period_changes

    async def _cascade(
        self,
        period_changes: List[PeriodChange],
        result: OrchestrationResult,
        extra_operations: Optional[Dict[SummaryKey, List[SummaryOperation]]] = None,
    ) -> None:
        operations = cascade.merge_operations(
            cascade.collect_summary_operations(period_changes), extra_operations or {}
        )
        for key, key_operations in operations.items():
            try:
                update = await self.recalculator.batch_update_summary(key, key_operations)
            except Exception as exc:
                logger.exception("Summary update failed", extra={"summary_id": key.summary_id})
                await self.session.rollback()
                result.errors.append(f"{key.summary_id}: {exc}")
                continue
            result.summaries_updated += 1
            result.errors.extend(update.errors)

    async def _materialize_and_match(
        self,
        obligation: Obligation,
        result: OrchestrationResult,
        today: Optional[date],
        only_missing: bool = False,
    ) -> List[PeriodChange]:
        materialized = await self.materializer.materialize_periods(
            obligation, today=today, only_missing=only_missing
        )
        result.periods_created += materialized.count
        result.periods_skipped += len(materialized.skipped_period_ids)
        result.errors.extend(materialized.errors)

        written = list((await self.periods.get_many(materialized.period_ids)).values())
        written.sort(key=lambda p: (p.period_start, p.id))
        period_changes: List[PeriodChange] = [(None, p) for p in written]
        if obligation.transaction_ids:
            matched = {after.id: after for _, after in await self._match_periods(written, result, today)}
            period_changes = [(None, matched.get(p.id, p)) for p in written]
        return period_changes

    async def on_obligation_created(
        self, obligation_id: str, today: Optional[date] = None
    ) -> OrchestrationResult:
        """
        Materialize periods for a new obligation, match its known
        transactions and refresh the affected summaries.
        """
        result = OrchestrationResult(event="obligation_created", obligation_id=obligation_id)
        try:
            obligation = await self.obligations.get_or_raise(obligation_id)
            if not obligation.is_active:
                logger.info("Skipping inactive obligation", extra={"obligation_id": obligation_id})
                return self._finish(result)
            period_changes = await self._materialize_and_match(obligation, result, today)
            await self._cascade(period_changes, result)
        except Exception as exc:
            await self._fail(result, exc)
        return self._finish(result)

    async def on_obligation_updated(
        self, before: Obligation, after: Obligation, today: Optional[date] = None
    ) -> OrchestrationResult:
        """
        Propagate an obligation update to its periods.

        Amount and schedule changes rebuild only periods without paid
        occurrences. Name and group changes reach every period. A changed
        transaction set re-runs the matcher on every active period.
        Reactivation materializes like creation; deactivation only stops
        further generation.
        """
        today = today or date.today()
        result = OrchestrationResult(event="obligation_updated", obligation_id=after.id)
        changed = obligation_changes.detect_changes(before, after)
        result.fields_updated = sorted(changed)
        if not changed:
            return self._finish(result)

        try:
            period_changes: List[PeriodChange] = []
            extra_operations: Dict[SummaryKey, List[SummaryOperation]] = {}
            reactivated = obligation_changes.STATUS in changed and after.is_active
            if reactivated:
                period_changes.extend(await self._materialize_and_match(after, result, today))

            periods = await self.periods.list_for_obligation(after.id, active_only=False)
            result.periods_queried = len(periods)
            current = {p.id: p for p in periods}
            updated: Dict[str, Period] = {}

            rebuild = after.is_active and not reactivated and bool(
                changed & {obligation_changes.AMOUNT, obligation_changes.SCHEDULE}
            )
            if rebuild:
                for period in periods:
                    if not period.is_active:
                        continue
                    if period.is_frozen:
                        result.periods_skipped += 1
                        continue
                    try:
                        source_period = await self.source_periods.get_or_raise(period.source_period_id)
                        updated[period.id] = build_period(after, source_period, today)
                    except Exception as exc:
                        logger.exception("Period rebuild failed", extra={"period_id": period.id})
                        result.errors.append(f"{period.id}: {exc}")

            if changed & {obligation_changes.NAMES, obligation_changes.GROUP}:
                for period in periods:
                    base = updated.get(period.id, period)
                    updated[period.id] = apply_display_fields(base, after).model_copy(
                        update={"group_id": after.group_id}
                    )

            if updated:
                result.periods_updated += await self.periods.save_many(list(updated.values()))
                period_changes.extend((current[pid], period) for pid, period in updated.items())

            if obligation_changes.NAMES in changed:
                names = UpdateNamesOperation(
                    obligation_id=after.id,
                    merchant=after.merchant_name,
                    description=after.description,
                    user_custom_name=after.user_custom_name,
                )
                extra_operations = cascade.name_update_operations(periods, names)

            if after.is_active and not reactivated:
                if obligation_changes.TRANSACTION_IDS in changed:
                    targets = [updated.get(p.id, p) for p in periods if p.is_active]
                else:
                    targets = [p for pid, p in updated.items() if current[pid].is_active and rebuild]
                for before_period, after_period in await self._match_periods(targets, result, today):
                    period_changes.append((current.get(before_period.id), after_period))

            if obligation_changes.STATUS in changed and not after.is_active:
                logger.info("Obligation deactivated, period generation stopped", extra={"obligation_id": after.id})

            await self._cascade(period_changes, result, extra_operations)
        except Exception as exc:
            await self._fail(result, exc)
        return self._finish(result)

    async def extend_periods(self, obligation_id: str, today: Optional[date] = None) -> OrchestrationResult:
        """Create periods for source periods that have none yet for this obligation."""
        result = OrchestrationResult(event="extend_periods", obligation_id=obligation_id)
        try:
            obligation = await self.obligations.get_or_raise(obligation_id)
            if obligation.is_active:
                period_changes = await self._materialize_and_match(obligation, result, today, only_missing=True)
                await self._cascade(period_changes, result)
        except Exception as exc:
            await self._fail(result, exc)
        return self._finish(result)

    async def regenerate_periods(self, obligation_id: str, today: Optional[date] = None) -> OrchestrationResult:
        """
        Rebuild all unfrozen periods over the generation range and
        deactivate unfrozen periods that fall outside it.
        """
        result = OrchestrationResult(event="regenerate_periods", obligation_id=obligation_id)
        try:
            obligation = await self.obligations.get_or_raise(obligation_id)
            existing = await self.periods.list_for_obligation(obligation_id)
            result.periods_queried = len(existing)
            if not obligation.is_active:
                logger.info("Skipping inactive obligation", extra={"obligation_id": obligation_id})
                return self._finish(result)
            period_changes = await self._materialize_and_match(obligation, result, today)

            kept = {after.id for _, after in period_changes}
            stale = [p for p in existing if p.id not in kept and not p.is_frozen]
            if stale:
                await self.periods.set_record_status([p.id for p in stale], RecordStatus.INACTIVE)
                result.periods_deactivated = len(stale)
                period_changes.extend(
                    (p, p.model_copy(update={"record_status": RecordStatus.INACTIVE})) for p in stale
                )
            await self._cascade(period_changes, result)
        except Exception as exc:
            await self._fail(result, exc)
        return self._finish(result)

    async def on_transaction_changed(
        self,
        transaction_id: str,
        owner_id: str,
        today: Optional[date] = None,
        removed: bool = False,
    ) -> OrchestrationResult:
        """
        Re-match the active periods of every obligation linked to a
        re-dated, re-valued or removed transaction, then refresh the
        affected summaries. A removed transaction is also unlinked.
        """
        event = "transaction_removed" if removed else "transaction_changed"
        result = OrchestrationResult(event=event, transaction_id=transaction_id)
        try:
            period_changes: List[PeriodChange] = []
            for obligation in await self.obligations.list_linked_to(owner_id, transaction_id):
                if removed:
                    await self.obligations.unlink_transaction(obligation.id, transaction_id)
                periods = await self.periods.list_for_obligation(obligation.id)
                result.periods_queried += len(periods)
                changes = await self._match_periods(periods, result, today)
                result.periods_updated += len(changes)
                period_changes.extend(changes)
            await self._cascade(period_changes, result)
        except Exception as exc:
            await self._fail(result, exc)
        return self._finish(result)

    async def on_period_written(
        self, before: Optional[Period], after: Optional[Period]
    ) -> OrchestrationResult:
        """Refresh the user bucket, and the group bucket for grouped periods."""
        period = after or before
        result = OrchestrationResult(
            event="period_written", obligation_id=period.obligation_id if period else None
        )
        try:
            await self._cascade([(before, after)], result)
        except Exception as exc:
            await self._fail(result, exc)
        return self._finish(result)
