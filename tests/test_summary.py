from datetime import date
from decimal import Decimal

import pytest

from components.core.enums import OwnerType, PeriodStatus, PeriodType, RecordStatus
from components.core.exceptions import SummaryNotFoundError
from components.lifecycle import triggers
from components.lifecycle.cascade import collect_summary_operations, has_relevant_changes
from components.period.materializer import build_period
from components.period.repository import PeriodRepository
from components.summary.recalculator import SummaryRecalculator, build_entry, full_rebuild_window
from components.summary.repository import SummaryRepository
from components.summary.schemas import RecalculateOperation, SummaryKey, UpdateNamesOperation


def test_entry_counts_one_period(make_obligation, make_source_period):
    period = build_period(make_obligation(), make_source_period(date(2025, 1, 1), date(2025, 1, 31)), date(2025, 1, 2))

    entry = build_entry(period)

    assert entry.period_id == "obl1_2025M01"
    assert entry.total_amount_due == Decimal("1200.00")
    assert entry.due_period_count == 1
    assert entry.status_counts == {PeriodStatus.OVERDUE.value: 1}
    assert entry.unpaid_count == 1
    assert entry.fully_paid_count == 0


def test_full_rebuild_window():
    assert full_rebuild_window(date(2025, 6, 1)) == (date(2024, 1, 1), date(2026, 12, 31))


def test_cascade_covers_user_and_group_buckets(make_obligation, make_source_period):
    january = make_source_period(date(2025, 1, 1), date(2025, 1, 31))
    period = build_period(make_obligation(group_id="family"), january, date(2025, 1, 2))

    operations = collect_summary_operations([(None, period), (None, period)])

    assert set(operations) == {
        SummaryKey("user1", OwnerType.USER, PeriodType.MONTHLY),
        SummaryKey("family", OwnerType.GROUP, PeriodType.MONTHLY),
    }
    assert operations[SummaryKey("user1", OwnerType.USER, PeriodType.MONTHLY)] == [
        RecalculateOperation(source_period_id="2025M01")
    ]


def test_irrelevant_change_is_ignored(make_obligation, make_source_period):
    period = build_period(make_obligation(), make_source_period(date(2025, 1, 1), date(2025, 1, 31)), date(2025, 1, 2))
    touched = period.model_copy(update={"daily_withholding_rate": Decimal("1")})

    assert not has_relevant_changes(period, touched)
    assert has_relevant_changes(period, period.model_copy(update={"status": PeriodStatus.PAID}))
    assert has_relevant_changes(None, period)
    assert collect_summary_operations([(period, touched)]) == {}


@pytest.mark.asyncio
async def test_targeted_recompute_builds_one_bucket(session, seeded_obligation):
    obligation, _ = seeded_obligation
    recalculator = SummaryRecalculator(session)

    result = await recalculator.recalculate_summary_bucket("user1", OwnerType.USER, "2025M01", PeriodType.MONTHLY)

    assert result.buckets_recalculated == ["2025M01"]
    summary = await SummaryRepository(session).get("user_user1_monthly")
    assert list(summary.periods) == ["2025M01"]
    assert summary.periods["2025M01"][0].obligation_id == obligation.id
    assert summary.total_item_count == 1
    assert summary.last_recalculated is not None


@pytest.mark.asyncio
async def test_operations_for_one_summary_are_applied_together(session, seeded_obligation):
    obligation, _ = seeded_obligation
    key = SummaryKey("user1", OwnerType.USER, PeriodType.WEEKLY)

    result = await SummaryRecalculator(session).batch_update_summary(key, [
        RecalculateOperation(source_period_id="2025W01"),
        RecalculateOperation(source_period_id="2025W02"),
        UpdateNamesOperation(obligation_id=obligation.id, merchant="New Landlord", description="Rent"),
    ])

    assert result.buckets_recalculated == ["2025W01", "2025W02"]
    assert result.names_updated == 2
    summary = await SummaryRepository(session).get(key.summary_id)
    assert [e.merchant for entries in summary.periods.values() for e in entries] == ["New Landlord"] * 2


@pytest.mark.asyncio
async def test_removing_last_period_deletes_bucket_key(session, seeded_obligation):
    _, period_id = seeded_obligation
    recalculator = SummaryRecalculator(session)
    await recalculator.recalculate_summary_bucket("user1", OwnerType.USER, "2025M01", PeriodType.MONTHLY)

    periods = PeriodRepository(session)
    [before] = await periods.set_record_status([period_id], RecordStatus.INACTIVE)
    after = await periods.get(period_id)
    result = await triggers.handle_period_written(session, before, after)

    assert result.success, result.errors
    summary = await SummaryRepository(session).get("user_user1_monthly")
    assert "2025M01" not in summary.periods
    assert summary.periods == {}
    assert summary.total_item_count == 0


@pytest.mark.asyncio
async def test_full_rebuild_drops_stale_buckets(session, seeded_obligation):
    obligation, _ = seeded_obligation
    summaries = SummaryRepository(session)
    recalculator = SummaryRecalculator(session)
    await recalculator.recalculate_summary_bucket("user1", OwnerType.USER, "2025W02", PeriodType.WEEKLY)

    stale = await summaries.get("user_user1_weekly")
    stale.periods["2019W01"] = stale.periods["2025W02"]
    await summaries.save(stale)

    result = await recalculator.recalculate_full_summary("user1", OwnerType.USER, PeriodType.WEEKLY, today=date(2025, 1, 20))

    assert result.errors == []
    assert result.buckets_removed == ["2019W01"]
    rebuilt = await summaries.get("user_user1_weekly")
    assert sorted(rebuilt.periods) == ["2025W01", "2025W02", "2025W03", "2025W04", "2025W05"]
    assert rebuilt.window_start == date(2024, 1, 1)
    assert rebuilt.window_end == date(2026, 12, 31)


@pytest.mark.asyncio
async def test_missing_summary_raises_not_found(session):
    key = SummaryKey("nobody", OwnerType.USER, PeriodType.WEEKLY)

    with pytest.raises(SummaryNotFoundError) as excinfo:
        await SummaryRepository(session).get_or_raise(key.summary_id)

    assert excinfo.value.summary_id == "user_nobody_weekly"
    assert excinfo.value.code == "SUMMARY_NOT_FOUND"
