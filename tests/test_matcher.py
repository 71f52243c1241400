from datetime import date
from decimal import Decimal

import pytest

from components.core.enums import Cadence, PaymentType, PeriodStatus, PeriodType
from components.period.materializer import build_period
from components.period.matcher import (
    OccurrenceMatcher,
    assign_transactions,
    classify_payment,
    find_matching_occurrence_index,
)
from components.transaction.schemas import Transaction


def txn(transaction_id, day, amount="10.00", month=1):
    return Transaction(
        id=transaction_id,
        owner_id="user1",
        transaction_date=date(2025, month, day),
        amount=Decimal(amount),
    )


@pytest.fixture
def gym_period(make_obligation, make_source_period):
    gym = make_obligation(id="gym", cadence=Cadence.WEEKLY, amount=Decimal("-10.00"), first_date=date(2025, 1, 1))
    four_weeks = make_source_period(date(2025, 1, 1), date(2025, 1, 28), "2025X01", PeriodType.WEEKLY)
    return build_period(gym, four_weeks, today=date(2025, 1, 9))


def test_match_within_tolerance_boundary():
    due_dates = [date(2025, 1, 1)]
    assert find_matching_occurrence_index(date(2025, 1, 4), due_dates, 3) == 0
    assert find_matching_occurrence_index(date(2024, 12, 29), due_dates, 3) == 0
    assert find_matching_occurrence_index(date(2025, 1, 5), due_dates, 3) is None


def test_tie_prefers_earlier_occurrence():
    due_dates = [date(2025, 1, 1), date(2025, 1, 7)]
    assert find_matching_occurrence_index(date(2025, 1, 4), due_dates, 3) == 0


def test_taken_occurrences_are_skipped():
    due_dates = [date(2025, 1, 1), date(2025, 1, 3)]
    assert find_matching_occurrence_index(date(2025, 1, 1), due_dates, 3, taken={0}) == 1
    assert find_matching_occurrence_index(date(2025, 1, 1), due_dates, 1, taken={0}) is None


def test_payment_classification():
    due = date(2025, 1, 15)
    assert classify_payment(Decimal("12"), Decimal("10"), due, due) == PaymentType.EXTRA_PRINCIPAL
    assert classify_payment(Decimal("11"), Decimal("10"), due, due) == PaymentType.REGULAR
    assert classify_payment(Decimal("10"), Decimal("10"), date(2025, 1, 17), due) == PaymentType.CATCH_UP
    assert classify_payment(Decimal("10"), Decimal("10"), date(2025, 1, 7), due) == PaymentType.ADVANCE
    assert classify_payment(Decimal("10"), Decimal("10"), date(2025, 1, 8), due) == PaymentType.REGULAR


def test_gym_scenario_two_of_four_paid(gym_period):
    assert gym_period.number_of_occurrences == 4
    assert gym_period.total_amount_due == Decimal("40.00")

    result = assign_transactions(gym_period, [txn("t1", 1, "-10.00"), txn("t2", 8, "-10.00")], 3, date(2025, 1, 9))
    period = result.period

    assert result.matched_transaction_ids == ["t1", "t2"]
    assert period.number_of_occurrences_paid == 2
    assert period.number_of_occurrences_unpaid == 2
    assert period.total_amount_paid == Decimal("20.00")
    assert period.total_amount_unpaid == Decimal("20.00")
    assert period.status == PeriodStatus.PARTIAL
    assert period.occurrence_status_text == "2 of 4 weeks paid"
    assert period.next_unpaid_due_date == date(2025, 1, 15)

    first = period.occurrences[0]
    assert first.transaction_id == "t1"
    assert first.transaction_split_id == "t1_split_0"
    assert first.amount_paid == Decimal("10.00")
    assert first.payment_type == PaymentType.REGULAR
    assert first.is_auto_matched


def test_paid_total_equals_sum_of_occurrence_payments(gym_period):
    result = assign_transactions(gym_period, [txn("t1", 2, "12.50"), txn("t2", 16, "9.00")], 3, date(2025, 1, 20))

    assert result.period.total_amount_paid == sum(o.amount_paid for o in result.period.occurrences)
    assert result.period.occurrences[0].payment_type == PaymentType.EXTRA_PRINCIPAL
    assert result.period.occurrences[2].payment_type == PaymentType.CATCH_UP


def test_far_transaction_is_unmatched(gym_period):
    # Jan 4 is 3 days from Jan 1; Jan 26 is 4 days past the last occurrence
    result = assign_transactions(gym_period, [txn("near", 4), txn("far", 26)], 3, date(2025, 1, 9))

    assert result.matched_transaction_ids == ["near"]
    assert result.unmatched_transaction_ids == ["far"]
    assert result.period.occurrences[0].transaction_id == "near"


def test_payment_before_period_start_settles_boundary_occurrence(make_obligation, make_source_period):
    rent = make_obligation(amount=Decimal("100.00"), first_date=date(2025, 1, 1))
    march = build_period(rent, make_source_period(date(2025, 3, 1), date(2025, 3, 31), "2025M03"), date(2025, 3, 5))
    february = build_period(rent, make_source_period(date(2025, 2, 1), date(2025, 2, 28), "2025M02"), date(2025, 3, 5))
    early = [txn("early", 26, "-100.00", month=2)]

    in_march = assign_transactions(march, early, 3, date(2025, 3, 5))
    in_february = assign_transactions(february, early, 3, date(2025, 3, 5))

    assert in_march.matched_transaction_ids == ["early"]
    assert in_march.period.number_of_occurrences_paid == 1
    assert in_march.period.occurrences[0].payment_type == PaymentType.REGULAR
    assert in_february.matched_transaction_ids == []
    assert in_february.unmatched_transaction_ids == ["early"]


def test_edge_transactions_without_match_are_left_to_neighbour(gym_period):
    # Jan 31 lies within reach of the window end but no occurrence is due nearby
    result = assign_transactions(gym_period, [txn("jan31", 31), txn("feb", 2, month=2)], 3, date(2025, 1, 9))

    assert result.matched_transaction_ids == []
    assert result.unmatched_transaction_ids == []


def test_rematching_is_total_and_idempotent(gym_period):
    transactions = [txn("t1", 1), txn("t2", 8)]
    once = assign_transactions(gym_period, transactions, 3, date(2025, 1, 9)).period
    twice = assign_transactions(once, transactions, 3, date(2025, 1, 9)).period

    assert once.model_dump(mode="json") == twice.model_dump(mode="json")

    removed = assign_transactions(twice, [transactions[1]], 3, date(2025, 1, 9)).period
    assert not removed.occurrences[0].is_paid
    assert removed.occurrences[0].transaction_id is None
    assert removed.occurrences[1].transaction_id == "t2"
    assert removed.number_of_occurrences_paid == 1


def test_one_transaction_settles_only_one_occurrence(gym_period):
    result = assign_transactions(gym_period, [txn("a", 8), txn("b", 8)], 3, date(2025, 1, 9))

    assert result.period.occurrences[1].transaction_id == "a"
    assert result.unmatched_transaction_ids == ["b"]


@pytest.mark.asyncio
async def test_matcher_skips_write_when_nothing_changed(session, seeded_obligation):
    obligation, period_id = seeded_obligation
    matcher = OccurrenceMatcher(session)

    first = await matcher.match_transactions_to_occurrences(period_id, today=date(2025, 1, 20))
    second = await matcher.match_transactions_to_occurrences(period_id, today=date(2025, 1, 20))

    assert first.written
    assert first.matched_transaction_ids == ["rent-jan"]
    assert not second.written
    assert second.matched_transaction_ids == ["rent-jan"]
