from datetime import date
from decimal import Decimal

from components.core.enums import Cadence, ObligationKind, PeriodType, RecordStatus
from components.period.legacy import (
    flatten_amount,
    migrate_obligation_document,
    migrate_period_document,
    parse_legacy_date,
)


def test_flatten_amount_accepts_both_shapes():
    assert flatten_amount(-12.5) == Decimal("12.5")
    assert flatten_amount({"amount": -89.99, "isoCurrencyCode": "USD"}) == Decimal("89.99")
    assert flatten_amount(None) == Decimal("0")


def test_parse_legacy_dates():
    assert parse_legacy_date("2025-01-15T00:00:00Z") == date(2025, 1, 15)
    assert parse_legacy_date({"_seconds": 1736899200, "_nanoseconds": 0}) == date(2025, 1, 15)
    assert parse_legacy_date(None) is None


def test_migrate_nested_obligation():
    obligation = migrate_obligation_document({
        "id": "out1",
        "userId": "user1",
        "groupIds": ["family", "other"],
        "description": "NETFLIX",
        "merchantName": "Netflix",
        "averageAmount": {"amount": -15.49, "isoCurrencyCode": "EUR"},
        "frequency": "MONTHLY",
        "firstDate": "2024-03-05",
        "lastDate": "2025-01-05",
        "isActive": False,
        "transactionIds": ["t1"],
    })

    assert obligation.amount == Decimal("15.49")
    assert obligation.currency == "EUR"
    assert obligation.group_id == "family"
    assert obligation.cadence == Cadence.MONTHLY
    assert obligation.status == RecordStatus.INACTIVE
    assert obligation.anchor_date == date(2025, 1, 5)


def test_parallel_arrays_become_occurrence_list():
    period = migrate_period_document({
        "id": "gym_2025M01",
        "outflowId": "gym",
        "ownerId": "user1",
        "sourcePeriodId": "2025M01",
        "periodType": "monthly",
        "periodStartDate": "2025-01-01",
        "periodEndDate": "2025-01-31",
        "frequency": "WEEKLY",
        "averageAmount": 10,
        "occurrenceDueDates": ["2025-01-01", "2025-01-08", "2025-01-15", "2025-01-22"],
        "occurrencePaidFlags": [True, True, False, False],
        "occurrenceTransactionIds": ["t1", "t2", None, None],
    }, today=date(2025, 1, 9), kind=ObligationKind.OUTFLOW)

    assert period.obligation_id == "gym"
    assert period.period_type == PeriodType.MONTHLY
    assert [o.id for o in period.occurrences][:2] == ["2025M01_occ_0", "2025M01_occ_1"]
    assert period.occurrences[1].transaction_split_id == "t2_split_0"
    assert period.number_of_occurrences_paid == 2
    assert period.total_amount_due == Decimal("40")
    assert period.total_amount_paid == Decimal("20")
    assert period.occurrence_status_text == "2 of 4 weeks paid"


def test_object_list_wins_over_arrays():
    period = migrate_period_document({
        "outflowId": "rent",
        "userId": "user1",
        "sourcePeriodId": "2025M01",
        "periodStartDate": "2025-01-01",
        "periodEndDate": "2025-01-31",
        "frequency": "MONTHLY",
        "averageAmount": {"amount": 1200},
        "occurrenceDueDates": ["2025-01-02"],
        "occurrences": [{
            "dueDate": "2025-01-01",
            "isPaid": True,
            "amountPaid": 1200,
            "transactionId": "t9",
            "paymentType": "REGULAR",
        }],
    }, today=date(2025, 1, 20))

    assert period.id == "rent_2025M01"
    [occurrence] = period.occurrences
    assert occurrence.due_date == date(2025, 1, 1)
    assert occurrence.payment_type.value == "regular"
    assert period.total_amount_paid == Decimal("1200")
