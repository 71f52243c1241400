from datetime import date
from decimal import Decimal

from components.core.enums import Cadence, PaymentType, PeriodStatus
from components.period.schemas import Occurrence
from components.period.status import (
    calculate_period_status,
    occurrence_status_text,
    payment_breakdown,
    payment_progress_percentage,
)


def occ(day, paid=False, payment_type=None, amount="10.00"):
    return Occurrence(
        id=f"p_occ_{day}",
        due_date=date(2025, 1, day),
        draw_date=date(2025, 1, day),
        amount_due=Decimal("10.00"),
        is_paid=paid,
        amount_paid=Decimal(amount) if paid else Decimal("0.00"),
        payment_type=payment_type,
    )


def test_no_occurrences_is_pending():
    assert calculate_period_status([], date(2025, 1, 10)) == PeriodStatus.PENDING


def test_all_paid():
    occurrences = [occ(1, True), occ(8, True)]
    assert calculate_period_status(occurrences, date(2025, 1, 10)) == PeriodStatus.PAID
    assert calculate_period_status(occurrences, date(2025, 1, 5)) == PeriodStatus.PAID_EARLY


def test_partial_and_overdue():
    occurrences = [occ(1, True), occ(8), occ(15)]
    assert calculate_period_status(occurrences, date(2025, 1, 8)) == PeriodStatus.PARTIAL
    assert calculate_period_status(occurrences, date(2025, 1, 9)) == PeriodStatus.OVERDUE


def test_unpaid_due_soon_and_pending():
    occurrences = [occ(15)]
    assert calculate_period_status(occurrences, date(2025, 1, 1), due_soon_days=3) == PeriodStatus.PENDING
    assert calculate_period_status(occurrences, date(2025, 1, 12), due_soon_days=3) == PeriodStatus.DUE_SOON
    assert calculate_period_status(occurrences, date(2025, 1, 16), due_soon_days=3) == PeriodStatus.OVERDUE


def test_payment_breakdown_by_type():
    breakdown = payment_breakdown([
        occ(1, True, PaymentType.REGULAR),
        occ(8, True, PaymentType.EXTRA_PRINCIPAL, "25.00"),
        occ(15),
    ])
    assert breakdown[PaymentType.REGULAR] == Decimal("10.00")
    assert breakdown[PaymentType.EXTRA_PRINCIPAL] == Decimal("25.00")
    assert breakdown[PaymentType.ADVANCE] == Decimal("0")


def test_status_text_units():
    assert occurrence_status_text(Cadence.WEEKLY, 2, 4) == "2 of 4 weeks paid"
    assert occurrence_status_text(Cadence.BIWEEKLY, 1, 2) == "1 of 2 bi-weekly periods paid"
    assert occurrence_status_text(Cadence.MONTHLY, 0, 1) == "0 of 1 months paid"
    assert occurrence_status_text(Cadence.MONTHLY, 0, 0) == ""


def test_progress_percentage():
    assert payment_progress_percentage(Decimal("20"), Decimal("40")) == 50
    assert payment_progress_percentage(Decimal("0"), Decimal("0")) == 0
    assert payment_progress_percentage(Decimal("60"), Decimal("40")) == 100
