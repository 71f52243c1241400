"""Period status, payment progress and derived totals."""

from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from components.core.config import get_settings
from components.core.enums import Cadence, PaymentType, PeriodStatus
from components.period.schemas import Occurrence, Period, ZERO

_OCCURRENCE_UNITS = {
    Cadence.WEEKLY: "weeks",
    Cadence.BIWEEKLY: "bi-weekly periods",
    Cadence.SEMI_MONTHLY: "semi-monthly periods",
    Cadence.MONTHLY: "months",
    Cadence.ANNUALLY: "annual periods",
}


def calculate_period_status(
    occurrences: List[Occurrence], today: date, due_soon_days: Optional[int] = None
) -> PeriodStatus:
    if due_soon_days is None:
        due_soon_days = get_settings().DUE_SOON_DAYS
    if not occurrences:
        return PeriodStatus.PENDING

    paid = [o for o in occurrences if o.is_paid]
    unpaid = [o for o in occurrences if not o.is_paid]

    if not unpaid:
        return PeriodStatus.PAID_EARLY if occurrences[-1].due_date > today else PeriodStatus.PAID
    if any(o.due_date < today for o in unpaid):
        return PeriodStatus.OVERDUE
    if paid:
        return PeriodStatus.PARTIAL
    if (unpaid[0].due_date - today).days <= due_soon_days:
        return PeriodStatus.DUE_SOON
    return PeriodStatus.PENDING


def payment_breakdown(occurrences: List[Occurrence]) -> Dict[PaymentType, Decimal]:
    """Paid amount per payment classification."""
    breakdown = {payment_type: ZERO for payment_type in PaymentType}
    for occurrence in occurrences:
        if occurrence.is_paid and occurrence.payment_type is not None:
            breakdown[occurrence.payment_type] += occurrence.amount_paid
    return breakdown


def occurrence_status_text(cadence: Cadence, paid: int, total: int) -> str:
    """Human readable progress, e.g. "2 of 4 weeks paid"."""
    if total == 0:
        return ""
    return f"{paid} of {total} {_OCCURRENCE_UNITS[cadence]} paid"


def payment_progress_percentage(total_paid: Decimal, total_due: Decimal) -> int:
    if total_due <= 0:
        return 0
    return min(int((total_paid / total_due * 100).quantize(Decimal(1))), 100)


def refresh_period_totals(period: Period, today: date) -> Period:
    """
    Recompute every value derived from the occurrence list.

    Args:
        period: Period whose occurrences are current
        today: Reference date for overdue and due-soon checks

    Returns:
        A new period with counts, totals, status and due dates filled in
    """
    occurrences = period.occurrences
    paid_count = sum(1 for o in occurrences if o.is_paid)
    total_due = period.amount_per_occurrence * len(occurrences)
    total_paid = sum((o.amount_paid for o in occurrences), ZERO)
    next_unpaid = next((o.due_date for o in occurrences if not o.is_paid), None)

    return period.model_copy(update={
        "number_of_occurrences": len(occurrences),
        "number_of_occurrences_paid": paid_count,
        "number_of_occurrences_unpaid": len(occurrences) - paid_count,
        "total_amount_due": total_due,
        "total_amount_paid": total_paid,
        "total_amount_unpaid": max(total_due - total_paid, ZERO),
        "is_due_period": len(occurrences) > 0,
        "status": calculate_period_status(occurrences, today),
        "occurrence_status_text": occurrence_status_text(period.cadence, paid_count, len(occurrences)),
        "payment_progress_percentage": payment_progress_percentage(total_paid, total_due),
        "first_due_date": occurrences[0].due_date if occurrences else None,
        "last_due_date": occurrences[-1].due_date if occurrences else None,
        "next_unpaid_due_date": next_unpaid,
    })
