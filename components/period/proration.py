"""Withholding amounts for an obligation inside an arbitrary window."""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, NamedTuple, Optional

from components.calendar.utils import cadence_days, days_in_month, days_in_range, month_segments
from components.core.enums import Cadence
from components.obligation.schemas import Obligation
from components.source_period.schemas import DateWindow

CENTS = Decimal("0.01")
RATE_PLACES = Decimal("0.000001")


class WithholdingCalculation(NamedTuple):
    amount_withheld: Decimal
    amount_due: Decimal
    is_due_period: bool
    due_date: Optional[date]
    cycle_days: int
    daily_rate: Decimal


def round_money(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def _accrue(obligation: Obligation, window: DateWindow) -> Decimal:
    """Unrounded accrual; monthly amounts use each calendar month's own day rate."""
    if obligation.cadence == Cadence.MONTHLY:
        total = Decimal(0)
        for start, end in month_segments(window.start, window.end):
            month_length = days_in_month(start.year, start.month)
            total += obligation.amount * days_in_range(start, end) / month_length
        return total
    return obligation.amount * days_in_range(window.start, window.end) / cadence_days(obligation.cadence)


def calculate_proration(obligation: Obligation, window: DateWindow) -> Decimal:
    """Amount to accrue for the obligation inside the window, rounded half-up to cents."""
    return round_money(_accrue(obligation, window))


def calculate_withholding(obligation: Obligation, window: DateWindow) -> WithholdingCalculation:
    """
    Proration plus the cycle-tracking due indicator for a window.

    The cycle's due occurrence is the obligation's last known date,
    falling back to its anchor; it is due in the window when it lies
    inside it, boundaries included.
    """
    length = days_in_range(window.start, window.end)
    due_date = obligation.last_date or obligation.anchor_date
    is_due = due_date is not None and window.start <= due_date <= window.end

    accrued = _accrue(obligation, window)
    return WithholdingCalculation(
        amount_withheld=round_money(accrued),
        amount_due=round_money(obligation.amount) if is_due else Decimal("0.00"),
        is_due_period=is_due,
        due_date=due_date,
        cycle_days=cadence_days(obligation.cadence),
        daily_rate=(accrued / length).quantize(RATE_PLACES, rounding=ROUND_HALF_UP) if length else Decimal(0),
    )


def calculate_total_withholding(obligation: Obligation, windows: Iterable[DateWindow]) -> Decimal:
    """Sum of the rounded per-window amounts."""
    return sum((calculate_proration(obligation, w) for w in windows), Decimal("0.00"))
