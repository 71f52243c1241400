"""Calendar arithmetic shared by the occurrence and proration calculators."""

import calendar
import logging
from datetime import date, timedelta
from typing import List, Tuple, Union

from components.core.enums import Cadence

logger = logging.getLogger(__name__)

# Nominal cycle length in days, used where a cadence needs a fixed divisor
CADENCE_NOMINAL_DAYS = {
    Cadence.WEEKLY: 7,
    Cadence.BIWEEKLY: 14,
    Cadence.SEMI_MONTHLY: 15,
    Cadence.MONTHLY: 30,
    Cadence.ANNUALLY: 365,
}

_CADENCE_ALIASES = {
    "weekly": Cadence.WEEKLY,
    "biweekly": Cadence.BIWEEKLY,
    "bi_weekly": Cadence.BIWEEKLY,
    "bi-weekly": Cadence.BIWEEKLY,
    "fortnightly": Cadence.BIWEEKLY,
    "semimonthly": Cadence.SEMI_MONTHLY,
    "semi_monthly": Cadence.SEMI_MONTHLY,
    "semi-monthly": Cadence.SEMI_MONTHLY,
    "monthly": Cadence.MONTHLY,
    "annually": Cadence.ANNUALLY,
    "annual": Cadence.ANNUALLY,
    "yearly": Cadence.ANNUALLY,
}


def parse_cadence(value: Union[str, Cadence, None]) -> Cadence:
    """
    Normalize a cadence value coming from storage or a provider.

    Unknown values fall back to MONTHLY with a warning instead of failing.
    """
    if isinstance(value, Cadence):
        return value
    if value:
        cadence = _CADENCE_ALIASES.get(str(value).strip().lower())
        if cadence is not None:
            return cadence
    logger.warning("Unknown cadence %r, defaulting to monthly", value, extra={"cadence": value})
    return Cadence.MONTHLY


def cadence_days(cadence: Cadence) -> int:
    return CADENCE_NOMINAL_DAYS[cadence]


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def add_months(d: date, months: int) -> date:
    """Shift by whole calendar months, clamping to the last valid day."""
    month_index = d.month - 1 + months
    year = d.year + month_index // 12
    month = month_index % 12 + 1
    return date(year, month, min(d.day, days_in_month(year, month)))


def add_interval(d: date, cadence: Cadence, count: int = 1) -> date:
    """
    Step ``count`` cadence intervals from ``d`` (negative steps go backward).

    Args:
        d: Starting date
        cadence: Recurrence frequency
        count: Number of intervals

    Returns:
        The shifted date; month and year steps clamp the day of month
    """
    if cadence == Cadence.MONTHLY:
        return add_months(d, count)
    if cadence == Cadence.ANNUALLY:
        return add_months(d, 12 * count)
    return d + timedelta(days=CADENCE_NOMINAL_DAYS[cadence] * count)


def nth_occurrence(anchor: date, cadence: Cadence, k: int) -> date:
    """Date of the k-th recurrence relative to the anchor (k may be negative)."""
    return add_interval(anchor, cadence, k)


def adjust_for_weekend(d: date) -> date:
    """Move Saturday to Monday (+2) and Sunday to Monday (+1)."""
    weekday = d.weekday()
    if weekday == calendar.SATURDAY:
        return d + timedelta(days=2)
    if weekday == calendar.SUNDAY:
        return d + timedelta(days=1)
    return d


def days_in_range(start: date, end: date) -> int:
    """Inclusive day count; zero when end precedes start."""
    return max((end - start).days + 1, 0)


def month_segments(start: date, end: date) -> List[Tuple[date, date]]:
    """Split an inclusive range into pieces that each lie in one calendar month."""
    segments = []
    current = start
    while current <= end:
        month_end = date(current.year, current.month, days_in_month(current.year, current.month))
        segment_end = min(month_end, end)
        segments.append((current, segment_end))
        current = segment_end + timedelta(days=1)
    return segments
