"""Expansion of a recurring obligation into dated occurrences inside a window."""

from datetime import date
from typing import List, NamedTuple, Optional, Tuple

from components.calendar.utils import adjust_for_weekend, cadence_days, nth_occurrence
from components.core.exceptions import MissingAnchorDateError
from components.obligation.schemas import Obligation
from components.period.schemas import Occurrence
from components.source_period.schemas import SourcePeriod


class PeriodOccurrences(NamedTuple):
    count: int
    occurrences: List[Occurrence]
    due_dates: List[date]
    draw_dates: List[date]


def _anchor(obligation: Obligation) -> date:
    anchor = obligation.anchor_date
    if anchor is None:
        raise MissingAnchorDateError(obligation.id)
    return anchor


def first_index_on_or_after(anchor: date, cadence, start: date) -> int:
    """
    Index k of the first recurrence on or after ``start``.

    Dates are always computed as anchor + k intervals so month-end anchors
    keep their day (Jan 31 gives Feb 28, then Mar 31).
    """
    k = (start - anchor).days // cadence_days(cadence)
    while nth_occurrence(anchor, cadence, k) > start:
        k -= 1
    while nth_occurrence(anchor, cadence, k) < start:
        k += 1
    return k


def generate_occurrences(obligation: Obligation, source_period: SourcePeriod) -> List[Occurrence]:
    """
    Expand an obligation into the occurrences that fall inside a source period.

    Args:
        obligation: Recurring bill or income stream
        source_period: Target window, both ends inclusive

    Returns:
        Ordered occurrences; empty when no due date falls inside the window

    Raises:
        MissingAnchorDateError: the obligation has no date to step from
    """
    anchor = _anchor(obligation)
    start, end = source_period.window
    k = first_index_on_or_after(anchor, obligation.cadence, start)

    occurrences = []
    due_date = nth_occurrence(anchor, obligation.cadence, k)
    while due_date <= end:
        occurrences.append(Occurrence(
            id=f"{source_period.id}_occ_{len(occurrences)}",
            due_date=due_date,
            draw_date=adjust_for_weekend(due_date),
            amount_due=obligation.amount,
        ))
        k += 1
        due_date = nth_occurrence(anchor, obligation.cadence, k)
    return occurrences


def calculate_occurrences_in_period(
    obligation: Obligation, source_period: SourcePeriod
) -> PeriodOccurrences:
    occurrences = generate_occurrences(obligation, source_period)
    return PeriodOccurrences(
        count=len(occurrences),
        occurrences=occurrences,
        due_dates=[o.due_date for o in occurrences],
        draw_dates=[o.draw_date for o in occurrences],
    )


def predict_next_due_date(
    obligation: Obligation, source_period: SourcePeriod
) -> Tuple[Optional[date], Optional[date]]:
    """
    Expected due date and weekend-adjusted draw date of the first
    occurrence on or after the source period start, which may lie beyond
    the period itself.
    """
    anchor = obligation.anchor_date
    if anchor is None:
        return None, None
    k = first_index_on_or_after(anchor, obligation.cadence, source_period.start_date)
    due_date = nth_occurrence(anchor, obligation.cadence, k)
    return due_date, adjust_for_weekend(due_date)
