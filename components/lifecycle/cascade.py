"""Which summary operations a set of period writes calls for."""

from typing import Dict, Iterable, List, Optional, Tuple

from components.core.enums import OwnerType
from components.period.schemas import Period
from components.summary.schemas import (
    RecalculateOperation,
    SummaryKey,
    SummaryOperation,
    UpdateNamesOperation,
)

PeriodChange = Tuple[Optional[Period], Optional[Period]]

RELEVANT_FIELDS = (
    "record_status",
    "group_id",
    "merchant",
    "description",
    "user_custom_name",
    "total_amount_due",
    "total_amount_paid",
    "total_amount_unpaid",
    "amount_withheld",
    "amount_per_occurrence",
    "is_due_period",
    "status",
    "number_of_occurrences",
    "number_of_occurrences_paid",
    "payment_progress_percentage",
    "expected_due_date",
)


def has_relevant_changes(before: Optional[Period], after: Optional[Period]) -> bool:
    """Creation and deletion always count; updates only when a summarized field moved."""
    if before is None or after is None:
        return before is not after
    return any(getattr(before, field) != getattr(after, field) for field in RELEVANT_FIELDS)


def summary_keys_for(period: Period) -> List[SummaryKey]:
    """The user summary, plus the group summary for grouped periods."""
    keys = [SummaryKey(period.owner_id, OwnerType.USER, period.period_type)]
    if period.group_id:
        keys.append(SummaryKey(period.group_id, OwnerType.GROUP, period.period_type))
    return keys


def collect_summary_operations(
    changes: Iterable[PeriodChange],
) -> Dict[SummaryKey, List[SummaryOperation]]:
    """
    Coalesce period writes into one ordered operation list per summary.

    Both the old and the new version of a period are considered, so a
    period that moved groups refreshes both group summaries.
    """
    operations: Dict[SummaryKey, List[SummaryOperation]] = {}
    seen = set()
    for before, after in changes:
        if not has_relevant_changes(before, after):
            continue
        for period in (before, after):
            if period is None:
                continue
            for key in summary_keys_for(period):
                marker = (key, period.source_period_id)
                if marker in seen:
                    continue
                seen.add(marker)
                operations.setdefault(key, []).append(
                    RecalculateOperation(source_period_id=period.source_period_id)
                )
    return operations


def name_update_operations(
    periods: Iterable[Period], operation: UpdateNamesOperation
) -> Dict[SummaryKey, List[SummaryOperation]]:
    keys = {key for period in periods for key in summary_keys_for(period)}
    return {key: [operation] for key in keys}


def merge_operations(
    *groups: Dict[SummaryKey, List[SummaryOperation]],
) -> Dict[SummaryKey, List[SummaryOperation]]:
    merged: Dict[SummaryKey, List[SummaryOperation]] = {}
    for group in groups:
        for key, operations in group.items():
            merged.setdefault(key, []).extend(operations)
    return merged
