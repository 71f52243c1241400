"""Detection of which obligation field groups changed between two versions."""

from typing import Set

from components.obligation.schemas import Obligation

AMOUNT = "amount"
SCHEDULE = "schedule"
NAMES = "names"
TRANSACTION_IDS = "transaction_ids"
STATUS = "status"
GROUP = "group"

_FIELD_GROUPS = {
    AMOUNT: ("amount",),
    SCHEDULE: ("cadence", "first_date", "last_date", "predicted_next_date"),
    NAMES: ("description", "merchant_name", "user_custom_name"),
    STATUS: ("status",),
    GROUP: ("group_id",),
}


def detect_changes(before: Obligation, after: Obligation) -> Set[str]:
    """
    Compare two versions of an obligation.

    Returns:
        Names of the changed field groups; linked transaction ids are
        compared as sets so reordering is not a change
    """
    changed = set()
    for group, fields in _FIELD_GROUPS.items():
        if any(getattr(before, field) != getattr(after, field) for field in fields):
            changed.add(group)
    if set(before.transaction_ids) != set(after.transaction_ids):
        changed.add(TRANSACTION_IDS)
    return changed
