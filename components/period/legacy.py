"""
One-time conversion of exported legacy documents into the current schema.

Legacy exports mix two layouts for the same entity: amounts either flat
(``"averageAmount": 12.5``) or nested (``{"amount": -12.5,
"isoCurrencyCode": "USD"}``), a ``groupIds`` array instead of one group,
and occurrence state kept in parallel arrays (``occurrenceDueDates``,
``occurrencePaidFlags``, ``occurrenceTransactionIds``) next to or instead of
an ``occurrences`` list. Everything here maps onto the canonical schemas.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

from components.calendar.utils import adjust_for_weekend, parse_cadence
from components.core.config import get_settings
from components.core.enums import ObligationKind, PaymentType, PeriodType, RecordStatus
from components.obligation.schemas import Obligation
from components.period.schemas import Occurrence, Period, ZERO
from components.period.status import refresh_period_totals


def flatten_amount(value: Any) -> Decimal:
    """Magnitude of a flat or nested legacy amount; missing amounts become zero."""
    if isinstance(value, dict):
        value = value.get("amount")
    if value is None:
        return ZERO
    return abs(Decimal(str(value)))


def parse_legacy_date(value: Any) -> Optional[date]:
    """Accept ISO strings, exported timestamp objects and epoch seconds."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, dict):
        seconds = value.get("_seconds", value.get("seconds"))
        return datetime.fromtimestamp(seconds, tz=timezone.utc).date()
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc).date()
    return datetime.fromisoformat(str(value).replace("Z", "+00:00")).date()


def first_group_id(doc: Dict[str, Any]) -> Optional[str]:
    if doc.get("groupId"):
        return doc["groupId"]
    group_ids = doc.get("groupIds") or []
    return group_ids[0] if group_ids else None


def _currency(doc: Dict[str, Any]) -> str:
    nested = doc.get("averageAmount")
    if isinstance(nested, dict) and nested.get("isoCurrencyCode"):
        return nested["isoCurrencyCode"]
    return doc.get("currency") or get_settings().DEFAULT_CURRENCY


def _record_status(doc: Dict[str, Any]) -> RecordStatus:
    return RecordStatus.ACTIVE if doc.get("isActive", True) else RecordStatus.INACTIVE


def migrate_obligation_document(doc: Dict[str, Any], kind: ObligationKind = ObligationKind.OUTFLOW) -> Obligation:
    """Convert a legacy outflow or inflow document."""
    return Obligation(
        id=doc["id"],
        owner_id=doc.get("ownerId") or doc["userId"],
        group_id=first_group_id(doc),
        kind=kind,
        description=doc.get("description") or "",
        merchant_name=doc.get("merchantName") or doc.get("merchant"),
        user_custom_name=doc.get("userCustomName"),
        amount=flatten_amount(doc.get("averageAmount")),
        currency=_currency(doc),
        cadence=parse_cadence(doc.get("frequency")),
        first_date=parse_legacy_date(doc.get("firstDate")),
        last_date=parse_legacy_date(doc.get("lastDate")),
        predicted_next_date=parse_legacy_date(doc.get("predictedNextDate")),
        status=_record_status(doc),
        transaction_ids=list(doc.get("transactionIds") or []),
    )


def _occurrence_from_object(source_period_id: str, index: int, item: Dict[str, Any], amount: Decimal) -> Occurrence:
    due_date = parse_legacy_date(item.get("dueDate"))
    is_paid = bool(item.get("isPaid"))
    payment_type = item.get("paymentType")
    return Occurrence(
        id=item.get("id") or f"{source_period_id}_occ_{index}",
        due_date=due_date,
        draw_date=parse_legacy_date(item.get("drawDate")) or adjust_for_weekend(due_date),
        amount_due=flatten_amount(item.get("amountDue", amount)),
        is_paid=is_paid,
        transaction_id=item.get("transactionId"),
        transaction_split_id=item.get("transactionSplitId"),
        payment_date=parse_legacy_date(item.get("paymentDate")),
        amount_paid=flatten_amount(item.get("amountPaid")) if is_paid else ZERO,
        payment_type=PaymentType(payment_type.lower()) if payment_type else None,
        is_auto_matched=bool(item.get("isAutoMatched")),
    )


def _occurrences_from_arrays(source_period_id: str, doc: Dict[str, Any], amount: Decimal) -> List[Occurrence]:
    due_dates = doc.get("occurrenceDueDates") or doc.get("occurrenceDates") or []
    paid_flags = doc.get("occurrencePaidFlags") or []
    transaction_ids = doc.get("occurrenceTransactionIds") or []
    amounts = doc.get("occurrenceAmounts") or []

    occurrences = []
    for index, raw_due in enumerate(due_dates):
        due_date = parse_legacy_date(raw_due)
        is_paid = index < len(paid_flags) and bool(paid_flags[index])
        transaction_id = transaction_ids[index] if index < len(transaction_ids) else None
        amount_due = flatten_amount(amounts[index]) if index < len(amounts) else amount
        occurrences.append(Occurrence(
            id=f"{source_period_id}_occ_{index}",
            due_date=due_date,
            draw_date=adjust_for_weekend(due_date),
            amount_due=amount_due,
            is_paid=is_paid,
            transaction_id=transaction_id,
            transaction_split_id=f"{transaction_id}_split_0" if transaction_id else None,
            amount_paid=amount_due if is_paid else ZERO,
        ))
    return occurrences


def migrate_period_document(
    doc: Dict[str, Any],
    today: date,
    kind: ObligationKind = ObligationKind.OUTFLOW,
) -> Period:
    """
    Convert a legacy outflow or inflow period document.

    The object-list form of occurrences wins over the parallel arrays when
    both are present. Totals are recomputed from the converted occurrences.
    """
    obligation_id = doc.get("outflowId") or doc.get("inflowId") or doc["obligationId"]
    source_period_id = doc["sourcePeriodId"]
    amount = flatten_amount(
        doc.get("amountPerOccurrence") or doc.get("expectedAmount") or doc.get("averageAmount")
    )

    if doc.get("occurrences"):
        occurrences = [
            _occurrence_from_object(source_period_id, index, item, amount)
            for index, item in enumerate(doc["occurrences"])
        ]
    else:
        occurrences = _occurrences_from_arrays(source_period_id, doc, amount)

    period = Period(
        id=doc.get("id") or f"{obligation_id}_{source_period_id}",
        obligation_id=obligation_id,
        owner_id=doc.get("ownerId") or doc["userId"],
        group_id=first_group_id(doc),
        kind=kind,
        source_period_id=source_period_id,
        period_type=PeriodType(doc.get("periodType", "monthly")),
        period_start=parse_legacy_date(doc.get("periodStartDate")),
        period_end=parse_legacy_date(doc.get("periodEndDate")),
        record_status=_record_status(doc),
        merchant=doc.get("merchant") or doc.get("merchantName"),
        description=doc.get("description") or "",
        user_custom_name=doc.get("userCustomName"),
        cadence=parse_cadence(doc.get("frequency")),
        cycle_days=int(doc.get("cycleDays") or 30),
        daily_withholding_rate=flatten_amount(doc.get("dailyWithholdingRate")),
        amount_withheld=flatten_amount(doc.get("amountWithheld")),
        cycle_due_in_period=bool(doc.get("isDuePeriod")),
        amount_due=flatten_amount(doc.get("amountDue")),
        amount_per_occurrence=amount,
        occurrences=occurrences,
        expected_due_date=parse_legacy_date(doc.get("expectedDueDate")),
        expected_draw_date=parse_legacy_date(doc.get("expectedDrawDate")),
    )
    return refresh_period_totals(period, today)
