"""Assignment of recorded transactions to the closest predicted occurrence."""

import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Collection, List, NamedTuple, Optional, Sequence, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from components.core.config import get_settings
from components.core.enums import PaymentType
from components.obligation.repository import ObligationRepository
from components.period.repository import PeriodRepository
from components.period.schemas import MatchResult, Period
from components.period.status import refresh_period_totals
from components.transaction.repository import TransactionRepository
from components.transaction.schemas import Transaction

logger = logging.getLogger(__name__)

EXTRA_PRINCIPAL_RATIO = Decimal("1.1")
ADVANCE_DAYS = 7


class AssignmentResult(NamedTuple):
    period: Period
    matched_transaction_ids: List[str]
    unmatched_transaction_ids: List[str]


def find_matching_occurrence_index(
    transaction_date: date,
    due_dates: Sequence[date],
    tolerance_days: int,
    taken: Collection[int] = (),
) -> Optional[int]:
    """
    Index of the free occurrence closest to the transaction date.

    Only occurrences within ``tolerance_days`` qualify; ties go to the
    earlier index. Returns None when nothing qualifies.
    """
    best_index = None
    best_distance = None
    for index, due_date in enumerate(due_dates):
        if index in taken:
            continue
        distance = abs((transaction_date - due_date).days)
        if distance > tolerance_days:
            continue
        if best_distance is None or distance < best_distance:
            best_index, best_distance = index, distance
    return best_index


def classify_payment(amount: Decimal, amount_due: Decimal, payment_date: date, due_date: date) -> PaymentType:
    if amount > amount_due * EXTRA_PRINCIPAL_RATIO:
        return PaymentType.EXTRA_PRINCIPAL
    if payment_date > due_date:
        return PaymentType.CATCH_UP
    if (due_date - payment_date).days > ADVANCE_DAYS:
        return PaymentType.ADVANCE
    return PaymentType.REGULAR


def assign_transactions(
    period: Period,
    transactions: Sequence[Transaction],
    tolerance_days: int,
    today: date,
) -> AssignmentResult:
    """
    Rebuild every occurrence payment from the given transactions.

    All payment fields are cleared first, so the result depends only on the
    inputs. Transactions dated inside the period window, or within
    ``tolerance_days`` of either edge, are taken in (date, id) order. An
    edge transaction that matches nothing here belongs to the neighbouring
    period and is not reported as unmatched.

    Args:
        period: Period with its current occurrence list
        transactions: Line items linked to the period's obligation
        tolerance_days: Max distance in days between payment and due date
        today: Reference date for the derived status

    Returns:
        The rebuilt period and the matched and unmatched transaction ids
    """
    occurrences = [o.cleared() for o in period.occurrences]
    due_dates = [o.due_date for o in occurrences]
    reach = timedelta(days=tolerance_days)
    candidates = sorted(
        (
            t for t in transactions
            if period.period_start - reach <= t.transaction_date <= period.period_end + reach
        ),
        key=lambda t: (t.transaction_date, t.id),
    )

    taken = set()
    matched, unmatched = [], []
    for transaction in candidates:
        index = find_matching_occurrence_index(transaction.transaction_date, due_dates, tolerance_days, taken)
        if index is None:
            if not period.period_start <= transaction.transaction_date <= period.period_end:
                continue
            unmatched.append(transaction.id)
            logger.warning(
                "Transaction did not match any occurrence",
                extra={"period_id": period.id, "transaction_id": transaction.id},
            )
            continue

        taken.add(index)
        occurrence = occurrences[index]
        amount = abs(transaction.amount)
        occurrences[index] = occurrence.model_copy(update={
            "is_paid": True,
            "transaction_id": transaction.id,
            "transaction_split_id": transaction.line_item_id,
            "payment_date": transaction.transaction_date,
            "amount_paid": amount,
            "payment_type": classify_payment(
                amount, occurrence.amount_due, transaction.transaction_date, occurrence.due_date
            ),
            "is_auto_matched": True,
        })
        matched.append(transaction.id)

    rebuilt = refresh_period_totals(period.model_copy(update={"occurrences": occurrences}), today)
    return AssignmentResult(rebuilt, matched, unmatched)


class OccurrenceMatcher:
    """Runs the matcher against stored periods and writes only real changes."""

    def __init__(self, session: AsyncSession, tolerance_days: Optional[int] = None):
        self.session = session
        self.tolerance_days = tolerance_days if tolerance_days is not None else get_settings().MATCH_TOLERANCE_DAYS
        self.periods = PeriodRepository(session)
        self.obligations = ObligationRepository(session)
        self.transactions = TransactionRepository(session)

    async def match_transactions_to_occurrences(
        self,
        period_id: str,
        period: Optional[Period] = None,
        today: Optional[date] = None,
    ) -> MatchResult:
        """
        Re-match a period against its obligation's linked transactions.

        Args:
            period_id: Period to match
            period: Already loaded period state, read from storage when omitted
            today: Reference date, defaults to the current date

        Returns:
            MatchResult; ``written`` is False when nothing changed

        Raises:
            PeriodNotFoundError, ObligationNotFoundError
        """
        if period is None:
            period = await self.periods.get_or_raise(period_id)
        result, _ = await self.match_period(period, today)
        return result

    async def match_period(
        self, period: Period, today: Optional[date] = None
    ) -> Tuple[MatchResult, Period]:
        """Match one loaded period; returns the result and the period as stored afterwards."""
        today = today or date.today()
        obligation = await self.obligations.get_or_raise(period.obligation_id)
        transactions = await self.transactions.get_many(obligation.transaction_ids)

        outcome = assign_transactions(period, transactions, self.tolerance_days, today)
        result = MatchResult(
            period_id=period.id,
            matched_transaction_ids=outcome.matched_transaction_ids,
            unmatched_transaction_ids=outcome.unmatched_transaction_ids,
        )
        if outcome.period.model_dump() == period.model_dump():
            logger.debug("Match produced no change, skipping write", extra={"period_id": period.id})
            return result, period

        await self.periods.save(outcome.period)
        result.written = True
        logger.info(
            "Period occurrences re-matched",
            extra={"period_id": period.id, "matched": len(outcome.matched_transaction_ids)},
        )
        return result, outcome.period
