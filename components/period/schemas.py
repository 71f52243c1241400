"""Pydantic schemas for period and occurrence data."""

from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from components.core.enums import (
    Cadence,
    ObligationKind,
    PaymentType,
    PeriodStatus,
    PeriodType,
    RecordStatus,
)

ZERO = Decimal("0.00")


class Occurrence(BaseModel):
    """One predicted due event of an obligation inside a period."""
    id: str
    due_date: date
    draw_date: date
    amount_due: Decimal
    is_paid: bool = False
    transaction_id: Optional[str] = None
    transaction_split_id: Optional[str] = None
    payment_date: Optional[date] = None
    amount_paid: Decimal = ZERO
    payment_type: Optional[PaymentType] = None
    is_auto_matched: bool = False

    def cleared(self) -> "Occurrence":
        """Copy with every payment field reset to unpaid."""
        return Occurrence(
            id=self.id,
            due_date=self.due_date,
            draw_date=self.draw_date,
            amount_due=self.amount_due,
        )


class Period(BaseModel):
    """Persisted join of one obligation and one source period."""
    id: str
    obligation_id: str
    owner_id: str
    group_id: Optional[str] = None
    kind: ObligationKind = ObligationKind.OUTFLOW
    source_period_id: str
    period_type: PeriodType
    period_start: date
    period_end: date
    record_status: RecordStatus = RecordStatus.ACTIVE

    # Denormalized obligation metadata for display
    merchant: Optional[str] = None
    description: str = ""
    user_custom_name: Optional[str] = None
    cadence: Cadence = Cadence.MONTHLY

    # Withholding / proration
    cycle_days: int = 30
    daily_withholding_rate: Decimal = ZERO
    amount_withheld: Decimal = ZERO
    cycle_due_in_period: bool = False
    amount_due: Decimal = ZERO

    # Occurrences and totals
    amount_per_occurrence: Decimal = ZERO
    occurrences: List[Occurrence] = Field(default_factory=list)
    number_of_occurrences: int = 0
    number_of_occurrences_paid: int = 0
    number_of_occurrences_unpaid: int = 0
    total_amount_due: Decimal = ZERO
    total_amount_paid: Decimal = ZERO
    total_amount_unpaid: Decimal = ZERO
    is_due_period: bool = False
    status: PeriodStatus = PeriodStatus.PENDING
    occurrence_status_text: str = ""
    payment_progress_percentage: int = 0
    first_due_date: Optional[date] = None
    last_due_date: Optional[date] = None
    next_unpaid_due_date: Optional[date] = None
    expected_due_date: Optional[date] = None
    expected_draw_date: Optional[date] = None

    class Config:
        from_attributes = True

    @property
    def is_active(self) -> bool:
        return self.record_status == RecordStatus.ACTIVE

    @property
    def is_frozen(self) -> bool:
        """Any paid occurrence marks the period as settled history."""
        return any(o.is_paid for o in self.occurrences)

    @property
    def due_dates(self) -> List[date]:
        return [o.due_date for o in self.occurrences]


class MatchResult(BaseModel):
    """Outcome of matching transactions against one period."""
    period_id: str
    matched_transaction_ids: List[str] = Field(default_factory=list)
    unmatched_transaction_ids: List[str] = Field(default_factory=list)
    written: bool = False


class MaterializeResult(BaseModel):
    """Outcome of materializing periods for one obligation."""
    count: int = 0
    period_ids: List[str] = Field(default_factory=list)
    skipped_period_ids: List[str] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)
