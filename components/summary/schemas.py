"""Pydantic schemas for summary data."""

from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Literal, NamedTuple, Optional, Union

from pydantic import BaseModel, Field

from components.core.enums import ObligationKind, OwnerType, PeriodStatus, PeriodType
from components.period.schemas import ZERO


class SummaryKey(NamedTuple):
    owner_id: str
    owner_type: OwnerType
    period_type: PeriodType

    @property
    def summary_id(self) -> str:
        return f"{self.owner_type.value}_{self.owner_id}_{self.period_type.value}"


class SummaryEntry(BaseModel):
    """Display totals of one period inside a summary bucket."""
    period_id: str
    obligation_id: str
    kind: ObligationKind
    group_id: Optional[str] = None
    merchant: Optional[str] = None
    description: str = ""
    user_custom_name: Optional[str] = None
    total_amount_due: Decimal = ZERO
    total_amount_paid: Decimal = ZERO
    total_amount_unpaid: Decimal = ZERO
    total_amount_withheld: Decimal = ZERO
    amount_per_occurrence: Decimal = ZERO
    is_due_period: bool = False
    due_period_count: int = 0
    status: PeriodStatus = PeriodStatus.PENDING
    status_counts: Dict[str, int] = Field(default_factory=dict)
    fully_paid_count: int = 0
    unpaid_count: int = 0
    payment_progress_percentage: int = 0
    number_of_occurrences: int = 0
    number_of_occurrences_paid: int = 0
    number_of_occurrences_unpaid: int = 0
    occurrence_status_text: str = ""
    expected_due_date: Optional[date] = None


class Summary(BaseModel):
    """Schema for summary response."""
    id: str
    owner_id: str
    owner_type: OwnerType
    period_type: PeriodType
    periods: Dict[str, List[SummaryEntry]] = Field(default_factory=dict)
    total_item_count: int = 0
    window_start: Optional[date] = None
    window_end: Optional[date] = None
    last_recalculated: Optional[datetime] = None

    class Config:
        from_attributes = True


class RecalculateOperation(BaseModel):
    """Rebuild one source period bucket from current period state."""
    op: Literal["recalculate"] = "recalculate"
    source_period_id: str


class UpdateNamesOperation(BaseModel):
    """Push new display names of one obligation into every bucket."""
    op: Literal["update_names"] = "update_names"
    obligation_id: str
    merchant: Optional[str] = None
    description: str = ""
    user_custom_name: Optional[str] = None


SummaryOperation = Union[RecalculateOperation, UpdateNamesOperation]


class SummaryUpdateResult(BaseModel):
    """Outcome of one coalesced summary write."""
    summary_id: str
    buckets_recalculated: List[str] = Field(default_factory=list)
    buckets_removed: List[str] = Field(default_factory=list)
    names_updated: int = 0
    total_item_count: int = 0
    errors: List[str] = Field(default_factory=list)
