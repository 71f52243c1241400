"""Period model for the database."""

from datetime import datetime

from sqlalchemy import Column, String, Integer, Date, DateTime, Numeric, Boolean, JSON, Enum

from components.core.database import Base
from components.core.enums import (
    ObligationKind,
    PeriodStatus,
    PeriodType,
    RecordStatus,
)


class Period(Base):
    """One obligation inside one source period, occurrences embedded as JSON."""
    __tablename__ = "periods"

    id = Column(String(128), primary_key=True)  # {obligation_id}_{source_period_id}
    obligation_id = Column(String(64), nullable=False, index=True)
    owner_id = Column(String(64), nullable=False, index=True)
    group_id = Column(String(64), nullable=True, index=True)
    kind = Column(Enum(ObligationKind), nullable=False)
    source_period_id = Column(String(16), nullable=False, index=True)
    period_type = Column(Enum(PeriodType), nullable=False)
    period_start = Column(Date, nullable=False)
    period_end = Column(Date, nullable=False)
    record_status = Column(Enum(RecordStatus), nullable=False, default=RecordStatus.ACTIVE)

    merchant = Column(String(255), nullable=True)
    description = Column(String(255), nullable=False, default="")
    user_custom_name = Column(String(255), nullable=True)
    cadence = Column(String(32), nullable=False)

    cycle_days = Column(Integer, nullable=False)
    daily_withholding_rate = Column(Numeric(14, 6), nullable=False)
    amount_withheld = Column(Numeric(12, 2), nullable=False)
    cycle_due_in_period = Column(Boolean, nullable=False, default=False)
    amount_due = Column(Numeric(12, 2), nullable=False)

    amount_per_occurrence = Column(Numeric(12, 2), nullable=False)
    occurrences = Column(JSON, nullable=False, default=list)
    number_of_occurrences = Column(Integer, nullable=False, default=0)
    number_of_occurrences_paid = Column(Integer, nullable=False, default=0)
    number_of_occurrences_unpaid = Column(Integer, nullable=False, default=0)
    total_amount_due = Column(Numeric(12, 2), nullable=False)
    total_amount_paid = Column(Numeric(12, 2), nullable=False)
    total_amount_unpaid = Column(Numeric(12, 2), nullable=False)
    is_due_period = Column(Boolean, nullable=False, default=False)
    status = Column(Enum(PeriodStatus), nullable=False)
    occurrence_status_text = Column(String(64), nullable=False, default="")
    payment_progress_percentage = Column(Integer, nullable=False, default=0)
    first_due_date = Column(Date, nullable=True)
    last_due_date = Column(Date, nullable=True)
    next_unpaid_due_date = Column(Date, nullable=True)
    expected_due_date = Column(Date, nullable=True)
    expected_draw_date = Column(Date, nullable=True)

    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
