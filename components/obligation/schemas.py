"""Pydantic schemas for obligation data validation."""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from components.calendar.utils import parse_cadence
from components.core.enums import Cadence, ObligationKind, RecordStatus


class ObligationBase(BaseModel):
    """Base obligation schema."""
    owner_id: str
    group_id: Optional[str] = None
    kind: ObligationKind = ObligationKind.OUTFLOW
    description: str = ""
    merchant_name: Optional[str] = None
    user_custom_name: Optional[str] = None
    amount: Decimal
    currency: Optional[str] = None
    cadence: Cadence = Cadence.MONTHLY
    first_date: Optional[date] = None
    last_date: Optional[date] = None
    predicted_next_date: Optional[date] = None

    @field_validator("amount")
    @classmethod
    def normalize_amount(cls, value: Decimal) -> Decimal:
        """Providers report outflows as negative numbers; keep the magnitude."""
        return abs(value)

    @field_validator("cadence", mode="before")
    @classmethod
    def normalize_cadence(cls, value):
        return parse_cadence(value)


class ObligationCreate(ObligationBase):
    """Schema for obligation creation."""
    transaction_ids: List[str] = Field(default_factory=list)


class ObligationUpdate(BaseModel):
    """Schema for partial obligation updates."""
    description: Optional[str] = None
    merchant_name: Optional[str] = None
    user_custom_name: Optional[str] = None
    amount: Optional[Decimal] = None
    cadence: Optional[Cadence] = None
    first_date: Optional[date] = None
    last_date: Optional[date] = None
    predicted_next_date: Optional[date] = None
    group_id: Optional[str] = None
    status: Optional[RecordStatus] = None
    transaction_ids: Optional[List[str]] = None

    @field_validator("amount")
    @classmethod
    def normalize_amount(cls, value: Optional[Decimal]) -> Optional[Decimal]:
        return abs(value) if value is not None else value

    @field_validator("cadence", mode="before")
    @classmethod
    def normalize_cadence(cls, value):
        return parse_cadence(value) if value is not None else value


class Obligation(ObligationBase):
    """Schema for obligation response."""
    id: str
    status: RecordStatus = RecordStatus.ACTIVE
    transaction_ids: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @property
    def is_active(self) -> bool:
        return self.status == RecordStatus.ACTIVE

    @property
    def anchor_date(self) -> Optional[date]:
        """Provider-predicted next date, else last known date, else first date."""
        return self.predicted_next_date or self.last_date or self.first_date


class TransactionLink(BaseModel):
    """Schema for linking an already recorded transaction."""
    transaction_id: str
