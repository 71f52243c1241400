"""Pydantic schemas for transaction data validation."""

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class TransactionBase(BaseModel):
    """Base transaction schema."""
    owner_id: str
    transaction_date: date
    amount: Decimal
    description: str = ""
    split_id: Optional[str] = None


class TransactionCreate(TransactionBase):
    """Schema for transaction creation."""
    id: Optional[str] = None


class TransactionUpdate(BaseModel):
    """Schema for partial transaction updates, e.g. a corrected posting date."""
    transaction_date: Optional[date] = None
    amount: Optional[Decimal] = None
    description: Optional[str] = None
    split_id: Optional[str] = None


class Transaction(TransactionBase):
    """Schema for transaction response."""
    id: str

    class Config:
        from_attributes = True

    @property
    def line_item_id(self) -> str:
        """Identifier of the split that pays an occurrence."""
        return self.split_id or f"{self.id}_split_0"
