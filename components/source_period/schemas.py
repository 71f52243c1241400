"""Pydantic schemas for source period data validation."""

from datetime import date
from typing import NamedTuple

from pydantic import BaseModel

from components.core.enums import PeriodType
from components.core.exceptions import InvalidWindowError


class DateWindow(NamedTuple):
    """Inclusive date range."""
    start: date
    end: date

    @classmethod
    def of(cls, start: date, end: date) -> "DateWindow":
        if end < start:
            raise InvalidWindowError(start, end)
        return cls(start, end)


class SourcePeriod(BaseModel):
    """Schema for source period response."""
    id: str
    period_type: PeriodType
    year: int
    index: int
    start_date: date
    end_date: date

    class Config:
        from_attributes = True

    @property
    def window(self) -> DateWindow:
        return DateWindow.of(self.start_date, self.end_date)


class GenerationSummary(BaseModel):
    """Schema for the result of source period generation."""
    start_year: int
    end_year: int
    monthly: int
    bi_monthly: int
    weekly: int
