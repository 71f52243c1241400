"""Source period model for the database."""

from sqlalchemy import Column, String, Integer, Date, Enum

from components.core.database import Base
from components.core.enums import PeriodType


class SourcePeriod(Base):
    """Calendar window that obligation periods are generated against."""
    __tablename__ = "source_periods"

    id = Column(String(16), primary_key=True)  # e.g. 2025M01, 2025BM01A, 2025W01
    period_type = Column(Enum(PeriodType), nullable=False, index=True)
    year = Column(Integer, nullable=False, index=True)
    index = Column(Integer, nullable=False)  # Sortable position, e.g. 202501
    start_date = Column(Date, nullable=False, index=True)
    end_date = Column(Date, nullable=False, index=True)
