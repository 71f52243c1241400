"""Summary model for the database."""

from datetime import datetime

from sqlalchemy import Column, String, Integer, Date, DateTime, JSON, Enum

from components.core.database import Base
from components.core.enums import OwnerType, PeriodType


class Summary(Base):
    """Per-owner rollup of period data, one bucket per source period."""
    __tablename__ = "summaries"

    id = Column(String(128), primary_key=True)  # {owner_type}_{owner_id}_{period_type}
    owner_id = Column(String(64), nullable=False, index=True)
    owner_type = Column(Enum(OwnerType), nullable=False)
    period_type = Column(Enum(PeriodType), nullable=False)
    periods = Column(JSON, nullable=False, default=dict)  # source_period_id -> [entry, ...]
    total_item_count = Column(Integer, nullable=False, default=0)
    window_start = Column(Date, nullable=True)
    window_end = Column(Date, nullable=True)
    last_recalculated = Column(DateTime, nullable=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
