"""Obligation model for the database."""

import uuid
from datetime import datetime

from sqlalchemy import Column, String, Date, DateTime, Numeric, JSON, Enum

from components.core.database import Base
from components.core.enums import ObligationKind, RecordStatus


class Obligation(Base):
    """Recurring bill or income stream definition."""
    __tablename__ = "obligations"

    id = Column(String(64), primary_key=True, default=lambda: uuid.uuid4().hex)
    owner_id = Column(String(64), nullable=False, index=True)
    group_id = Column(String(64), nullable=True, index=True)
    kind = Column(Enum(ObligationKind), nullable=False, default=ObligationKind.OUTFLOW)
    description = Column(String(255), nullable=False, default="")
    merchant_name = Column(String(255), nullable=True)
    user_custom_name = Column(String(255), nullable=True)
    amount = Column(Numeric(12, 2), nullable=False)  # Positive magnitude
    currency = Column(String(3), nullable=False)
    cadence = Column(String(32), nullable=False)  # Raw value, parsed on read
    first_date = Column(Date, nullable=True)
    last_date = Column(Date, nullable=True)
    predicted_next_date = Column(Date, nullable=True)
    status = Column(Enum(RecordStatus), nullable=False, default=RecordStatus.ACTIVE)
    transaction_ids = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
