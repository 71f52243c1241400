"""Transaction model for the database."""

import uuid

from sqlalchemy import Column, String, Date, Numeric

from components.core.database import Base


class Transaction(Base):
    """Recorded money movement that may settle an obligation occurrence."""
    __tablename__ = "transactions"

    id = Column(String(64), primary_key=True, default=lambda: uuid.uuid4().hex)
    owner_id = Column(String(64), nullable=False, index=True)
    transaction_date = Column(Date, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    description = Column(String(255), nullable=False, default="")
    split_id = Column(String(96), nullable=True)
