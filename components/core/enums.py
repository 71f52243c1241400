"""Shared enumerations for obligations, periods and summaries."""

import enum


class Cadence(str, enum.Enum):
    """Recurrence frequency class of an obligation."""
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    SEMI_MONTHLY = "semimonthly"
    MONTHLY = "monthly"
    ANNUALLY = "annually"


class ObligationKind(str, enum.Enum):
    """Direction of money movement."""
    OUTFLOW = "outflow"  # bill
    INFLOW = "inflow"  # income stream


class RecordStatus(str, enum.Enum):
    """Soft-delete state for obligations and periods."""
    ACTIVE = "active"
    INACTIVE = "inactive"


class PeriodType(str, enum.Enum):
    """Calendar window type of a source period."""
    WEEKLY = "weekly"
    BI_MONTHLY = "bi_monthly"
    MONTHLY = "monthly"


class OwnerType(str, enum.Enum):
    """Owner scope of a summary."""
    USER = "user"
    GROUP = "group"


class PaymentType(str, enum.Enum):
    """Classification of a matched payment."""
    REGULAR = "regular"
    CATCH_UP = "catch_up"
    ADVANCE = "advance"
    EXTRA_PRINCIPAL = "extra_principal"


class PeriodStatus(str, enum.Enum):
    """Period-level status derived from occurrence payment state."""
    PENDING = "pending"
    DUE_SOON = "due_soon"
    PARTIAL = "partial"
    PAID = "paid"
    PAID_EARLY = "paid_early"
    OVERDUE = "overdue"
