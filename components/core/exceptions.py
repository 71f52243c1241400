"""
Typed exception hierarchy for the scheduling engine.

Every exception carries a machine-readable ``code`` and the identifiers it
concerns as attributes, so callers catch by type and log structured data:

    SchedulingError
    |
    +-- InputDataError
    |   +-- MissingAnchorDateError
    |   +-- InvalidWindowError
    |
    +-- NotFoundError
    |   +-- ObligationNotFoundError
    |   +-- SourcePeriodNotFoundError
    |   +-- PeriodNotFoundError
    |   +-- SummaryNotFoundError
    |   +-- TransactionNotFoundError
    |
    +-- BatchWriteError
"""

from datetime import date


class SchedulingError(Exception):
    """Base exception for all scheduling engine errors."""

    code: str = "SCHEDULING_ERROR"


class InputDataError(SchedulingError):
    """Obligation or window data cannot be used for calculation."""

    code: str = "INPUT_DATA_ERROR"


class MissingAnchorDateError(InputDataError):
    """Obligation has no date to anchor its recurrence on."""

    code: str = "MISSING_ANCHOR_DATE"

    def __init__(self, obligation_id: str):
        self.obligation_id = obligation_id
        super().__init__(f"Obligation {obligation_id} has no anchor date")


class InvalidWindowError(InputDataError):
    """Window end precedes its start."""

    code: str = "INVALID_WINDOW"

    def __init__(self, start: date, end: date):
        self.start = start
        self.end = end
        super().__init__(f"Window end {end} is before start {start}")


class NotFoundError(SchedulingError):
    """Referenced record does not exist."""

    code: str = "NOT_FOUND"


class ObligationNotFoundError(NotFoundError):
    code: str = "OBLIGATION_NOT_FOUND"

    def __init__(self, obligation_id: str):
        self.obligation_id = obligation_id
        super().__init__(f"Obligation not found: {obligation_id}")


class SourcePeriodNotFoundError(NotFoundError):
    code: str = "SOURCE_PERIOD_NOT_FOUND"

    def __init__(self, source_period_id: str):
        self.source_period_id = source_period_id
        super().__init__(f"Source period not found: {source_period_id}")


class PeriodNotFoundError(NotFoundError):
    code: str = "PERIOD_NOT_FOUND"

    def __init__(self, period_id: str):
        self.period_id = period_id
        super().__init__(f"Period not found: {period_id}")


class SummaryNotFoundError(NotFoundError):
    code: str = "SUMMARY_NOT_FOUND"

    def __init__(self, summary_id: str):
        self.summary_id = summary_id
        super().__init__(f"Summary not found: {summary_id}")


class TransactionNotFoundError(NotFoundError):
    code: str = "TRANSACTION_NOT_FOUND"

    def __init__(self, transaction_id: str):
        self.transaction_id = transaction_id
        super().__init__(f"Transaction not found: {transaction_id}")


class BatchWriteError(SchedulingError):
    """A chunk of a batched write failed; earlier chunks stay committed."""

    code: str = "BATCH_WRITE_FAILED"

    def __init__(self, chunk_index: int, committed: int, reason: str):
        self.chunk_index = chunk_index
        self.committed = committed
        self.reason = reason
        super().__init__(
            f"Batch chunk {chunk_index} failed after {committed} committed items: {reason}"
        )
