"""Pydantic schemas for lifecycle orchestration results."""

from typing import List, Optional

from pydantic import BaseModel, Field


class OrchestrationResult(BaseModel):
    """Counts and collected errors of one orchestration run."""
    event: str
    obligation_id: Optional[str] = None
    transaction_id: Optional[str] = None
    success: bool = True
    fields_updated: List[str] = Field(default_factory=list)
    periods_queried: int = 0
    periods_created: int = 0
    periods_updated: int = 0
    periods_skipped: int = 0
    periods_deactivated: int = 0
    summaries_updated: int = 0
    errors: List[str] = Field(default_factory=list)
