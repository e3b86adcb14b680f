"""
Pydantic request/response schemas for the translines HTTP API.

These models form the public wire contract. Internal records
(:class:`~translines.core.contracts.work.Outcome`) are converted into them at
the edge so the concurrency core stays free of Pydantic.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from translines.core.contracts.work import Outcome

MAX_API_WORKERS = 100


class JobStatus(str, Enum):
    """Lifecycle of a translation job."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class TranslateRequest(BaseModel):
    """Body of ``POST /translate``."""

    lines: list[str] = Field(description="Lines to translate, in order.")
    workers: int | None = Field(
        default=None,
        ge=1,
        le=MAX_API_WORKERS,
        description="Optional override of the worker count for this job.",
    )
    error_marker: str = Field(default="", description="Text used for failed lines.")


class LineFailure(BaseModel):
    """A line whose translation failed."""

    position: int
    error: str

    @classmethod
    def from_outcome(cls, outcome: Outcome) -> LineFailure:
        return cls(position=outcome.position, error=outcome.error or "")


class TranslateResult(BaseModel):
    """Ordered output of a completed job."""

    lines: list[str]
    failures: list[LineFailure] = Field(default_factory=list)
    elapsed_seconds: float = 0.0


class JobInfo(BaseModel):
    """Job metadata returned by both submit and poll endpoints."""

    job_id: str
    status: JobStatus
    created_at: datetime
    total: int = 0
    error: str | None = None
    result: TranslateResult | None = None


__all__ = [
    "JobStatus",
    "TranslateRequest",
    "LineFailure",
    "TranslateResult",
    "JobInfo",
    "MAX_API_WORKERS",
]
