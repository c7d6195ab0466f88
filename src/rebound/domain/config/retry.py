"""Retry configuration model."""

from pydantic import BaseModel, ConfigDict, Field


class RetryConfig(BaseModel):
    """Configuration for retry logic.

    The wait before attempt ``n`` (0-based) is
    ``interval_seconds * backoff_rate ** n``; the first attempt never waits.

    Attributes:
        max_attempts: Total attempts including the first one
        interval_seconds: Base backoff unit in seconds
        backoff_rate: Exponential multiplier applied per retry
    """

    max_attempts: int = Field(1, ge=1)
    interval_seconds: float = Field(0.0, ge=0.0)
    backoff_rate: float = Field(0.0, ge=0.0)

    model_config = ConfigDict(frozen=True, extra="forbid")
