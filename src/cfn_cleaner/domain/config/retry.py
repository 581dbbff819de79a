"""Retry and backoff configuration models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class BackoffStrategy(str, Enum):
    """Algorithm used to compute the wait between retry attempts"""

    EXPONENTIAL = "exponential"
    DECORRELATED_JITTER = "decorrelated-jitter"
    FULL_JITTER = "full-jitter"


class BackoffConfig(BaseModel):
    """Configuration for a backoff calculator.

    Delays are expressed in milliseconds.

    Attributes:
        strategy: Backoff strategy
        base_delay: Initial delay in milliseconds
        max_delay: Upper bound for computed delays in milliseconds
        jitter_factor: Spread of the random jitter. For decorrelated jitter this
            is a multiplier and is not limited to 1.0; the other
            strategies accept values from 0 to 1
    """

    strategy: BackoffStrategy = BackoffStrategy.EXPONENTIAL
    base_delay: int = Field(1000, gt=0)
    max_delay: int = Field(20000, gt=0)
    jitter_factor: float = Field(0.2, ge=0.0)

    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="after")
    def _check_delay_bounds(self) -> "BackoffConfig":
        if self.max_delay < self.base_delay:
            raise ValueError("max_delay must be greater than or equal to base_delay")
        if self.jitter_factor > 1.0 and self.strategy != BackoffStrategy.DECORRELATED_JITTER:
            raise ValueError(
                f"jitter_factor must be between 0 and 1 for the {self.strategy.value} strategy"
            )
        return self


class RetryOptions(BackoffConfig):
    """Backoff configuration plus the attempt budget of a retry session.

    Attributes:
        max_attempts: Total number of calls, including the first one
    """

    max_attempts: int = Field(3, gt=0)


# Settings used for DeleteStack calls unless the config file overrides them
DELETE_STACK_RETRY = {
    "strategy": BackoffStrategy.DECORRELATED_JITTER,
    "base_delay": 30000,
    "max_delay": 300000,
    "jitter_factor": 1.0,
    "max_attempts": 3,
}
