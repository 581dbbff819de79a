"""Sweep (batch deletion) configuration model."""

from typing import Literal, Optional

from pydantic import BaseModel, Field


class SweepConfig(BaseModel):
    """Configuration for the batch deletion orchestrator.

    Attributes:
        batch_size: Number of stacks grouped in one logical batch
        warmup_delay: Seconds each pipeline waits before its delete request
        max_wait_seconds: Ceiling for waiting on a stack to finish deleting
        max_concurrency: Optional limit on pipelines deleting at the same time
            (None = every pipeline runs at once)
        failure_policy: "collect" returns per-stack errors, "raise" raises once
            every pipeline has settled
    """

    batch_size: int = Field(3, gt=0)
    warmup_delay: float = Field(3.0, ge=0.0)
    max_wait_seconds: int = Field(180, gt=0)
    max_concurrency: Optional[int] = Field(None, gt=0)
    failure_policy: Literal["collect", "raise"] = "collect"
