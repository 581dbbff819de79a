"""Main application configuration model."""

from pydantic import BaseModel, ConfigDict, Field

from cfn_cleaner.domain.config.aws import AwsConfig
from cfn_cleaner.domain.config.retry import DELETE_STACK_RETRY, RetryOptions
from cfn_cleaner.domain.config.sweep import SweepConfig


class AppConfig(BaseModel):
    """Main application configuration.

    This is the root configuration model that aggregates all configuration sections.
    Validation is performed at load time to fail fast on configuration errors.

    Attributes:
        aws: CloudFormation client configuration
        sweep: Batch deletion configuration
        retry: Retry settings for DeleteStack calls
    """

    aws: AwsConfig = Field(default_factory=AwsConfig)
    sweep: SweepConfig = Field(default_factory=SweepConfig)
    retry: RetryOptions = Field(default_factory=lambda: RetryOptions(**DELETE_STACK_RETRY))

    model_config = ConfigDict(
        validate_assignment=True,  # Validate on attribute assignment
        extra="forbid",  # Reject unknown fields
        json_schema_extra={
            "example": {
                "aws": {
                    "region": "us-east-1",
                    "profile": None,
                },
                "sweep": {
                    "batch_size": 3,
                    "warmup_delay": 3.0,
                    "max_wait_seconds": 180,
                    "max_concurrency": None,
                    "failure_policy": "collect",
                },
                "retry": {
                    "strategy": "decorrelated-jitter",
                    "base_delay": 30000,
                    "max_delay": 300000,
                    "jitter_factor": 1.0,
                    "max_attempts": 3,
                },
            }
        },
    )
