"""Configuration models with Pydantic validation."""

from cfn_cleaner.domain.config.app import AppConfig
from cfn_cleaner.domain.config.aws import AwsConfig
from cfn_cleaner.domain.config.retry import BackoffConfig, BackoffStrategy, RetryOptions
from cfn_cleaner.domain.config.sweep import SweepConfig

__all__ = [
    "AppConfig",
    "AwsConfig",
    "BackoffConfig",
    "BackoffStrategy",
    "RetryOptions",
    "SweepConfig",
]
