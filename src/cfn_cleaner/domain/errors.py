"""Exceptions raised by cfn-cleaner"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cfn_cleaner.domain.models.sweep_result import SweepResult


class CfnCleanerError(Exception):
    """Base class for cfn-cleaner errors"""


class ConfigurationError(CfnCleanerError):
    """Configuration validation error."""


class StackDeletionError(CfnCleanerError):
    """A stack did not reach DELETE_COMPLETE"""

    def __init__(self, stack_name: str, message: str):
        super().__init__(f"{stack_name}: {message}")
        self.stack_name = stack_name


class StackDeletionTimeoutError(StackDeletionError):
    """Deletion did not finish within the allowed wait"""

    def __init__(self, stack_name: str, max_wait_seconds: float):
        super().__init__(
            stack_name, f"deletion did not complete within {max_wait_seconds}s"
        )
        self.max_wait_seconds = max_wait_seconds


class StackDeletionFailedError(StackDeletionError):
    """Stack ended in a failed state such as DELETE_FAILED"""


class SweepFailedError(CfnCleanerError):
    """One or more pipelines of a sweep failed"""

    def __init__(self, result: "SweepResult"):
        failed = [d.stack_name for d in result.failed]
        super().__init__(f"Failed to delete {len(failed)} stack(s): {', '.join(failed)}")
        self.result = result
