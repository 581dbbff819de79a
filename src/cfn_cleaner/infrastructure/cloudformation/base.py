"""Stack management API interface"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Sequence

from cfn_cleaner.domain.models.stack import StackPage

# Stable states: nothing in progress except imports, and not already deleted
DELETABLE_STACK_STATUSES = (
    "CREATE_COMPLETE",
    "CREATE_FAILED",
    "DELETE_FAILED",
    "IMPORT_COMPLETE",
    "IMPORT_IN_PROGRESS",
    "IMPORT_ROLLBACK_COMPLETE",
    "IMPORT_ROLLBACK_FAILED",
    "ROLLBACK_COMPLETE",
    "ROLLBACK_FAILED",
    "UPDATE_COMPLETE",
    "UPDATE_FAILED",
    "UPDATE_ROLLBACK_COMPLETE",
    "UPDATE_ROLLBACK_FAILED",
)


class StackGateway(ABC):
    """Abstract base class for the remote stack-management API"""

    @abstractmethod
    async def list_stacks_page(
        self, status_filter: Sequence[str], next_token: Optional[str] = None
    ) -> StackPage:
        """Fetch one page of stacks

        Args:
            status_filter: Stack statuses to include
            next_token: Token from the previous page (None for the first page)

        Returns:
            StackPage with the stacks and the token of the next page
        """

    @abstractmethod
    async def request_delete(self, stack_name: str) -> Dict[str, Any]:
        """Ask the API to delete a stack

        Returns:
            Raw API response

        Raises:
            botocore.exceptions.ClientError: If the API rejects the request
        """

    @abstractmethod
    async def wait_for_delete(self, stack_name: str, max_wait_seconds: float) -> None:
        """Wait until a stack is deleted

        Raises:
            StackDeletionTimeoutError: If deletion takes longer than max_wait_seconds
            StackDeletionFailedError: If the stack ends in a failed state
        """
