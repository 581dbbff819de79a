"""Service for deleting many stacks concurrently"""

import asyncio
import logging
from contextlib import nullcontext
from typing import Awaitable, Callable, Iterable, List, Optional, Sequence, TypeVar

from cfn_cleaner.domain.config.retry import RetryOptions
from cfn_cleaner.domain.config.sweep import SweepConfig
from cfn_cleaner.domain.errors import SweepFailedError
from cfn_cleaner.domain.models.sweep_result import DeletionState, StackDeletion, SweepResult
from cfn_cleaner.infrastructure.cloudformation.base import StackGateway
from cfn_cleaner.infrastructure.retry import with_retry

T = TypeVar("T")


def chunk(items: Sequence[T], size: int) -> List[List[T]]:
    """Split items into consecutive chunks of size (the last may be shorter)

    Raises:
        ValueError: If size is smaller than 1
    """
    if size < 1:
        raise ValueError(f"Chunk size must be positive, got {size}")
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


class StackSweeper:
    """Deletes a set of stacks, one independent pipeline per stack.

    Each pipeline waits for the warm-up delay, requests deletion (retrying
    throttling errors) and then waits for the stack to be gone. Pipelines of
    all batches start at once; batches only group stacks logically. Set
    ``max_concurrency`` in the sweep config to bound how many pipelines talk
    to the API at the same time.
    """

    def __init__(
        self,
        gateway: StackGateway,
        sweep_config: Optional[SweepConfig] = None,
        retry_options: Optional[RetryOptions] = None,
        logger: Optional[logging.Logger] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        """Initialize stack sweeper

        Args:
            gateway: Stack-management API shared by all pipelines
            sweep_config: Batch size, warm-up, wait ceiling and failure policy
            retry_options: Retry settings for DeleteStack calls
            logger: Logger for progress and retry warnings (module logger if None)
            sleep: Coroutine used for warm-up and backoff waits (asyncio.sleep if None)
        """
        self.gateway = gateway
        self.config = sweep_config or SweepConfig()
        self.retry_options = retry_options or RetryOptions()
        self.logger = logger or logging.getLogger(__name__)
        self._sleep = sleep or asyncio.sleep

    async def sweep(self, stack_names: Iterable[str]) -> SweepResult:
        """Delete every stack and wait for all pipelines to settle

        Args:
            stack_names: Names of the stacks to delete

        Returns:
            SweepResult with one StackDeletion per stack

        Raises:
            SweepFailedError: If failure_policy is "raise" and any stack failed
        """
        names = list(dict.fromkeys(stack_names))
        batches = chunk(names, self.config.batch_size)
        deletions = [
            StackDeletion(stack_name=name, batch=index)
            for index, batch in enumerate(batches)
            for name in batch
        ]
        self.logger.info(
            f"Deleting {len(deletions)} stacks in {len(batches)} batches "
            f"of up to {self.config.batch_size}"
        )

        semaphore = (
            asyncio.Semaphore(self.config.max_concurrency)
            if self.config.max_concurrency
            else None
        )
        await asyncio.gather(*(self._run_pipeline(d, semaphore) for d in deletions))

        result = SweepResult(deletions=deletions)
        self.logger.info(
            f"done: {len(result.succeeded)} deleted, {len(result.failed)} failed"
        )
        if self.config.failure_policy == "raise" and not result.is_successful:
            raise SweepFailedError(result)
        return result

    async def _run_pipeline(
        self, deletion: StackDeletion, semaphore: Optional[asyncio.Semaphore]
    ) -> StackDeletion:
        """Run delay -> delete -> wait for one stack, recording failures on the record"""
        name = deletion.stack_name
        self._transition(deletion, DeletionState.DELAYED)
        await self._sleep(self.config.warmup_delay)

        try:
            async with semaphore or nullcontext():
                self._transition(deletion, DeletionState.DELETE_REQUESTED)
                deletion.response = await with_retry(
                    self.gateway.request_delete,
                    name,
                    self.retry_options,
                    logger=self.logger,
                    sleep=self._sleep,
                )
                self._transition(deletion, DeletionState.WAITING_FOR_COMPLETION)
                await self.gateway.wait_for_delete(name, self.config.max_wait_seconds)
        except Exception as e:
            deletion.error = e
            self._transition(deletion, DeletionState.FAILED)
            self.logger.error(f"Failed to delete stack {name}: {e}")
            return deletion

        self._transition(deletion, DeletionState.DONE)
        self.logger.info(f"Deleted stack {name}")
        return deletion

    def _transition(self, deletion: StackDeletion, state: DeletionState) -> None:
        self.logger.debug(f"{deletion.stack_name}: {deletion.state.value} -> {state.value}")
        deletion.state = state
