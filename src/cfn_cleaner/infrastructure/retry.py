"""Retry utilities for AWS API calls using tenacity.

Only throttling errors reported by the AWS API are retried. Anything else,
including exceptions that do not come from the API at all, is raised to the
caller on the first failure.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Optional, TypeVar, Union

from botocore.exceptions import ClientError
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
)

from cfn_cleaner.domain.config.retry import RetryOptions
from cfn_cleaner.infrastructure.backoff import BackoffCalculatorFactory, wait_backoff

T = TypeVar("T")

RETRYABLE_ERROR_NAMES = frozenset(
    {"ThrottlingException", "TooManyRequestsException", "RequestLimitExceeded"}
)
RETRYABLE_ERROR_CODE = "RequestThrottled"
RATE_EXCEEDED_MESSAGE = "Rate exceeded"


@dataclass(frozen=True)
class RemoteError:
    """Name, code and message of an error reported by the AWS API"""

    name: str
    code: Optional[str]
    message: str


def describe_remote_error(exception: BaseException) -> Optional[RemoteError]:
    """Extract the AWS error identity from an exception.

    Returns:
        RemoteError, or None if the exception is not an AWS API error
    """
    if not isinstance(exception, ClientError):
        return None
    error = exception.response.get("Error", {})
    name = error.get("Code")
    if not isinstance(name, str):
        return None
    return RemoteError(name=name, code=name, message=error.get("Message") or str(exception))


def is_retryable_error(error: RemoteError) -> bool:
    """Check if an AWS API error signals throttling"""
    return (
        error.name in RETRYABLE_ERROR_NAMES
        or error.code == RETRYABLE_ERROR_CODE
        or RATE_EXCEEDED_MESSAGE in (error.message or "")
    )


def _should_retry(exception: BaseException) -> bool:
    error = describe_remote_error(exception)
    return error is not None and is_retryable_error(error)


def resolve_retry_options(
    options: Union[RetryOptions, Mapping[str, Any], None] = None
) -> RetryOptions:
    """Fill missing retry settings with defaults"""
    if options is None:
        return RetryOptions()
    if isinstance(options, RetryOptions):
        return options
    return RetryOptions(**{k: v for k, v in options.items() if v is not None})


async def with_retry(
    operation: Callable[[Any], Awaitable[T]],
    params: Any,
    options: Union[RetryOptions, Mapping[str, Any], None] = None,
    *,
    logger: Optional[logging.Logger] = None,
    sleep: Optional[Callable[[float], Awaitable[None]]] = None,
) -> T:
    """Call an AWS operation, retrying throttling errors with backoff.

    Args:
        operation: Coroutine function performing the API call
        params: Argument passed to ``operation`` on every attempt
        options: Retry options (defaults fill any missing field)
        logger: Logger receiving retry warnings (module logger if None)
        sleep: Coroutine used to wait between attempts (asyncio.sleep if None)

    Returns:
        Result of the first successful call

    Raises:
        Exception: The last error, unchanged, once it is not retryable or
            max_attempts calls have failed
    """
    resolved = resolve_retry_options(options)
    log = logger or logging.getLogger(__name__)
    calculator = BackoffCalculatorFactory.create(resolved)

    def _before_sleep(retry_state: RetryCallState) -> None:
        if retry_state.outcome is None or retry_state.next_action is None:
            return
        error = describe_remote_error(retry_state.outcome.exception())
        attempt = retry_state.attempt_number
        delay_ms = retry_state.next_action.sleep * 1000.0
        log.warning(
            f"Rate exceeded. Retrying attempt {attempt}/{resolved.max_attempts} "
            f"after {delay_ms:.0f}ms (strategy={resolved.strategy.value}, "
            f"error={error.name}: {error.message})"
        )

    retrying = AsyncRetrying(
        stop=stop_after_attempt(resolved.max_attempts),
        wait=wait_backoff(calculator, resolved.max_attempts),
        retry=retry_if_exception(_should_retry),
        reraise=True,
        before_sleep=_before_sleep,
        sleep=sleep or asyncio.sleep,
    )
    return await retrying(operation, params)
