"""Test doubles shared by the cfn-cleaner test suite."""

from __future__ import annotations

import asyncio
from typing import Dict, List, Optional, Sequence

from botocore.exceptions import ClientError

from cfn_cleaner.domain.models.stack import StackPage, StackSummary
from cfn_cleaner.infrastructure.cloudformation.base import StackGateway


def make_client_error(code: str, message: str = "", operation: str = "DeleteStack") -> ClientError:
    """Build a botocore ClientError as the AWS API would raise it."""
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


class FakeStackGateway(StackGateway):
    """In-memory StackGateway.

    Pages are served in order; ``delete_errors`` holds exceptions raised by
    successive DeleteStack calls for a stack before it succeeds.
    """

    def __init__(
        self,
        pages: Optional[List[List[StackSummary]]] = None,
        delete_errors: Optional[Dict[str, List[Exception]]] = None,
        wait_errors: Optional[Dict[str, Exception]] = None,
        yields_per_call: int = 1,
    ):
        self.pages = pages or [[]]
        self.delete_errors = {k: list(v) for k, v in (delete_errors or {}).items()}
        self.wait_errors = wait_errors or {}
        self.yields_per_call = yields_per_call
        self.list_calls: List[Optional[str]] = []
        self.delete_calls: List[str] = []
        self.wait_calls: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def _yield(self) -> None:
        for _ in range(self.yields_per_call):
            await asyncio.sleep(0)

    async def list_stacks_page(
        self, status_filter: Sequence[str], next_token: Optional[str] = None
    ) -> StackPage:
        self.list_calls.append(next_token)
        index = int(next_token) if next_token else 0
        next_index = index + 1
        return StackPage(
            stacks=list(self.pages[index]),
            next_token=str(next_index) if next_index < len(self.pages) else None,
        )

    async def request_delete(self, stack_name: str) -> dict:
        self.delete_calls.append(stack_name)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await self._yield()
            errors = self.delete_errors.get(stack_name)
            if errors:
                raise errors.pop(0)
        except Exception:
            self.in_flight -= 1
            raise
        return {"ResponseMetadata": {"HTTPStatusCode": 200}, "StackName": stack_name}

    async def wait_for_delete(self, stack_name: str, max_wait_seconds: float) -> None:
        self.wait_calls.append(stack_name)
        try:
            await self._yield()
            if stack_name in self.wait_errors:
                raise self.wait_errors[stack_name]
        finally:
            self.in_flight -= 1


class SleepRecorder:
    """Stand-in for asyncio.sleep that records delays without waiting."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def stack(name: str, status: str = "CREATE_COMPLETE") -> StackSummary:
    return StackSummary(name=name, status=status, stack_id=f"arn:aws:cloudformation:::stack/{name}")
