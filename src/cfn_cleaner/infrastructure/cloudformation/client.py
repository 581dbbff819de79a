"""CloudFormation API client"""

import asyncio
import logging
import math
from typing import Any, Dict, Optional, Sequence

import boto3
from botocore.client import BaseClient
from botocore.config import Config
from botocore.exceptions import WaiterError

from cfn_cleaner.domain.errors import StackDeletionFailedError, StackDeletionTimeoutError
from cfn_cleaner.domain.models.stack import StackPage, StackSummary
from cfn_cleaner.infrastructure.cloudformation.base import StackGateway

logger = logging.getLogger(__name__)

# Poll interval of the stack_delete_complete waiter
DEFAULT_POLL_INTERVAL = 30

# DeleteStack throttling is retried by with_retry alone
NO_SDK_RETRIES = Config(retries={"total_max_attempts": 1, "mode": "standard"})


class CloudFormationGateway(StackGateway):
    """StackGateway backed by a boto3 CloudFormation client.

    boto3 calls block, so each one runs in a worker thread and the event loop
    stays free for the other deletion pipelines. The clients are shared by all
    pipelines. DeleteStack uses a client with the SDK retries turned off, so
    throttled deletes are retried only by with_retry.
    """

    def __init__(
        self,
        region: Optional[str] = None,
        profile: Optional[str] = None,
        client: Optional[BaseClient] = None,
        delete_client: Optional[BaseClient] = None,
        poll_interval: int = DEFAULT_POLL_INTERVAL,
    ):
        """Initialize CloudFormation gateway

        Args:
            region: AWS region (default: boto3 resolution from env/profile)
            profile: Named AWS profile
            client: Pre-built CloudFormation client (takes precedence)
            delete_client: Client used for DeleteStack (defaults to client)
            poll_interval: Seconds between waiter polls
        """
        if client is None:
            session = boto3.Session(profile_name=profile, region_name=region)
            client = session.client("cloudformation")
            if delete_client is None:
                delete_client = session.client("cloudformation", config=NO_SDK_RETRIES)
        self.client = client
        self.delete_client = delete_client or client
        self.poll_interval = poll_interval
        logger.info(f"CloudFormation client initialized for {self.client.meta.region_name}")

    async def list_stacks_page(
        self, status_filter: Sequence[str], next_token: Optional[str] = None
    ) -> StackPage:
        kwargs: Dict[str, Any] = {"StackStatusFilter": list(status_filter)}
        if next_token:
            kwargs["NextToken"] = next_token

        response = await asyncio.to_thread(self.client.list_stacks, **kwargs)
        stacks = [
            StackSummary(
                name=summary["StackName"],
                status=summary["StackStatus"],
                stack_id=summary.get("StackId"),
            )
            for summary in response.get("StackSummaries", [])
            if summary.get("StackName")
        ]
        return StackPage(stacks=stacks, next_token=response.get("NextToken"))

    async def request_delete(self, stack_name: str) -> Dict[str, Any]:
        logger.debug(f"DeleteStack {stack_name}")
        return await asyncio.to_thread(self.delete_client.delete_stack, StackName=stack_name)

    async def wait_for_delete(self, stack_name: str, max_wait_seconds: float) -> None:
        delay = min(self.poll_interval, max(1, math.ceil(max_wait_seconds)))
        # The waiter sleeps between polls only, so one extra poll covers the full window
        max_attempts = max(1, math.ceil(max_wait_seconds / delay)) + 1
        waiter = self.client.get_waiter("stack_delete_complete")

        try:
            # The waiter bounds itself by attempts; wait_for enforces the wall clock
            await asyncio.wait_for(
                asyncio.to_thread(
                    waiter.wait,
                    StackName=stack_name,
                    WaiterConfig={"Delay": delay, "MaxAttempts": max_attempts},
                ),
                timeout=delay * max_attempts,
            )
        except asyncio.TimeoutError as e:
            raise StackDeletionTimeoutError(stack_name, max_wait_seconds) from e
        except WaiterError as e:
            if "Max attempts exceeded" in str(e):
                raise StackDeletionTimeoutError(stack_name, max_wait_seconds) from e
            raise StackDeletionFailedError(stack_name, str(e)) from e
        logger.debug(f"Stack {stack_name} reached DELETE_COMPLETE")
