"""Listing and prefix filtering of deletable stacks"""

import logging
from typing import AsyncIterator, List, Sequence

from cfn_cleaner.domain.models.stack import StackPage
from cfn_cleaner.infrastructure.cloudformation.base import DELETABLE_STACK_STATUSES, StackGateway

logger = logging.getLogger(__name__)


async def iter_stack_pages(
    gateway: StackGateway, status_filter: Sequence[str] = DELETABLE_STACK_STATUSES
) -> AsyncIterator[StackPage]:
    """Yield ListStacks pages, following NextToken until the last page.

    Every call starts a fresh listing from the first page.
    """
    next_token = None
    page_number = 0
    while True:
        page = await gateway.list_stacks_page(status_filter, next_token)
        page_number += 1
        logger.debug(f"ListStacks page {page_number}: {len(page.stacks)} stacks")
        yield page
        if not page.next_token:
            break
        next_token = page.next_token


async def find_stacks(gateway: StackGateway, prefix: str) -> List[str]:
    """Collect the names of deletable stacks starting with prefix

    Args:
        gateway: Stack-management API
        prefix: Stack name prefix

    Returns:
        Unique stack names in listing order
    """
    names: List[str] = []
    seen = set()
    async for page in iter_stack_pages(gateway):
        for stack in page.stacks:
            if stack.name.startswith(prefix) and stack.name not in seen:
                seen.add(stack.name)
                names.append(stack.name)
    logger.info(f"Found {len(names)} stacks with prefix '{prefix}'")
    return names
