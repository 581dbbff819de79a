"""Stack listing models"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class StackSummary:
    """A stack as returned by ListStacks"""

    name: str
    status: str
    stack_id: Optional[str] = None


@dataclass
class StackPage:
    """One page of a ListStacks response"""

    stacks: List[StackSummary] = field(default_factory=list)
    next_token: Optional[str] = None  # None on the last page
