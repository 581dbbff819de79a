"""Sweep result models - per-stack deletion state and the aggregated outcome"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class DeletionState(str, Enum):
    """Lifecycle of one stack's delete pipeline"""

    PENDING = "PENDING"
    DELAYED = "DELAYED"
    DELETE_REQUESTED = "DELETE_REQUESTED"
    WAITING_FOR_COMPLETION = "WAITING_FOR_COMPLETION"
    DONE = "DONE"
    FAILED = "FAILED"


@dataclass
class StackDeletion:
    """Deletion record for a single stack"""

    stack_name: str
    batch: int  # Index of the logical batch the stack belongs to
    state: DeletionState = DeletionState.PENDING
    response: Optional[Dict[str, Any]] = None  # DeleteStack response
    error: Optional[BaseException] = None

    @property
    def is_successful(self) -> bool:
        return self.state is DeletionState.DONE


@dataclass
class SweepResult:
    """Outcome of a sweep, in the order stacks were submitted"""

    deletions: List[StackDeletion] = field(default_factory=list)

    @property
    def succeeded(self) -> List[StackDeletion]:
        return [d for d in self.deletions if d.is_successful]

    @property
    def failed(self) -> List[StackDeletion]:
        return [d for d in self.deletions if d.state is DeletionState.FAILED]

    @property
    def is_successful(self) -> bool:
        """Check if every stack was deleted"""
        return not self.failed

    @property
    def batch_count(self) -> int:
        return len({d.batch for d in self.deletions})
