"""Domain models"""

from cfn_cleaner.domain.models.stack import StackPage, StackSummary
from cfn_cleaner.domain.models.sweep_result import DeletionState, StackDeletion, SweepResult

__all__ = ["DeletionState", "StackDeletion", "StackPage", "StackSummary", "SweepResult"]
