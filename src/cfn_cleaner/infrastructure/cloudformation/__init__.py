"""CloudFormation stack-management API"""

from cfn_cleaner.infrastructure.cloudformation.base import DELETABLE_STACK_STATUSES, StackGateway
from cfn_cleaner.infrastructure.cloudformation.client import CloudFormationGateway

__all__ = ["CloudFormationGateway", "DELETABLE_STACK_STATUSES", "StackGateway"]
