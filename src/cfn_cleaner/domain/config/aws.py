"""AWS connection configuration model."""

from typing import Optional

from pydantic import BaseModel


class AwsConfig(BaseModel):
    """Configuration for the CloudFormation client.

    Attributes:
        region: AWS region (None = boto3 default resolution)
        profile: Named profile from the shared credentials file
    """

    region: Optional[str] = None
    profile: Optional[str] = None
