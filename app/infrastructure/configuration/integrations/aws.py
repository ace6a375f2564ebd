"""AWS access used by the DynamoDB record store."""

from pydantic import Field

from infrastructure.configuration.base import IntegrationSettings


class AwsSettings(IntegrationSettings):
    """Region and optional assumed role for DynamoDB calls.

    Environment Variables:
        AWS_REGION: Region of the notifications table (default: ca-central-1)
        AWS_ROLE_ARN: Role to assume before calling DynamoDB, if any

    Credentials themselves come from the standard boto3 chain.
    """

    AWS_REGION: str = Field(default="ca-central-1", alias="AWS_REGION")
    ROLE_ARN: str | None = Field(default=None, alias="AWS_ROLE_ARN")
