"""Settings for the external services notifications are delivered through."""

from infrastructure.configuration.integrations.aws import AwsSettings
from infrastructure.configuration.integrations.channels import ChannelSettings

__all__ = ["AwsSettings", "ChannelSettings"]
