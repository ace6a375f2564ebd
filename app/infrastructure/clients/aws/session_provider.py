"""Shared boto3 session settings for the AWS clients."""

from typing import Any, Dict, Optional

import structlog

logger = structlog.get_logger()


class SessionProvider:
    """Region, endpoint and assumed role applied to every AWS call.

    ``endpoint_url`` points the clients at DynamoDB Local in development.
    Empty strings from the environment are treated as unset.
    """

    def __init__(
        self,
        region: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        role_arn: Optional[str] = None,
    ) -> None:
        self.region = region
        self.endpoint_url = endpoint_url or None
        self.role_arn = role_arn or None

    def build_client_kwargs(self, role_arn: Optional[str] = None) -> Dict[str, Any]:
        """Keyword arguments for ``execute_aws_api_call``.

        A ``role_arn`` passed here wins over the provider's default role.
        """
        region = {"region_name": self.region} if self.region else {}
        client_config = dict(region)
        if self.endpoint_url:
            client_config["endpoint_url"] = self.endpoint_url

        effective_role = role_arn or self.role_arn
        logger.debug(
            "aws_client_kwargs_built",
            region=self.region,
            endpoint_url=self.endpoint_url,
            role_arn=effective_role,
        )
        return {
            "session_config": region or None,
            "client_config": client_config or None,
            "role_arn": effective_role,
        }
