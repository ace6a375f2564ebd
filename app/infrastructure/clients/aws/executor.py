"""Boto3 call execution for infrastructure clients.

Provides `get_boto3_client` and `execute_aws_api_call`, which wrap a single
AWS API call in an OperationResult. Settings are never read here;
configuration arrives through parameters.
"""

import time
from typing import Any, Dict, List, Optional

import boto3  # type: ignore
from botocore.client import BaseClient  # type: ignore
from botocore.exceptions import BotoCoreError, ClientError  # type: ignore
import structlog

from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus

logger = structlog.get_logger()

THROTTLING_ERROR_CODES = frozenset(
    {
        "Throttling",
        "ThrottlingException",
        "RequestLimitExceeded",
        "ProvisionedThroughputExceededException",
    }
)
NOT_FOUND_ERROR_CODES = frozenset({"ResourceNotFoundException"})
UNAUTHORIZED_ERROR_CODES = frozenset(
    {"AccessDeniedException", "UnauthorizedOperation", "UnrecognizedClientException"}
)


def get_boto3_client(
    service_name: str,
    session_config: Optional[Dict[str, Any]] = None,
    client_config: Optional[Dict[str, Any]] = None,
    role_arn: Optional[str] = None,
    session_name: str = "NotificationServiceSession",
) -> BaseClient:
    """Create a boto3 client for the given service.

    Args:
        service_name: AWS service name (e.g., 'dynamodb')
        session_config: Optional boto3 session kwargs (e.g., region_name)
        client_config: Optional client kwargs (e.g., endpoint_url)
        role_arn: Optional role to assume before creating the client
        session_name: Name for the assumed role session

    Returns:
        botocore client instance
    """
    session_config = session_config or {}
    client_config = client_config or {}

    if role_arn:
        sts = boto3.client("sts")
        creds = sts.assume_role(RoleArn=role_arn, RoleSessionName=session_name)[
            "Credentials"
        ]
        session = boto3.Session(
            aws_access_key_id=creds["AccessKeyId"],
            aws_secret_access_key=creds["SecretAccessKey"],
            aws_session_token=creds["SessionToken"],
            **session_config,
        )
    else:
        session = boto3.Session(**session_config)

    return session.client(service_name, **client_config)


def _calculate_retry_delay(attempt: int, backoff_factor: float = 0.5) -> float:
    return backoff_factor * (2**attempt)


def _paginate(client: BaseClient, method: str, keys: Optional[List[str]], kwargs):
    results: List[Any] = []
    for page in client.get_paginator(method).paginate(**kwargs):
        for key, value in page.items():
            if key == "ResponseMetadata" or (keys and key not in keys):
                continue
            if isinstance(value, list):
                results.extend(value)
            elif not keys:
                results.append(value)
    return results


def _map_client_error(e: ClientError) -> OperationResult:
    error = e.response.get("Error", {})
    error_code = error.get("Code")
    error_message = error.get("Message", str(e))

    if error_code in THROTTLING_ERROR_CODES:
        return OperationResult.transient_error(
            message=error_message, error_code=error_code
        )

    if error_code in UNAUTHORIZED_ERROR_CODES:
        return OperationResult.error(
            OperationStatus.UNAUTHORIZED,
            message=error_message,
            error_code=error_code,
        )

    if error_code in NOT_FOUND_ERROR_CODES:
        return OperationResult.error(
            OperationStatus.NOT_FOUND,
            message=error_message,
            error_code=error_code,
        )

    return OperationResult.permanent_error(message=error_message, error_code=error_code)


def execute_aws_api_call(
    service_name: str,
    method: str,
    keys: Optional[List[str]] = None,
    role_arn: Optional[str] = None,
    session_config: Optional[Dict[str, Any]] = None,
    client_config: Optional[Dict[str, Any]] = None,
    max_retries: int = 3,
    force_paginate: bool = False,
    backoff_factor: float = 0.5,
    **kwargs,
) -> OperationResult:
    """Execute an AWS API call with retries and standardized results.

    Throttling errors are retried with exponential backoff up to max_retries.
    Every other failure is returned immediately.

    Args:
        service_name: AWS service name
        method: Client method name (e.g., 'put_item')
        keys: Result keys to collect when paginating (e.g., ['Items'])
        role_arn: Optional role to assume
        session_config: boto3 session kwargs
        client_config: boto3 client kwargs
        max_retries: Retries for throttling errors
        force_paginate: Collect every page through the method's paginator
        backoff_factor: Base delay in seconds between throttling retries
        **kwargs: Parameters passed to the API method

    Returns:
        OperationResult with the response (or collected items) in data
    """
    for attempt in range(max_retries + 1):
        try:
            client = get_boto3_client(
                service_name,
                session_config=session_config,
                client_config=client_config,
                role_arn=role_arn,
            )
            if force_paginate and client.can_paginate(method):
                response = _paginate(client, method, keys, kwargs)
            else:
                response = getattr(client, method)(**kwargs)
            return OperationResult.success(
                data=response, message=f"{service_name}.{method} succeeded"
            )

        except ClientError as e:
            mapped = _map_client_error(e)
            if mapped.is_transient and attempt < max_retries:
                delay = _calculate_retry_delay(attempt, backoff_factor)
                logger.warning(
                    "aws_api_retry",
                    service=service_name,
                    method=method,
                    attempt=attempt + 1,
                    error_code=mapped.error_code,
                    delay=delay,
                )
                time.sleep(delay)
                continue

            logger.warning(
                "aws_api_error",
                service=service_name,
                method=method,
                error_code=mapped.error_code,
                error=mapped.message,
            )
            return mapped

        except (BotoCoreError, Exception) as e:  # pylint: disable=broad-except
            logger.error(
                "aws_api_unexpected_error",
                service=service_name,
                method=method,
                error=str(e),
            )
            return OperationResult.transient_error(
                message=str(e), error_code="CONNECTION_ERROR"
            )

    return OperationResult.transient_error(message="aws_api_retries_exhausted")
