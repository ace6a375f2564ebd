"""DynamoDB client for AWS operations.

Provides access to the DynamoDB operations the notification store needs
(get_item, put_item, update_item, query, describe_table) with consistent
error handling and OperationResult return types.
"""

from typing import Any, Dict

import structlog

from infrastructure.clients.aws.executor import execute_aws_api_call
from infrastructure.clients.aws.session_provider import SessionProvider
from infrastructure.operations.result import OperationResult

logger = structlog.get_logger()


class DynamoDBClient:
    """Client for DynamoDB operations.

    All methods return OperationResult. Items use the low-level attribute
    value format ({"S": "..."}, {"N": "1"}).

    Args:
        session_provider: SessionProvider for region/endpoint/role handling
        max_retries: Throttling retries per call
    """

    def __init__(self, session_provider: SessionProvider, max_retries: int = 3) -> None:
        self._session_provider = session_provider
        self._max_retries = max_retries
        self._logger = logger.bind(component="dynamodb_client")

    def _call(self, method: str, **kwargs) -> OperationResult:
        client_kwargs = self._session_provider.build_client_kwargs()
        kwargs.setdefault("max_retries", self._max_retries)
        return execute_aws_api_call("dynamodb", method, **client_kwargs, **kwargs)

    def get_item(
        self, table_name: str, Key: Dict[str, Any], **kwargs
    ) -> OperationResult:
        """Get an item by primary key.

        Returns:
            OperationResult whose data is the raw response; the item is under
            "Item" when it exists.
        """
        return self._call("get_item", TableName=table_name, Key=Key, **kwargs)

    def put_item(
        self, table_name: str, Item: Dict[str, Any], **kwargs
    ) -> OperationResult:
        """Put an item (supports ConditionExpression for create-only writes)."""
        return self._call("put_item", TableName=table_name, Item=Item, **kwargs)

    def update_item(
        self, table_name: str, Key: Dict[str, Any], **kwargs
    ) -> OperationResult:
        """Update an item (UpdateExpression, ConditionExpression, ReturnValues)."""
        return self._call("update_item", TableName=table_name, Key=Key, **kwargs)

    def query(
        self,
        table_name: str,
        KeyConditionExpression: str,
        **kwargs,
    ) -> OperationResult:
        """Query items, following every page.

        Returns:
            OperationResult whose data is the list of collected items
        """
        return self._call(
            "query",
            keys=["Items"],
            force_paginate=True,
            TableName=table_name,
            KeyConditionExpression=KeyConditionExpression,
            **kwargs,
        )

    def describe_table(self, table_name: str) -> OperationResult:
        """Describe a table, used to verify it exists and is reachable."""
        return self._call("describe_table", TableName=table_name, max_retries=0)

    def healthcheck(self) -> OperationResult:
        """Cheap `list_tables` call verifying DynamoDB is reachable."""
        return self._call("list_tables", max_retries=0, Limit=1)

