"""Infrastructure AWS clients public API.

DI-friendly AWS clients built on a shared SessionProvider. The notification
service only talks to DynamoDB:

    session = SessionProvider(
        region="ca-central-1", endpoint_url="http://localhost:8000"
    )
    dynamodb = DynamoDBClient(session_provider=session)

    result = dynamodb.get_item("notifications", Key={"id": {"S": "abc"}})
    if result.is_success:
        item = result.data.get("Item")
"""

from infrastructure.clients.aws.dynamodb import DynamoDBClient
from infrastructure.clients.aws.session_provider import SessionProvider

__all__ = [
    "DynamoDBClient",
    "SessionProvider",
]
