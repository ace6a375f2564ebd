"""Notification record store settings."""

from pydantic import Field, field_validator

from infrastructure.configuration.base import InfrastructureSettings


class StoreSettings(InfrastructureSettings):
    """Persistent record store configuration.

    Environment Variables:
        STORE_BACKEND: Backend type - 'memory' or 'dynamodb'
        STORE_URI: DynamoDB endpoint URL (empty uses the AWS default endpoint)
        STORE_TABLE_NAME: DynamoDB table holding notification records

    Store Backends:
        - memory: In-process dict store (development, testing)
        - dynamodb: DynamoDB table with user and status indexes (production)
    """

    backend: str = Field(
        default="memory",
        alias="STORE_BACKEND",
        description="Store backend: 'memory' or 'dynamodb'",
    )
    uri: str = Field(
        default="",
        alias="STORE_URI",
        description="DynamoDB endpoint URL (e.g. http://localhost:8000)",
    )
    table_name: str = Field(
        default="notifications",
        alias="STORE_TABLE_NAME",
        description="DynamoDB table name for notification records",
    )
    user_index_name: str = Field(
        default="user_id-created_at-index",
        alias="STORE_USER_INDEX",
        description="GSI keyed by user_id, sorted by created_at",
    )
    status_index_name: str = Field(
        default="status-updated_at-index",
        alias="STORE_STATUS_INDEX",
        description="GSI keyed by status, sorted by updated_at",
    )

    @field_validator("backend")
    @classmethod
    def validate_backend(cls, v: str) -> str:
        """Normalize and validate the backend name."""
        value = v.strip().lower()
        if value not in ("memory", "dynamodb"):
            raise ValueError(f"STORE_BACKEND must be 'memory' or 'dynamodb': {v}")
        return value
