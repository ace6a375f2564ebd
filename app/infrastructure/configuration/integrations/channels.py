"""Channel provider settings (email, SMS, in-app)."""

from pydantic import Field, field_validator

from infrastructure.configuration.base import IntegrationSettings


class ChannelSettings(IntegrationSettings):
    """Delivery channel configuration.

    Credentials are opaque strings passed through to the gateways. The
    simulated gateway ignores them but the channels still log the sender
    identity they would use.

    Environment Variables:
        CHANNEL_GATEWAY: Gateway kind - 'simulated' or 'logging'
        EMAIL_API_KEY: Email provider API key
        EMAIL_FROM: Sender address for email notifications
        SMS_ACCOUNT_SID: SMS provider account id
        SMS_AUTH_TOKEN: SMS provider auth token
        SMS_FROM: Sender number for SMS notifications
        SMS_DEFAULT_PHONE: Destination used when metadata has no phoneNumber
        IN_APP_ENABLED: Register the in-app channel (default: True)
        EMAIL_LATENCY_MS / SMS_LATENCY_MS / IN_APP_LATENCY_MS: simulated latency
        EMAIL_FAILURE_RATE / SMS_FAILURE_RATE / IN_APP_FAILURE_RATE:
            simulated failure probability in [0, 1]

    Gateways:
        - simulated: sleeps for the channel latency, then fails at random
          with the channel failure rate (demo and load testing)
        - logging: logs the delivery and always succeeds
    """

    gateway: str = Field(
        default="simulated",
        alias="CHANNEL_GATEWAY",
        description="Channel gateway: 'simulated' or 'logging'",
    )

    EMAIL_API_KEY: str = Field(default="mock-email-api-key", alias="EMAIL_API_KEY")
    EMAIL_FROM: str = Field(default="notifications@example.com", alias="EMAIL_FROM")

    SMS_ACCOUNT_SID: str = Field(
        default="mock-sms-account-sid", alias="SMS_ACCOUNT_SID"
    )
    SMS_AUTH_TOKEN: str = Field(default="mock-sms-auth-token", alias="SMS_AUTH_TOKEN")
    SMS_FROM: str = Field(default="+15551234567", alias="SMS_FROM")
    SMS_DEFAULT_PHONE: str = Field(default="+15551234567", alias="SMS_DEFAULT_PHONE")

    IN_APP_ENABLED: bool = Field(default=True, alias="IN_APP_ENABLED")

    email_latency_ms: int = Field(default=500, alias="EMAIL_LATENCY_MS", ge=0)
    sms_latency_ms: int = Field(default=300, alias="SMS_LATENCY_MS", ge=0)
    in_app_latency_ms: int = Field(default=100, alias="IN_APP_LATENCY_MS", ge=0)

    email_failure_rate: float = Field(
        default=0.10, alias="EMAIL_FAILURE_RATE", ge=0.0, le=1.0
    )
    sms_failure_rate: float = Field(
        default=0.15, alias="SMS_FAILURE_RATE", ge=0.0, le=1.0
    )
    in_app_failure_rate: float = Field(
        default=0.05, alias="IN_APP_FAILURE_RATE", ge=0.0, le=1.0
    )

    @field_validator("gateway")
    @classmethod
    def validate_gateway(cls, v: str) -> str:
        """Normalize and validate the gateway kind."""
        value = v.strip().lower()
        if value not in ("simulated", "logging"):
            raise ValueError(f"CHANNEL_GATEWAY must be 'simulated' or 'logging': {v}")
        return value
