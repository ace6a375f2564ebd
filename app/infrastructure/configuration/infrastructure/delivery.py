"""Delivery pipeline settings."""

from pydantic import Field

from infrastructure.configuration.base import InfrastructureSettings


class DeliverySettings(InfrastructureSettings):
    """Delivery pipeline configuration (dispatch, retry, backoff).

    Environment Variables:
        NOTIFICATION_MAX_RETRIES: Retry attempts before FAILED (default: 3)
        NOTIFICATION_RETRY_INTERVAL_MS: Fixed backoff between attempts (default: 5000)
        DISPATCH_CONCURRENCY: Dispatch queue consumer threads (default: 4)
        RETRY_CONCURRENCY: Retry queue consumer threads (default: 2)
        SCHEDULER_MAX_WORKERS: Threads running due retries (default: 4)
        SHUTDOWN_TIMEOUT_SECONDS: Grace period for in-flight handlers (default: 30)
        RECOVER_ON_STARTUP: Reschedule RETRYING records at startup (default: True)

    Backoff:
        The interval is fixed, not exponential. A notification that keeps
        failing is attempted max_retries + 1 times in total, with
        retry_interval_ms between attempts.
    """

    max_retries: int = Field(
        default=3,
        alias="NOTIFICATION_MAX_RETRIES",
        ge=1,
        description="Retries after the first attempt before marking FAILED",
    )
    retry_interval_ms: int = Field(
        default=5000,
        alias="NOTIFICATION_RETRY_INTERVAL_MS",
        ge=0,
        description="Fixed wait before a retried notification is resubmitted",
    )
    dispatch_concurrency: int = Field(
        default=4,
        alias="DISPATCH_CONCURRENCY",
        ge=1,
        description="Consumer threads on the dispatch queue",
    )
    retry_concurrency: int = Field(
        default=2,
        alias="RETRY_CONCURRENCY",
        ge=1,
        description="Consumer threads on the retry queue",
    )
    scheduler_max_workers: int = Field(
        default=4,
        alias="SCHEDULER_MAX_WORKERS",
        ge=1,
        description="Threads executing retries once their backoff elapsed",
    )
    shutdown_timeout_seconds: float = Field(
        default=30.0,
        alias="SHUTDOWN_TIMEOUT_SECONDS",
        ge=0,
        description="Time allowed for in-flight handlers during shutdown",
    )
    recover_on_startup: bool = Field(
        default=True,
        alias="RECOVER_ON_STARTUP",
        description="Reschedule records left in RETRYING by a previous process",
    )

    @property
    def retry_interval_seconds(self) -> float:
        """Backoff interval in seconds."""
        return self.retry_interval_ms / 1000.0
