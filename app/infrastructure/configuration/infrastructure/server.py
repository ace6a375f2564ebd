"""HTTP server infrastructure settings."""

from pydantic import Field

from infrastructure.configuration.base import InfrastructureSettings


class ServerSettings(InfrastructureSettings):
    """HTTP server runtime configuration.

    Environment Variables:
        HOST: Interface the API binds to (default: 0.0.0.0)
        PORT: Port the API listens on (default: 3000)
        CORS_ALLOW_ORIGINS: Comma separated origins allowed outside production

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()
        port = settings.server.PORT
        ```
    """

    HOST: str = Field(default="0.0.0.0", alias="HOST")
    PORT: int = Field(default=3000, alias="PORT")
    CORS_ALLOW_ORIGINS: str = Field(
        default="http://localhost:3000,http://127.0.0.1:3000",
        alias="CORS_ALLOW_ORIGINS",
    )

    @property
    def cors_origins(self) -> list[str]:
        """Allowed CORS origins as a list."""
        return [o.strip() for o in self.CORS_ALLOW_ORIGINS.split(",") if o.strip()]
