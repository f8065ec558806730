"""Application settings and configuration.

This module defines all configuration options for the CoinSMS application.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="CoinSMS", alias="APP_NAME")
    app_version: str = Field(default="1.0.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")

    # Database configuration
    database_url: str = Field(default="sqlite:///./coinsms.db", alias="DATABASE_URL")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Identity provider (Supabase access tokens are HS256 JWTs)
    jwt_secret: str = Field(alias="SUPABASE_JWT_SECRET")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    jwt_audience: str | None = Field(default="authenticated", alias="JWT_AUDIENCE")
    admin_emails: list[str] = Field(default_factory=list, alias="ADMIN_EMAILS")

    # SMS gateway
    gateway_base_url: str = Field(
        default="https://www.innoverit.com/api/v2",
        alias="INNOVERIT_BASE_URL",
    )
    gateway_api_key: str | None = Field(default=None, alias="INNOVERIT_API_KEY")
    gateway_timeout_seconds: float = Field(default=30.0, alias="SMS_GATEWAY_TIMEOUT_SECONDS")

    # Per-account admission control for SMS submissions
    rate_limit_max: int = Field(default=10, alias="SMS_RATE_LIMIT_MAX")
    rate_limit_window_seconds: float = Field(default=60.0, alias="SMS_RATE_LIMIT_WINDOW_SECONDS")
    rate_limit_max_keys: int = Field(default=100_000, alias="SMS_RATE_LIMIT_MAX_KEYS")
    rate_limit_shards: int = Field(default=16, alias="SMS_RATE_LIMIT_SHARDS")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_json: bool = Field(default=False, alias="LOG_JSON")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PATCH", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling.

        Converts asyncpg URLs to psycopg for synchronous database operations
        like Alembic migrations.
        """
        url = self.database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url

    def is_admin_email(self, email: str | None) -> bool:
        """Return True if ``email`` is one of the configured administrator addresses."""
        if not email:
            return False
        normalized = email.strip().lower()
        return any(normalized == admin.strip().lower() for admin in self.admin_emails)


settings = Settings()  # type: ignore[call-arg]
