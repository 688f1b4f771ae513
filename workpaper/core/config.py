"""Application configuration (settings and environment).

Single source of truth for configuration, loaded with pydantic-settings
from the environment and .env. Required values are validated on first
get_settings() call.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment and .env.

    Everything has a default except DATABASE_URL (when the backend is
    postgres) and SECRET_KEY, checked in validate_required.
    """

    # App
    app_name: str = "workpaper"
    app_version: str = "1.0.0"
    debug: bool = False

    # Database: "postgres" (SQLAlchemy + Alembic) or "none" (no SQL; DB routes return 503)
    database_backend: str = "postgres"
    database_url: str = ""
    database_echo: bool = False
    db_pool_size: int | None = None
    db_max_overflow: int | None = None
    db_command_timeout: int | None = None

    # Security (JWT issued by the identity provider; claims sub, tenant_id, role)
    secret_key: SecretStr = SecretStr("")
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 480

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:8080"

    # Request / middleware
    request_id_header: str = "X-Request-ID"
    correlation_id_header: str = "X-Correlation-ID"

    # Redis pub/sub for real-time notifications
    redis_enabled: bool = True
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: SecretStr | None = None

    # Notifications and dashboard
    notification_list_limit: int = 50
    dashboard_poll_interval_seconds: int = 10
    dashboard_recent_activity_limit: int = 10

    # OpenTelemetry
    telemetry_enabled: bool = False
    telemetry_exporter: str = "console"
    telemetry_otlp_endpoint: str | None = None
    telemetry_sample_rate: float = 1.0
    telemetry_environment: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_required(self) -> "Settings":
        """Check backend, DATABASE_URL for postgres, and SECRET_KEY."""
        if self.database_backend == "postgres":
            if not self.database_url:
                raise ValueError(
                    "DATABASE_URL is required when database_backend is 'postgres'. "
                    "Set in environment or .env file."
                )
        elif self.database_backend != "none":
            raise ValueError(
                f"database_backend must be 'postgres' or 'none', got: {self.database_backend!r}"
            )
        if not self.secret_key.get_secret_value():
            raise ValueError(
                "SECRET_KEY is required. Generate with: openssl rand -hex 32."
            )
        if not 5 <= self.dashboard_poll_interval_seconds <= 60:
            raise ValueError("dashboard_poll_interval_seconds must be between 5 and 60")
        return self

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    """Return cached settings (one instance per process).

    In tests, call get_settings.cache_clear() after changing env vars.
    """
    return Settings()
