"""Application configuration using Pydantic settings."""

from decimal import Decimal
from typing import Any, Self
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import PostgresDsn, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "OpenSpace Admin API"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    API_PREFIX: str = "/api"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    RELOAD: bool = False

    # Database
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "openspace"
    DATABASE_URL: PostgresDsn | None = None

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def assemble_db_connection(cls, v: str | None, info: Any) -> str:
        """Build database URL from components if not provided."""
        if isinstance(v, str):
            return v

        data = info.data
        return str(
            PostgresDsn.build(
                scheme="postgresql+asyncpg",
                username=data.get("POSTGRES_USER"),
                password=data.get("POSTGRES_PASSWORD"),
                host=data.get("POSTGRES_SERVER"),
                port=data.get("POSTGRES_PORT"),
                path=f"{data.get('POSTGRES_DB') or ''}",
            ),
        )

    # Security
    SECRET_KEY: str = "change-this-to-a-random-secret-key-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # CORS
    CORS_ORIGINS: list[str] = [
        "https://openspace-reserve.vercel.app",  # Production frontend
        "http://localhost:5173",  # Vite dev server
        "http://localhost:3000",
    ]
    CORS_ALLOW_CREDENTIALS: bool = True
    CORS_ALLOW_METHODS: list[str] = ["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE", "OPTIONS"]
    CORS_ALLOW_HEADERS: list[str] = ["*"]

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PER_MINUTE: int = 60

    # Revenue reporting
    TIMEZONE: str = "Asia/Manila"  # Period boundaries and monthly buckets use local time
    CURRENCY_SYMBOL: str = "₱"
    PLATFORM_FEE_RATE: Decimal = Decimal("0.10")
    EARNING_HOLD_DAYS: int = 1  # Days after check-out before an earning can be paid out
    REVENUE_QUERY_TIMEOUT: float = 10.0  # Seconds before a revenue query is abandoned

    # Dashboard client
    DASHBOARD_API_URL: str = "http://localhost:8000"
    DASHBOARD_REQUEST_TIMEOUT: float = 15.0

    # Monitoring
    SENTRY_DSN: str | None = None
    SENTRY_ENVIRONMENT: str = "development"
    SENTRY_TRACES_SAMPLE_RATE: float = 1.0

    @field_validator("TIMEZONE")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Reporting timezone must be a known IANA zone."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"TIMEZONE '{v}' is not a known IANA timezone") from exc
        return v

    @field_validator("PLATFORM_FEE_RATE")
    @classmethod
    def validate_fee_rate(cls, v: Decimal) -> Decimal:
        """Platform fee must be a fraction of the booking total."""
        if not Decimal("0") <= v <= Decimal("1"):
            raise ValueError("PLATFORM_FEE_RATE must be between 0 and 1")
        return v

    @model_validator(mode="after")
    def validate_production_security(self) -> Self:
        """Validate that production-critical secrets are not using defaults.

        Only enforced when DEBUG=False (production mode).
        """
        if not self.DEBUG and self.SECRET_KEY == "change-this-to-a-random-secret-key-in-production":
            raise ValueError(
                "SECRET_KEY must be changed from default value in production! "
                'Generate a secure key with: python -c "import secrets; print(secrets.token_hex(32))"'
            )

        return self


settings = Settings()
