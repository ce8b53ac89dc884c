"""Application configuration using Pydantic settings."""

import re
from datetime import timedelta
from functools import lru_cache
from typing import Any, Literal

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_DURATION = re.compile(r"(?:\d+(?:\.\d+)?(?:h|ms|m|s))+")
_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(h|ms|m|s)")
_DURATION_UNITS = {"h": 3600.0, "m": 60.0, "s": 1.0, "ms": 0.001}


def parse_duration(value: Any) -> Any:
    """Parse Go-style durations such as ``15m``, ``24h`` or ``1h30m``.

    Anything else (seconds, ISO-8601 strings, timedelta) is left to pydantic.
    """
    if not isinstance(value, str) or not _DURATION.fullmatch(value.strip()):
        return value
    seconds = sum(
        float(amount) * _DURATION_UNITS[unit] for amount, unit in _DURATION_PART.findall(value)
    )
    return timedelta(seconds=seconds)


class Settings(BaseSettings):
    """Application settings loaded from environment variables or ``app.env``."""

    model_config = SettingsConfigDict(
        env_file="app.env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False

    # API
    api_v1_prefix: str = "/api/v1"
    project_name: str = "Herald API"
    version: str = "0.1.0"
    http_server_address: str = "0.0.0.0:3000"

    # Database
    db_user: str = "postgres"
    db_password: str = "postgres"
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "herald"
    db_driver: str = "postgresql+asyncpg"
    max_idle_conns: int = 2
    max_open_conns: int = 10
    disable_tls: bool = True
    database_url_override: str | None = Field(default=None, alias="DATABASE_URL")
    migration_url: str = "alembic"

    # Redis / task broker
    redis_host: str = "localhost:6379"
    task_max_retry: int = 10
    task_process_in: timedelta = timedelta(seconds=10)
    worker_concurrency: int = 4

    # Tokens
    token_symmetric_key: str = "12345678901234567890123456789012"
    access_token_duration: timedelta = timedelta(minutes=15)
    refresh_token_duration: timedelta = timedelta(hours=24)

    # Mailer
    mailer_name: str = "Herald"
    mailer_email_address: str = ""
    mailer_email_password: str = ""
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587

    # Verification
    verification_base_url: str = "http://localhost:3000"
    verification_ttl: timedelta = timedelta(minutes=15)

    # Observability
    sentry_dsn: str = ""

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    @field_validator(
        "access_token_duration",
        "refresh_token_duration",
        "verification_ttl",
        "task_process_in",
        mode="before",
    )
    @classmethod
    def _parse_duration(cls, value: Any) -> Any:
        return parse_duration(value)

    @field_validator("token_symmetric_key")
    @classmethod
    def _check_symmetric_key(cls, value: str) -> str:
        if len(value.encode()) != 32:
            msg = "TOKEN_SYMMETRIC_KEY must be exactly 32 characters"
            raise ValueError(msg)
        return value

    @computed_field  # type: ignore[prop-decorator]
    @property
    def database_url(self) -> str:
        """Async SQLAlchemy URL, assembled from the DB_* keys unless DATABASE_URL is set."""
        if self.database_url_override:
            url = self.database_url_override
            if url.startswith("postgres://"):
                url = "postgresql://" + url.removeprefix("postgres://")
            if url.startswith("postgresql://"):
                url = url.replace("postgresql://", f"{self.db_driver}://", 1)
            # asyncpg takes ``ssl``, not libpq's ``sslmode``
            return url.replace("sslmode=", "ssl=")
        ssl = "disable" if self.disable_tls else "require"
        return (
            f"{self.db_driver}://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}?ssl={ssl}"
        )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def redis_url(self) -> str:
        if self.redis_host.startswith(("redis://", "rediss://")):
            return self.redis_host
        return f"redis://{self.redis_host}/0"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
