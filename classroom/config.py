"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE,
        env_file_encoding=ENV_FILE_ENCODING,
        extra="ignore",
    )

    database_url: str = Field(
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    secret_key: str = Field(
        description="Secret key for signing JWT tokens", min_length=1
    )
    access_token_expire_minutes: int = Field(
        default=60,
        description="Number of minutes before access tokens expire",
        gt=0,
    )
    password_hash_rounds: int = Field(
        default=310_000,
        description="Number of pbkdf2_sha256 rounds used when hashing passwords",
        gt=0,
    )
    app_timezone: str = Field(
        default="Asia/Shanghai",
        description="IANA timezone name (or UTC+HH:MM offset) used for timestamps",
    )
    notification_feed_limit: int = Field(
        default=50,
        description="Default number of notifications returned by feed queries",
        gt=0,
    )
    notification_feed_max_limit: int = Field(
        default=200,
        description="Upper bound accepted for the ``limit`` query parameter",
        gt=0,
    )
    cors_origins: str = Field(
        default="http://localhost:5024",
        description="Comma separated list of origins allowed by CORS",
    )
    log_level: str = Field(default="INFO", description="Root logging level")

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError("LOG_LEVEL must be a standard logging level name")
        return normalized

    def cors_origin_list(self) -> list[str]:
        """Return the configured CORS origins as a list."""

        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
