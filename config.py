from __future__ import annotations

from typing import Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import (
    BaseSettings,
    DotEnvSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)


class AppConfig(BaseSettings):
    """
    Main configuration of the snippet store, based on Pydantic Settings.

    - Reads environment variables and `.env` automatically.
    - Performs type coercion with clear validation errors.
    """

    # Required
    MONGODB_URL: str = Field(..., description="MongoDB connection string")

    # Database basics
    DATABASE_NAME: str = Field(default="snipstash", description="MongoDB database name")
    SNIPPETS_COLLECTION: str = Field(
        default="snippets", description="Collection holding code snippets"
    )
    FOLDERS_COLLECTION: str = Field(
        default="folders", description="Collection holding snippet folders"
    )

    # MongoDB pooling/timeouts
    MONGODB_MAX_POOL_SIZE: int = Field(
        default=50,
        ge=1,
        le=100_000,
        description="MongoDB connection pool max size (maxPoolSize)",
    )
    MONGODB_MIN_POOL_SIZE: int = Field(
        default=5,
        ge=0,
        le=100_000,
        description="MongoDB connection pool min size (minPoolSize)",
    )
    MONGODB_SERVER_SELECTION_TIMEOUT_MS: int = Field(
        default=3_000,
        ge=100,
        le=600_000,
        description="MongoDB server selection timeout in ms (serverSelectionTimeoutMS)",
    )
    MONGODB_SOCKET_TIMEOUT_MS: int = Field(
        default=20_000,
        ge=0,
        le=3_600_000,
        description="MongoDB socket timeout in ms (socketTimeoutMS)",
    )
    MONGODB_CONNECT_TIMEOUT_MS: int = Field(
        default=10_000,
        ge=0,
        le=3_600_000,
        description="MongoDB connect timeout in ms (connectTimeoutMS)",
    )
    MONGODB_APPNAME: Optional[str] = Field(
        default=None, description="MongoDB appName client metadata"
    )

    # Snippets
    MAX_CODE_SIZE: int = Field(
        default=100_000,
        ge=1_000,
        le=10_000_000,
        description="Maximum code size in bytes",
    )
    DEFAULT_PAGE_SIZE: int = Field(
        default=10, ge=1, le=1_000, description="Default page size for snippet listings"
    )
    CLASSIFY_IN_THREAD_MIN_BYTES: int = Field(
        default=16_384,
        ge=0,
        description="Run auto-tag classification in a worker thread above this code size",
    )

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Minimum log level")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Chain .env files: .env.local first, then .env, on top of environment variables."""
        return (
            init_settings,
            env_settings,
            # local overrides
            DotEnvSettingsSource(settings_cls, env_file=".env.local", case_sensitive=True),
            # default .env
            DotEnvSettingsSource(settings_cls, env_file=".env", case_sensitive=True),
            file_secret_settings,
        )

    @field_validator("MONGODB_URL")
    @classmethod
    def _validate_mongodb_url(cls, v: str) -> str:
        if not v or not v.startswith(("mongodb://", "mongodb+srv://")):
            raise ValueError(
                "MONGODB_URL must start with mongodb:// or mongodb+srv://"
            )
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def _normalize_log_level(cls, v: str) -> str:
        level = (v or "INFO").strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"LOG_LEVEL must be a standard logging level, got {v!r}")
        return level


def load_config() -> AppConfig:
    """Load the configuration and return an AppConfig instance."""
    return AppConfig()


# Global instance created at import time
try:
    config = load_config()
except ValidationError as exc:
    raise ValueError(str(exc)) from exc
