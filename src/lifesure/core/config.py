# LifeSure - Application and Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Configuration management using Pydantic Settings."""

from beartype import beartype
from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MEMORY_URL = "memory://"


class Settings(BaseSettings):
    """Application settings with immutable configuration."""

    model_config = SettingsConfigDict(
        env_file=None,  # Environment only, no .env files
        env_file_encoding="utf-8",
        frozen=True,
        validate_default=True,
        extra="forbid",
    )

    # Document store
    database_url: str = Field(
        default=MEMORY_URL,
        description="PostgreSQL connection URL, or memory:// for the in-process store",
        min_length=1,
    )
    database_pool_min: int = Field(
        default=2,
        ge=1,
        le=20,
        description="Minimum database pool size",
    )
    database_pool_max: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Maximum database pool size",
    )
    database_command_timeout: float = Field(
        default=30.0,
        ge=1.0,
        le=300.0,
        description="Query execution timeout in seconds",
    )

    # Redis
    redis_url: str = Field(
        default=MEMORY_URL,
        description="Redis connection URL, or memory:// for the in-process cache",
        min_length=1,
    )
    redis_ttl_seconds: int = Field(
        default=3600,
        ge=60,
        le=86400,
        description="Default cache TTL in seconds",
    )

    # API Configuration
    app_name: str = Field(
        default="LifeSure",
        description="Application name",
        min_length=1,
    )
    api_host: str = Field(
        default="0.0.0.0",  # nosec B104 - containerized deployment binds all interfaces
        description="API host to bind to",
    )
    api_port: int = Field(
        default=3000,
        ge=1,
        le=65535,
        description="API port to bind to",
    )
    api_env: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="API environment",
    )
    api_cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173"],
        description="Allowed CORS origins",
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Root log level",
    )

    # Payment gateway
    payment_gateway_url: str = Field(
        default="https://api.stripe.com",
        description="Payment gateway base URL",
        min_length=1,
    )
    payment_gateway_secret_key: str = Field(
        default="test-gateway-key-for-local-development",
        min_length=8,
        description="Payment gateway secret key",
    )
    payment_currency: str = Field(
        default="usd",
        pattern="^[a-z]{3}$",
        description="ISO currency code used for every payment intent",
    )
    payment_gateway_timeout: float = Field(
        default=15.0,
        ge=1.0,
        le=120.0,
        description="Gateway request timeout in seconds",
    )

    @field_validator("database_pool_max")
    @classmethod
    def validate_pool_sizes(cls: type["Settings"], v: int, info: ValidationInfo) -> int:
        """Ensure pool max is greater than pool min."""
        if "database_pool_min" in info.data:
            min_size = info.data["database_pool_min"]
            if v < min_size:
                raise ValueError(
                    f"database_pool_max ({v}) must be >= database_pool_min ({min_size})"
                )
        return v

    @field_validator("api_cors_origins")
    @classmethod
    def validate_cors_origins(cls: type["Settings"], v: list[str]) -> list[str]:
        """Validate CORS origins are proper URLs."""
        for origin in v:
            if not origin.startswith(("http://", "https://")):
                raise ValueError(f"Invalid CORS origin: {origin}")
        return v

    @field_validator("payment_gateway_secret_key")
    @classmethod
    def validate_gateway_key(
        cls: type["Settings"], v: str, info: ValidationInfo
    ) -> str:
        """Ensure the development gateway key is not used in production."""
        if info.data.get("api_env") == "production" and v.startswith("test-"):
            raise ValueError(
                "Test gateway key cannot be used in production. "
                "Set PAYMENT_GATEWAY_SECRET_KEY environment variable."
            )
        return v

    @property
    @beartype
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.api_env == "production"

    @property
    @beartype
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.api_env == "development"

    @property
    @beartype
    def uses_memory_store(self) -> bool:
        """Check whether documents live in the in-process store."""
        return self.database_url.startswith(MEMORY_URL)

    @property
    @beartype
    def uses_memory_cache(self) -> bool:
        """Check whether the cache lives in process instead of Redis."""
        return self.redis_url.startswith(MEMORY_URL)


_settings: Settings | None = None


@beartype
def get_settings() -> Settings:
    """Get cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


@beartype
def clear_settings_cache() -> None:
    """Clear settings cache (for testing)."""
    global _settings
    _settings = None
