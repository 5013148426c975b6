"""
Application configuration using Pydantic Settings.
"""

from functools import lru_cache
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class FlagProjectSettings(BaseSettings):
    """
    Configuration for one ConfigCat project.

    Each project gets its own SDK client with an independent poll interval.
    """

    sdk_key: str = Field(default="", description="ConfigCat SDK key")
    poll_interval_seconds: int = Field(default=30, ge=1)
    max_init_wait_seconds: float = Field(
        default=0,
        ge=0,
        description="How long the first lookup may wait for the initial fetch",
    )
    overrides: dict[str, Any] = Field(
        default_factory=dict,
        description="Flag values used to seed the memory backend (JSON)",
    )

    @property
    def masked_sdk_key(self) -> str:
        return f"{self.sdk_key[:8]}..." if self.sdk_key else "<unset>"


class UserManagementFlagSettings(FlagProjectSettings):
    """User management project flags."""

    model_config = SettingsConfigDict(env_prefix="CONFIGCAT_USER_MANAGEMENT_")


class PaymentFlagSettings(FlagProjectSettings):
    """Payment project flags."""

    model_config = SettingsConfigDict(env_prefix="CONFIGCAT_PAYMENT_")


class FeatureFlagSettings(BaseSettings):
    """Feature flag provider configuration."""

    model_config = SettingsConfigDict(env_prefix="CONFIGCAT_")

    backend: str = Field(
        default="configcat",
        description="Flag provider backend: configcat, memory",
    )
    sdk_log_level: str = Field(
        default="WARNING",
        description="Log level for the ConfigCat SDK logger",
    )
    user_management: UserManagementFlagSettings = Field(
        default_factory=UserManagementFlagSettings
    )
    payment: PaymentFlagSettings = Field(default_factory=PaymentFlagSettings)

    @field_validator("backend")
    @classmethod
    def validate_backend(cls, v: str) -> str:
        allowed = {"configcat", "memory"}
        if v not in allowed:
            raise ValueError(f"backend must be one of {allowed}")
        return v

    def projects(self) -> dict[str, FlagProjectSettings]:
        """Project name -> settings for every configured project."""
        return {
            "user-management": self.user_management,
            "payment": self.payment,
        }


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Feature Toggle Demo API")
    app_version: str = Field(default="0.1.0")
    debug: bool = Field(default=False)
    environment: str = Field(default="development")

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080)
    workers: int = Field(default=1)
    reload: bool = Field(default=False)

    # CORS
    cors_origins: list[str] = Field(default=["http://localhost:3000"])
    cors_allow_credentials: bool = Field(default=True)

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json", description="json or console")

    # Nested settings
    flags: FeatureFlagSettings = Field(default_factory=FeatureFlagSettings)

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        allowed = {"development", "staging", "production", "testing"}
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        allowed = {"json", "console"}
        if v not in allowed:
            raise ValueError(f"log_format must be one of {allowed}")
        return v

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Shorthand
settings = get_settings()
