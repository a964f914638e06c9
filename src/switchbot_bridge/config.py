"""SwitchBot Bridge Configuration Management.

Uses Pydantic Settings for type-safe configuration with environment variable support.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BASE_URL = "https://api.switch-bot.com"


class SwitchBotSettings(BaseSettings):
    """SwitchBot cloud API settings."""

    model_config = SettingsConfigDict(env_prefix="SWITCHBOT_")

    # Credentials from the SwitchBot app (Profile > Preferences > Developer Options)
    token: SecretStr = SecretStr("")
    secret: SecretStr = SecretStr("")
    base_url: str = DEFAULT_BASE_URL

    # Polling
    poll_interval_seconds: float = Field(default=30.0, gt=0)

    # Passed straight to httpx, no additional deadline is applied
    request_timeout: float = Field(default=10.0, gt=0)

    # Reject commands outside the device's derived command list before dispatch
    enforce_command_validation: bool = False

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URL."""
        return v.rstrip("/")

    @property
    def is_configured(self) -> bool:
        """Check if both token and secret are present."""
        return bool(self.token.get_secret_value() and self.secret.get_secret_value())


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="SWITCHBOT_BRIDGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Environment
    env: Literal["development", "staging", "production"] = "development"

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Nested settings
    switchbot: SwitchBotSettings = Field(default_factory=SwitchBotSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are loaded once and reused.
    """
    return Settings()
