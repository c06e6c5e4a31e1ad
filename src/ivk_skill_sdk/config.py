"""
Configuration settings for the IVK Skill SDK.

All settings are loaded from environment variables prefixed with ``IVK_``.
Use a .env file for local development.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional

from ivk_skill_sdk.retry.config import RetryConfig


DEFAULT_BASE_URL = "https://skill.ivk.dev"
DEFAULT_ENVIRONMENT = "production"


class SkillSettings(BaseSettings):
    """SDK settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="IVK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Service ===
    API_KEY: Optional[str] = None
    BASE_URL: str = DEFAULT_BASE_URL
    ENVIRONMENT: str = DEFAULT_ENVIRONMENT  # e.g. production, staging
    MODEL_ID: Optional[str] = None
    TIMEOUT_SECONDS: float = 30.0

    # === Retry ===
    RETRY_MAX_ATTEMPTS: int = 3  # 1 disables retries
    RETRY_INITIAL_DELAY_MS: int = 500
    RETRY_MAX_DELAY_MS: int = 10000

    # === Logging ===
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "console"  # console | json

    def retry_config(self) -> RetryConfig:
        """Build the RetryConfig described by the RETRY_* settings."""
        return RetryConfig(
            max_attempts=self.RETRY_MAX_ATTEMPTS,
            initial_delay_ms=self.RETRY_INITIAL_DELAY_MS,
            max_delay_ms=self.RETRY_MAX_DELAY_MS,
        )
