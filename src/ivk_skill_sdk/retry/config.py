"""
Retry configuration.

RetryConfig is immutable: build a new instance (or use ``model_copy``)
to change it.
"""

from pydantic import BaseModel, ConfigDict, Field


class RetryConfig(BaseModel):
    """
    Exponential backoff settings for one logical operation.

    ``max_attempts`` counts the first try, so ``max_attempts=1`` disables
    retries. ``initial_delay_ms <= max_delay_ms`` is expected but not enforced.
    """
    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(default=3, ge=1, description="Total attempts including the first try")
    initial_delay_ms: int = Field(default=500, ge=0, description="Delay before the first retry")
    max_delay_ms: int = Field(default=10000, ge=0, description="Upper bound for any single delay")

    @classmethod
    def default(cls) -> "RetryConfig":
        """3 attempts, 500ms initial delay, 10s cap."""
        return cls()

    @classmethod
    def no_retry(cls) -> "RetryConfig":
        """Single attempt, fail immediately."""
        return cls(max_attempts=1)

    @property
    def max_retries(self) -> int:
        return self.max_attempts - 1

    @property
    def initial_delay(self) -> float:
        return self.initial_delay_ms / 1000.0

    @property
    def max_delay(self) -> float:
        return self.max_delay_ms / 1000.0


DEFAULT_RETRY_CONFIG = RetryConfig.default()
NO_RETRY = RetryConfig.no_retry()
