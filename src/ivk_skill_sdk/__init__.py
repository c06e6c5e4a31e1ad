"""
IVK Skill SDK.

Client for the IVK skill-rating service:
- Post-match rating updates and pre-match outcome predictions
- API-key authentication
- Bounded exponential-backoff retry with blocking and async APIs

Architecture: SkillSdk facade -> RetryInvoker -> SkillApi (httpx)
"""

__version__ = "0.1.0"

from ivk_skill_sdk.client import SkillSdk, SkillSdkBuilder
from ivk_skill_sdk.config import SkillSettings
from ivk_skill_sdk.errors import (
    ConfigurationError,
    OperationCancelledError,
    RateLimitedError,
    RemoteError,
    ResponseDecodeError,
    ServerError,
    SkillSdkClosedError,
    SkillSdkError,
    TransportError,
    ValidationError,
)
from ivk_skill_sdk.retry import (
    CancellationToken,
    NO_RETRY,
    RetryConfig,
    RetryEvent,
)

__all__ = [
    "__version__",
    "SkillSdk",
    "SkillSdkBuilder",
    "SkillSettings",
    "RetryConfig",
    "NO_RETRY",
    "RetryEvent",
    "CancellationToken",
    "SkillSdkError",
    "ValidationError",
    "ConfigurationError",
    "SkillSdkClosedError",
    "TransportError",
    "OperationCancelledError",
    "ResponseDecodeError",
    "RemoteError",
    "RateLimitedError",
    "ServerError",
]
