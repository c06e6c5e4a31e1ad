"""
Exceptions raised by the IVK Skill SDK.

Callers see the same exception type whether an operation failed on its
first attempt or after every retry was spent: the retry loop always
surfaces the last observed failure rather than a synthetic "gave up" error.
"""

from typing import Any, Optional


class SkillSdkError(Exception):
    """
    Base exception for all SDK errors.

    All SDK-specific exceptions inherit from this to allow catching
    any SDK error with a single except clause.
    """
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(SkillSdkError, ValueError):
    """
    Raised for a missing/blank identifier or a missing payload.

    Always raised before any network activity and never retried.
    """
    pass


class ConfigurationError(SkillSdkError):
    """Raised by the builder when a required setting is missing or blank."""
    pass


class SkillSdkClosedError(SkillSdkError):
    """Raised when an operation is attempted on a closed SDK instance."""
    pass


class TransportError(SkillSdkError):
    """
    Raised when the service could not be reached.

    Covers connection refused, DNS failures, read/connect timeouts, etc.
    The underlying httpx exception is available as ``__cause__``.
    """
    pass


class OperationCancelledError(SkillSdkError):
    """
    Raised when the caller's CancellationToken fired.

    Either the token was already set before an attempt, it fired during a
    backoff wait, or it interrupted an in-flight request.
    """
    pass


class ResponseDecodeError(SkillSdkError):
    """Raised when a successful response body cannot be parsed."""
    pass


class RemoteError(SkillSdkError):
    """
    Raised when the service responded with a non-success status code.

    Attributes:
        status_code: HTTP status code returned by the service
        body: Decoded JSON body if available, else the raw text
    """
    def __init__(
        self,
        message: str,
        status_code: int,
        body: Optional[Any] = None,
        details: dict | None = None,
    ):
        details = dict(details or {})
        details.setdefault("status_code", status_code)
        super().__init__(message, details)
        self.status_code = status_code
        self.body = body


class RateLimitedError(RemoteError):
    """HTTP 429. Retried with the regular backoff schedule."""
    pass


class ServerError(RemoteError):
    """HTTP 5xx. Retried with the regular backoff schedule."""
    pass


def remote_error_for_status(
    status_code: int, body: Optional[Any] = None, message: Optional[str] = None
) -> RemoteError:
    """Build the RemoteError subclass matching ``status_code``."""
    message = message or f"Skill API returned HTTP {status_code}"
    if status_code == 429:
        return RateLimitedError(message, status_code, body)
    if status_code >= 500:
        return ServerError(message, status_code, body)
    return RemoteError(message, status_code, body)
