"""
SkillSdk: public entry point of the IVK Skill SDK.

Wraps the Skill API with API-key authentication and exponential-backoff
retry. Every operation exists in a blocking and an async flavour; both
run through the same RetryInvoker and so retry identically.

Usage:
    sdk = (
        SkillSdk.builder()
        .with_api_key("your-api-key")
        .with_environment("production")
        .build()
    )
    with sdk:
        result = sdk.post_match_result("model-id", match_result_request)

    async with sdk:
        result = await sdk.post_pre_match_async("model-id", pre_match_request)
"""

from typing import Any, Mapping, Optional, Type, TypeVar, Union

import httpx
import pydantic

from ivk_skill_sdk.api.skill_api import (
    SkillApi,
    configuration_request,
    match_result_request,
    pre_match_request,
)
from ivk_skill_sdk.config import DEFAULT_BASE_URL, DEFAULT_ENVIRONMENT, SkillSettings
from ivk_skill_sdk.errors import (
    ConfigurationError,
    SkillSdkClosedError,
    ValidationError,
)
from ivk_skill_sdk.logging_config import get_logger
from ivk_skill_sdk.models import (
    ConfigurationResponse,
    MatchResultRequest,
    MatchResultResponse,
    PreMatchRequest,
    PreMatchResponse,
    RequestModel,
)
from ivk_skill_sdk.retry.cancellation import CancellationToken
from ivk_skill_sdk.retry.config import RetryConfig
from ivk_skill_sdk.retry.invoker import OnRetry, RetryInvoker

logger = get_logger(__name__)

R = TypeVar("R", bound=RequestModel)


def _require_model_id(model_id: Any) -> str:
    if not isinstance(model_id, str) or not model_id.strip():
        raise ValidationError(
            "Model ID cannot be null or empty",
            details={"field": "model_id"},
        )
    return model_id


def _require_payload(
    request: Union[R, Mapping[str, Any], None], model: Type[R]
) -> R:
    """Reject a missing payload; accept a plain mapping in place of the model."""
    if request is None:
        raise ValidationError(
            f"{model.__name__} cannot be None",
            details={"field": "request"},
        )
    if isinstance(request, model):
        return request
    if isinstance(request, Mapping):
        try:
            return model.model_validate(request)
        except pydantic.ValidationError as e:
            raise ValidationError(
                f"Invalid {model.__name__}: {e.error_count()} error(s)",
                details={"field": "request", "errors": e.errors()},
            ) from e
    raise ValidationError(
        f"Expected {model.__name__}, got {type(request).__name__}",
        details={"field": "request"},
    )


class SkillSdk:
    """
    Skill API client with retry and API-key authentication.

    Instances are safe to share between threads and tasks: the only state
    is the pooled HTTP clients and immutable configuration. Build one with
    :meth:`builder` or :meth:`from_settings`.

    Attributes:
        environment: Environment discriminator sent in request paths
        retry_config: Retry configuration applied to every operation
    """

    def __init__(
        self,
        api: SkillApi,
        environment: str,
        retry_config: RetryConfig,
        *,
        on_retry: Optional[OnRetry] = None,
        sdk_logger: Optional[Any] = None,
    ):
        self.environment = environment
        self.retry_config = retry_config
        self._api = api
        self._invoker = RetryInvoker(retry_config, on_retry=on_retry, logger=sdk_logger)
        self._closed = False

        logger.info(
            "SkillSdk initialized",
            base_url=api.base_url,
            environment=environment,
            max_attempts=retry_config.max_attempts,
            initial_delay_ms=retry_config.initial_delay_ms,
            max_delay_ms=retry_config.max_delay_ms,
        )

    @staticmethod
    def builder() -> "SkillSdkBuilder":
        """Create a new builder for constructing SkillSdk instances."""
        return SkillSdkBuilder()

    @classmethod
    def from_settings(cls, settings: Optional[SkillSettings] = None) -> "SkillSdk":
        """
        Build an SDK from IVK_* environment settings.

        Raises:
            ConfigurationError: IVK_API_KEY is not set
        """
        settings = settings or SkillSettings()
        builder = (
            cls.builder()
            .with_base_url(settings.BASE_URL)
            .with_environment(settings.ENVIRONMENT)
            .with_timeout(settings.TIMEOUT_SECONDS)
            .with_retry_config(settings.retry_config())
        )
        if settings.API_KEY is not None:
            builder.with_api_key(settings.API_KEY)
        return builder.build()

    def _ensure_open(self) -> None:
        if self._closed:
            raise SkillSdkClosedError("SkillSdk has been closed")

    # ===== Blocking API =====

    def post_match_result(
        self,
        model_id: str,
        request: Union[MatchResultRequest, Mapping[str, Any]],
        *,
        cancellation: Optional[CancellationToken] = None,
    ) -> MatchResultResponse:
        """
        Submit a finished match to update player skill ratings.

        Args:
            model_id: Rating model to use
            request: Player sessions and team results
            cancellation: Optional token to abort retries

        Returns:
            MatchResultResponse with updated ratings for each player

        Raises:
            ValidationError: Blank model_id or missing request
            RemoteError: Service returned an error status
            TransportError: Network failure after all retries
        """
        self._ensure_open()
        api_request = match_result_request(
            _require_model_id(model_id),
            self.environment,
            _require_payload(request, MatchResultRequest),
        )
        return self._invoker.invoke(
            lambda: self._api.send(api_request),
            operation_name="post_match_result",
            cancellation=cancellation,
        )

    def post_pre_match(
        self,
        model_id: str,
        request: Union[PreMatchRequest, Mapping[str, Any]],
        *,
        cancellation: Optional[CancellationToken] = None,
    ) -> PreMatchResponse:
        """Calculate expected match outcomes before the match starts."""
        self._ensure_open()
        api_request = pre_match_request(
            _require_model_id(model_id),
            self.environment,
            _require_payload(request, PreMatchRequest),
        )
        return self._invoker.invoke(
            lambda: self._api.send(api_request),
            operation_name="post_pre_match",
            cancellation=cancellation,
        )

    def get_configuration(
        self,
        model_id: str,
        *,
        cancellation: Optional[CancellationToken] = None,
    ) -> ConfigurationResponse:
        """Get the active configuration of a rating model."""
        self._ensure_open()
        api_request = configuration_request(_require_model_id(model_id))
        return self._invoker.invoke(
            lambda: self._api.send(api_request),
            operation_name="get_configuration",
            cancellation=cancellation,
        )

    # ===== Async API =====

    async def post_match_result_async(
        self,
        model_id: str,
        request: Union[MatchResultRequest, Mapping[str, Any]],
        *,
        cancellation: Optional[CancellationToken] = None,
    ) -> MatchResultResponse:
        """Async version of :meth:`post_match_result`."""
        self._ensure_open()
        api_request = match_result_request(
            _require_model_id(model_id),
            self.environment,
            _require_payload(request, MatchResultRequest),
        )
        return await self._invoker.invoke_async(
            lambda: self._api.send_async(api_request),
            operation_name="post_match_result",
            cancellation=cancellation,
        )

    async def post_pre_match_async(
        self,
        model_id: str,
        request: Union[PreMatchRequest, Mapping[str, Any]],
        *,
        cancellation: Optional[CancellationToken] = None,
    ) -> PreMatchResponse:
        """Async version of :meth:`post_pre_match`."""
        self._ensure_open()
        api_request = pre_match_request(
            _require_model_id(model_id),
            self.environment,
            _require_payload(request, PreMatchRequest),
        )
        return await self._invoker.invoke_async(
            lambda: self._api.send_async(api_request),
            operation_name="post_pre_match",
            cancellation=cancellation,
        )

    async def get_configuration_async(
        self,
        model_id: str,
        *,
        cancellation: Optional[CancellationToken] = None,
    ) -> ConfigurationResponse:
        """Async version of :meth:`get_configuration`."""
        self._ensure_open()
        api_request = configuration_request(_require_model_id(model_id))
        return await self._invoker.invoke_async(
            lambda: self._api.send_async(api_request),
            operation_name="get_configuration",
            cancellation=cancellation,
        )

    # ===== Lifecycle =====

    def close(self) -> None:
        """
        Release SDK-owned blocking connections. Safe to call repeatedly.

        An SDK-owned async client can only be closed from a coroutine; if
        the async API was used, call :meth:`aclose` as well.
        """
        self._closed = True
        self._api.close()
        if self._api.async_client_open:
            logger.warning(
                "SkillSdk.close() cannot release the async HTTP client, await aclose()",
                base_url=self._api.base_url,
            )

    async def aclose(self) -> None:
        """Release all SDK-owned connections. Safe to call repeatedly."""
        self._closed = True
        await self._api.aclose()

    def __enter__(self) -> "SkillSdk":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    async def __aenter__(self) -> "SkillSdk":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"base_url={self._api.base_url}, "
            f"environment={self.environment}, "
            f"max_attempts={self.retry_config.max_attempts})"
        )


class SkillSdkBuilder:
    """
    Fluent builder for SkillSdk.

    Only the API key is required; everything else has a default.
    """

    def __init__(self) -> None:
        self._api_key: Optional[str] = None
        self._base_url: str = DEFAULT_BASE_URL
        self._environment: str = DEFAULT_ENVIRONMENT
        self._retry_config: RetryConfig = RetryConfig.default()
        self._timeout: float = 30.0
        self._http_client: Optional[httpx.Client] = None
        self._async_http_client: Optional[httpx.AsyncClient] = None
        self._logger: Optional[Any] = None
        self._on_retry: Optional[OnRetry] = None

    @staticmethod
    def _not_none(value: Any, name: str) -> Any:
        if value is None:
            raise ValidationError(f"{name} cannot be None", details={"field": name})
        return value

    def with_api_key(self, api_key: str) -> "SkillSdkBuilder":
        """Set the API key for authentication (required)."""
        self._api_key = self._not_none(api_key, "api_key")
        return self

    def with_base_url(self, base_url: str) -> "SkillSdkBuilder":
        """Set the service root URL (defaults to https://skill.ivk.dev)."""
        self._base_url = self._not_none(base_url, "base_url")
        return self

    def with_environment(self, environment: str) -> "SkillSdkBuilder":
        """Set the environment, e.g. "production" or "staging"."""
        self._environment = self._not_none(environment, "environment")
        return self

    def with_retry_config(self, config: RetryConfig) -> "SkillSdkBuilder":
        self._retry_config = self._not_none(config, "retry_config")
        return self

    def with_timeout(self, timeout: float) -> "SkillSdkBuilder":
        """Per-request timeout in seconds for SDK-owned HTTP clients."""
        self._not_none(timeout, "timeout")
        if timeout <= 0:
            raise ValidationError("timeout must be positive", details={"field": "timeout"})
        self._timeout = float(timeout)
        return self

    def with_http_client(self, http_client: httpx.Client) -> "SkillSdkBuilder":
        """Use a caller-owned blocking client. The SDK will not close it."""
        self._http_client = self._not_none(http_client, "http_client")
        return self

    def with_async_http_client(self, http_client: httpx.AsyncClient) -> "SkillSdkBuilder":
        """Use a caller-owned async client. The SDK will not close it."""
        self._async_http_client = self._not_none(http_client, "async_http_client")
        return self

    def with_logger(self, sdk_logger: Optional[Any]) -> "SkillSdkBuilder":
        """structlog-style logger for retry events; None restores the default."""
        self._logger = sdk_logger
        return self

    def with_on_retry(self, on_retry: Optional[OnRetry]) -> "SkillSdkBuilder":
        """Callback invoked with a RetryEvent before every backoff wait."""
        self._on_retry = on_retry
        return self

    def build(self) -> SkillSdk:
        """
        Build the SkillSdk instance.

        Raises:
            ConfigurationError: API key, base URL or environment is blank
        """
        if not self._api_key or not self._api_key.strip():
            raise ConfigurationError("API key is required. Call with_api_key() before build().")
        if not self._base_url.strip():
            raise ConfigurationError("Base URL cannot be empty.")
        if not self._environment.strip():
            raise ConfigurationError("Environment cannot be empty.")

        api = SkillApi(
            base_url=self._base_url,
            api_key=self._api_key,
            timeout=self._timeout,
            http_client=self._http_client,
            async_http_client=self._async_http_client,
        )
        return SkillSdk(
            api,
            self._environment,
            self._retry_config,
            on_retry=self._on_retry,
            sdk_logger=self._logger,
        )
