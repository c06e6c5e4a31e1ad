"""
HTTP transport for the Skill API.

Performs exactly one HTTP call per method invocation and reports the result
as an Outcome. It never retries and never sleeps; that is the RetryInvoker's
job. Uses httpx for both the blocking and the async client.

API Endpoints:
- POST /v1/models/{model_id}/environments/{environment}/match-result
- POST /v1/models/{model_id}/environments/{environment}/pre-match
- GET  /v1/models/{model_id}/configuration
"""

import asyncio
import threading
from dataclasses import dataclass
from typing import Any, Dict, Optional, Type
from urllib.parse import quote

import httpx
import pydantic

from ivk_skill_sdk.errors import ResponseDecodeError
from ivk_skill_sdk.logging_config import get_logger
from ivk_skill_sdk.models import (
    ConfigurationResponse,
    MatchResultRequest,
    MatchResultResponse,
    PreMatchRequest,
    PreMatchResponse,
    ResponseModel,
)
from ivk_skill_sdk.retry.outcome import (
    ApplicationFailure,
    Outcome,
    Success,
    TransportFailure,
)

logger = get_logger(__name__)

API_KEY_HEADER = "x-ivk-apikey"


@dataclass(frozen=True)
class ApiRequest:
    """A fully resolved call: what to send and how to parse the answer."""
    method: str
    path: str
    response_model: Type[ResponseModel]
    payload: Optional[Dict[str, Any]] = None


def _segment(value: str) -> str:
    return quote(value, safe="")


def match_result_request(
    model_id: str, environment: str, request: MatchResultRequest
) -> ApiRequest:
    return ApiRequest(
        method="POST",
        path=f"/v1/models/{_segment(model_id)}/environments/{_segment(environment)}/match-result",
        response_model=MatchResultResponse,
        payload=request.to_payload(),
    )


def pre_match_request(
    model_id: str, environment: str, request: PreMatchRequest
) -> ApiRequest:
    return ApiRequest(
        method="POST",
        path=f"/v1/models/{_segment(model_id)}/environments/{_segment(environment)}/pre-match",
        response_model=PreMatchResponse,
        payload=request.to_payload(),
    )


def configuration_request(model_id: str) -> ApiRequest:
    return ApiRequest(
        method="GET",
        path=f"/v1/models/{_segment(model_id)}/configuration",
        response_model=ConfigurationResponse,
    )


class SkillApi:
    """
    Thin httpx wrapper around the Skill API.

    Clients are created lazily and reused for connection pooling. Clients
    passed in by the caller are used as-is and never closed here.

    Attributes:
        base_url: Service root, e.g. https://skill.ivk.dev
        timeout: Request timeout in seconds for SDK-owned clients
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 30.0,
        http_client: Optional[httpx.Client] = None,
        async_http_client: Optional[httpx.AsyncClient] = None,
        connection_limits: Optional[httpx.Limits] = None,
    ):
        """
        Initialize transport.

        Args:
            base_url: Service root URL
            api_key: Value for the x-ivk-apikey header
            timeout: Request timeout in seconds (SDK-owned clients only)
            http_client: Caller-owned blocking client
            async_http_client: Caller-owned async client
            connection_limits: httpx pool limits for SDK-owned clients
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._api_key = api_key
        self._client = http_client
        self._owns_client = http_client is None
        self._async_client = async_http_client
        self._owns_async_client = async_http_client is None
        self._async_loop: Optional[asyncio.AbstractEventLoop] = None
        self._lock = threading.Lock()
        self._connection_limits = connection_limits or httpx.Limits(
            max_keepalive_connections=10,
            max_connections=20,
            keepalive_expiry=30.0,
        )

    @property
    def headers(self) -> Dict[str, str]:
        return {
            API_KEY_HEADER: self._api_key,
            "Accept": "application/json",
        }

    def _get_client(self) -> httpx.Client:
        """Get or create the blocking HTTP client."""
        with self._lock:
            if self._client is None or (self._owns_client and self._client.is_closed):
                self._client = httpx.Client(
                    timeout=httpx.Timeout(self.timeout),
                    limits=self._connection_limits,
                )
                logger.debug("Created new httpx Client")
            return self._client

    def _get_async_client(self) -> httpx.AsyncClient:
        """
        Get or create the async HTTP client for the running event loop.

        Pooled connections belong to the loop that opened them, so an
        SDK-owned client is replaced when called from a different loop
        (e.g. a second ``asyncio.run``). The stale client is dropped, not
        closed: its loop may already be gone.
        """
        loop = asyncio.get_running_loop()
        with self._lock:
            if self._async_client is None or (
                self._owns_async_client
                and (self._async_client.is_closed or self._async_loop is not loop)
            ):
                if self._async_client is not None and not self._async_client.is_closed:
                    logger.debug("Event loop changed, replacing httpx AsyncClient")
                self._async_client = httpx.AsyncClient(
                    timeout=httpx.Timeout(self.timeout),
                    limits=self._connection_limits,
                )
                self._async_loop = loop
                logger.debug("Created new httpx AsyncClient")
            return self._async_client

    def send(self, api_request: ApiRequest) -> Outcome:
        """Perform one blocking attempt."""
        client = self._get_client()
        try:
            response = client.request(
                api_request.method,
                self.base_url + api_request.path,
                json=api_request.payload,
                headers=self.headers,
            )
        except httpx.TransportError as e:
            logger.warning(
                "Skill API transport error",
                method=api_request.method,
                path=api_request.path,
                error=str(e),
                error_type=type(e).__name__,
            )
            return TransportFailure(e)

        try:
            return self._to_outcome(response, api_request)
        finally:
            response.close()

    async def send_async(self, api_request: ApiRequest) -> Outcome:
        """Perform one async attempt."""
        client = self._get_async_client()
        try:
            response = await client.request(
                api_request.method,
                self.base_url + api_request.path,
                json=api_request.payload,
                headers=self.headers,
            )
        except httpx.TransportError as e:
            logger.warning(
                "Skill API transport error",
                method=api_request.method,
                path=api_request.path,
                error=str(e),
                error_type=type(e).__name__,
            )
            return TransportFailure(e)

        try:
            return self._to_outcome(response, api_request)
        finally:
            await response.aclose()

    @staticmethod
    def _to_outcome(response: httpx.Response, api_request: ApiRequest) -> Outcome:
        """
        Classify a received response.

        Raises:
            ResponseDecodeError: 2xx whose body is not the expected JSON
        """
        try:
            body: Any = response.json()
        except ValueError:
            body = response.text

        if not response.is_success:
            logger.info(
                "Skill API error response",
                method=api_request.method,
                path=api_request.path,
                status_code=response.status_code,
            )
            return ApplicationFailure(
                status_code=response.status_code,
                cause=httpx.HTTPStatusError(
                    f"HTTP {response.status_code} from {api_request.method} {api_request.path}",
                    request=response.request,
                    response=response,
                ),
                body=body,
            )

        try:
            parsed = api_request.response_model.model_validate(body)
        except pydantic.ValidationError as e:
            raise ResponseDecodeError(
                f"Invalid response body from {api_request.method} {api_request.path}",
                details={"status_code": response.status_code, "errors": e.errors()},
            ) from e
        return Success(parsed)

    @property
    def async_client_open(self) -> bool:
        """True while an SDK-owned async client still holds connections."""
        return (
            self._owns_async_client
            and self._async_client is not None
            and not self._async_client.is_closed
        )

    def close(self) -> None:
        """Close the blocking client if the SDK created it."""
        with self._lock:
            if self._owns_client and self._client is not None and not self._client.is_closed:
                self._client.close()
                logger.debug("Closed Skill API client connection")

    async def aclose(self) -> None:
        """Close both clients if the SDK created them."""
        self.close()
        if not self.async_client_open:
            return
        client = self._async_client
        if self._async_loop is asyncio.get_running_loop():
            await client.aclose()
            logger.debug("Closed Skill API async client connection")
            return
        # Pooled connections of an earlier, possibly closed, event loop
        try:
            await client.aclose()
        except RuntimeError as e:
            logger.debug(
                "Closed async client after its event loop ended",
                error=str(e),
            )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(base_url={self.base_url}, timeout={self.timeout}s)"
