"""Shared test fixtures and configuration for all tests.

This conftest.py provides request fixtures and an SDK factory wired to
httpx.MockTransport, so no test below tests/unit touches the network.
"""

import copy
import json
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from ivk_skill_sdk.client import SkillSdk
from ivk_skill_sdk.config import SkillSettings
from ivk_skill_sdk.models import (
    MatchResultRequest,
    PlayerSession,
    PreMatchPlayerSession,
    PreMatchRequest,
    PreMatchTeamInfo,
    TeamInfo,
)
from ivk_skill_sdk.retry.config import RetryConfig


MATCH_RESULT_BODY: Dict[str, Any] = {
    "players": [
        {
            "player_id": "player_1",
            "team_id": "blue",
            "prior": {"mmr": 0.5, "games_played": 80},
            "post": {"mmr": 0.53, "games_played": 81},
        },
        {
            "player_id": "player_2",
            "team_id": "red",
            "prior": {"mmr": 0.4, "games_played": 70},
            "post": {"mmr": 0.38, "games_played": 71},
        },
    ],
    "match_info": {"match_id": "example-match-123", "duration": 1800.0},
}

PRE_MATCH_BODY: Dict[str, Any] = {
    "players": [
        {"player_id": "player_1", "team_id": "blue", "expected": 0.55},
        {"player_id": "player_2", "team_id": "red", "expected": 0.45},
    ],
    "teams": [{"id": "blue", "expected": 0.55}, {"id": "red", "expected": 0.45}],
}

CONFIGURATION_BODY: Dict[str, Any] = {
    "model_id": "demo-model",
    "version": "3",
    "parameters": {"k_factor": 32},
}


@pytest.fixture
def test_settings() -> SkillSettings:
    """Settings with fast retries, independent of the real environment."""
    return SkillSettings(
        API_KEY="test-api-key",
        BASE_URL="https://skill.test",
        ENVIRONMENT="staging",
        TIMEOUT_SECONDS=5.0,
        RETRY_MAX_ATTEMPTS=3,
        RETRY_INITIAL_DELAY_MS=1,
        RETRY_MAX_DELAY_MS=4,
        LOG_LEVEL="DEBUG",
    )


@pytest.fixture
def fast_retry_config() -> RetryConfig:
    """Three attempts with millisecond delays so retry tests stay fast."""
    return RetryConfig(max_attempts=3, initial_delay_ms=1, max_delay_ms=4)


@pytest.fixture
def match_result_request() -> MatchResultRequest:
    """1v1 match with one optional field set per player."""
    return MatchResultRequest(
        teams=[TeamInfo(team_id="blue", team_score=1), TeamInfo(team_id="red", team_score=0)],
        player_sessions=[
            PlayerSession(player_id="player_1", player_score=200, team_id="blue", prior_mmr=0.5),
            PlayerSession(player_id="player_2", player_score=250, team_id="red", prior_games_played=70),
        ],
        match_id="example-match-123",
    )


@pytest.fixture
def pre_match_request() -> PreMatchRequest:
    return PreMatchRequest(
        player_sessions=[
            PreMatchPlayerSession(player_id="player_1", team_id="blue", prior_mmr=0.6),
            PreMatchPlayerSession(player_id="player_2", team_id="red", prior_mmr=0.7),
        ],
        teams=[PreMatchTeamInfo(team_id="blue"), PreMatchTeamInfo(team_id="red")],
    )


class RecordingHandler:
    """MockTransport handler replaying scripted responses and recording requests.

    Each script item is an httpx.Response, an exception instance to raise,
    or a callable(request) -> Response. The last item repeats once the
    script runs out.
    """

    def __init__(self, script: List[Any]):
        self.script = list(script)
        self.requests: List[httpx.Request] = []

    @property
    def calls(self) -> int:
        return len(self.requests)

    def _next(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        index = min(len(self.requests) - 1, len(self.script) - 1)
        item = self.script[index]
        if isinstance(item, BaseException):
            raise item
        if callable(item):
            return item(request)
        # fresh copy so a repeated script item is never reused
        return httpx.Response(item.status_code, headers=item.headers, content=item.content)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        return self._next(request)

    def json_body(self, index: int = -1) -> Dict[str, Any]:
        return json.loads(self.requests[index].content)


@pytest.fixture
def create_sdk(fast_retry_config: RetryConfig):
    """Factory fixture building a SkillSdk backed by a RecordingHandler.

    Usage:
        def test_something(create_sdk):
            sdk, handler = create_sdk([httpx.Response(200, json={...})])
    """
    created: List[SkillSdk] = []

    def _create(
        script: List[Any],
        retry_config: Optional[RetryConfig] = None,
        on_retry: Optional[Callable] = None,
        environment: str = "production",
    ):
        handler = RecordingHandler(script)
        sdk = (
            SkillSdk.builder()
            .with_api_key("test-api-key")
            .with_base_url("https://skill.test")
            .with_environment(environment)
            .with_retry_config(retry_config or fast_retry_config)
            .with_http_client(httpx.Client(transport=httpx.MockTransport(handler)))
            .with_async_http_client(
                httpx.AsyncClient(transport=httpx.MockTransport(handler))
            )
            .with_on_retry(on_retry)
            .build()
        )
        created.append(sdk)
        return sdk, handler

    yield _create

    for sdk in created:
        sdk.close()


@pytest.fixture
def match_result_body() -> Dict[str, Any]:
    return copy.deepcopy(MATCH_RESULT_BODY)


@pytest.fixture
def pre_match_body() -> Dict[str, Any]:
    return copy.deepcopy(PRE_MATCH_BODY)


@pytest.fixture
def configuration_body() -> Dict[str, Any]:
    return copy.deepcopy(CONFIGURATION_BODY)
