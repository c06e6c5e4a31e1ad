"""
Pydantic models for the Skill API.

Includes:
- Match result models (PlayerSession, TeamInfo, MatchResultRequest, MatchResultResponse)
- Pre-match models (PreMatchPlayerSession, PreMatchTeamInfo, PreMatchRequest, PreMatchResponse)
- ConfigurationResponse
"""

from ivk_skill_sdk.models.base import RequestModel, ResponseModel
from ivk_skill_sdk.models.configuration import ConfigurationResponse
from ivk_skill_sdk.models.match_result import (
    MatchInfo,
    MatchResultRequest,
    MatchResultResponse,
    PlayerRatingUpdate,
    PlayerSession,
    Rating,
    TeamInfo,
    TeamResult,
)
from ivk_skill_sdk.models.pre_match import (
    PlayerExpectation,
    PreMatchPlayerSession,
    PreMatchRequest,
    PreMatchResponse,
    PreMatchTeamInfo,
    TeamExpectation,
)

__all__ = [
    "RequestModel",
    "ResponseModel",
    # Match result
    "PlayerSession",
    "TeamInfo",
    "MatchResultRequest",
    "Rating",
    "PlayerRatingUpdate",
    "TeamResult",
    "MatchInfo",
    "MatchResultResponse",
    # Pre-match
    "PreMatchPlayerSession",
    "PreMatchTeamInfo",
    "PreMatchRequest",
    "PlayerExpectation",
    "TeamExpectation",
    "PreMatchResponse",
    # Configuration
    "ConfigurationResponse",
]
