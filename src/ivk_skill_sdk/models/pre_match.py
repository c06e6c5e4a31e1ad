"""Models for POST .../pre-match (expected outcome before a match)."""

from typing import Optional

from pydantic import Field

from ivk_skill_sdk.models.base import RequestModel, ResponseModel


class PreMatchPlayerSession(RequestModel):
    player_id: str = Field(..., min_length=1)
    team_id: Optional[str] = Field(default=None)
    party_id: Optional[str] = Field(default=None)
    prior_mmr: Optional[float] = Field(default=None)
    prior_games_played: Optional[int] = Field(default=None, ge=0)
    prior_momentum: Optional[float] = Field(default=None)
    is_bot: Optional[bool] = Field(default=None)
    bot_level: Optional[int] = Field(default=None)


class PreMatchTeamInfo(RequestModel):
    team_id: str = Field(..., min_length=1)


class PreMatchRequest(RequestModel):
    """Line-up of a match that has not started yet."""
    player_sessions: list[PreMatchPlayerSession] = Field(...)
    teams: list[PreMatchTeamInfo] = Field(...)
    match_id: Optional[str] = Field(default=None)


class PlayerExpectation(ResponseModel):
    player_id: str
    team_id: Optional[str] = None
    expected: Optional[float] = None


class TeamExpectation(ResponseModel):
    id: str
    expected: Optional[float] = None


class PreMatchResponse(ResponseModel):
    """Expected outcome for each player and team."""
    players: list[PlayerExpectation] = Field(default_factory=list)
    teams: list[TeamExpectation] = Field(default_factory=list)
    match_id: Optional[str] = None
