"""Models for POST .../match-result (post-match rating update)."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from ivk_skill_sdk.models.base import RequestModel, ResponseModel


class PlayerSession(RequestModel):
    """One player's participation in a finished match."""
    player_id: str = Field(..., min_length=1, description="Stable player identifier")
    player_score: float = Field(..., description="Score achieved in the match")
    team_id: Optional[str] = Field(default=None, description="Team the player played for")
    party_id: Optional[str] = Field(default=None, description="Pre-made party identifier")
    prior_mmr: Optional[float] = Field(default=None, description="Rating before the match")
    prior_games_played: Optional[int] = Field(default=None, ge=0, description="Games played before the match")
    prior_momentum: Optional[float] = Field(default=None, description="Momentum before the match")
    adjusted_mmr: Optional[float] = Field(default=None, description="Externally adjusted rating")
    perf_beta: Optional[float] = Field(default=None, description="Per-player performance variance")
    is_bot: Optional[bool] = Field(default=None, description="Whether the player is a bot")
    bot_level: Optional[int] = Field(default=None, description="Bot difficulty level")
    player_score_start: Optional[float] = Field(default=None, description="Score at session start")
    session_timestamps: Optional[list[datetime]] = Field(
        default=None, description="Join/leave timestamps within the match"
    )


class TeamInfo(RequestModel):
    """Team-level result of a finished match."""
    team_id: str = Field(..., min_length=1)
    team_score: Optional[float] = Field(default=None)


class MatchResultRequest(RequestModel):
    """Finished match submitted for a rating update."""
    teams: list[TeamInfo] = Field(..., description="May be empty for free-for-all matches")
    player_sessions: list[PlayerSession] = Field(...)
    match_id: Optional[str] = Field(default=None)
    match_start_ts: Optional[datetime] = Field(default=None)
    match_end_ts: Optional[datetime] = Field(default=None)


class Rating(ResponseModel):
    """Rating snapshot for one player."""
    mmr: Optional[float] = None
    games_played: Optional[int] = None
    momentum: Optional[float] = None


class PlayerRatingUpdate(ResponseModel):
    """Rating before and after the match for one player."""
    player_id: str
    team_id: Optional[str] = None
    prior: Rating = Field(default_factory=Rating)
    post: Rating = Field(default_factory=Rating)


class TeamResult(ResponseModel):
    id: str
    expected: Optional[float] = None
    actual: Optional[float] = None


class MatchInfo(ResponseModel):
    match_id: Optional[str] = None
    duration: Optional[float] = None


class MatchResultResponse(ResponseModel):
    """Updated ratings for every player in the submitted match."""
    players: list[PlayerRatingUpdate] = Field(default_factory=list)
    teams: list[TeamResult] = Field(default_factory=list)
    match_info: Optional[MatchInfo] = None
