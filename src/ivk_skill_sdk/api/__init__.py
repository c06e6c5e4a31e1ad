"""
HTTP transport for the Skill API.

Components:
- SkillApi: one-attempt httpx transport returning Outcomes
- ApiRequest: resolved method/path/payload for one operation
- *_request builders: map SDK operations onto API endpoints
"""

from ivk_skill_sdk.api.skill_api import (
    API_KEY_HEADER,
    ApiRequest,
    SkillApi,
    configuration_request,
    match_result_request,
    pre_match_request,
)

__all__ = [
    "API_KEY_HEADER",
    "ApiRequest",
    "SkillApi",
    "configuration_request",
    "match_result_request",
    "pre_match_request",
]
