"""
Base classes for Skill API wire models.

Optional request fields are tracked by presence, not by value: a field the
caller never set is left out of the payload, while a field set explicitly is
sent even when it equals its default (``prior_games_played=0``,
``is_bot=False``). Pydantic records this in ``model_fields_set``.
"""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict


class RequestModel(BaseModel):
    """Base for request payloads. Unknown fields are rejected."""
    model_config = ConfigDict(extra="forbid")

    def is_set(self, field_name: str) -> bool:
        """True if ``field_name`` was explicitly provided."""
        return field_name in self.model_fields_set

    def to_payload(self) -> Dict[str, Any]:
        """JSON-ready dict containing only explicitly set fields."""
        return self.model_dump(mode="json", exclude_unset=True)


class ResponseModel(BaseModel):
    """Base for response bodies. Fields added server-side are kept."""
    model_config = ConfigDict(extra="allow")
