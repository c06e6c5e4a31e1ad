"""Model for GET .../configuration."""

from typing import Any, Dict, Optional

from pydantic import ConfigDict, Field

from ivk_skill_sdk.models.base import ResponseModel


class ConfigurationResponse(ResponseModel):
    """Active configuration of a rating model."""
    model_config = ConfigDict(extra="allow", protected_namespaces=())

    model_id: Optional[str] = None
    version: Optional[str] = None
    parameters: Dict[str, Any] = Field(default_factory=dict)
