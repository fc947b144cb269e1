"""User API key models for 1Claw SDK."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import OneclawModel


class ApiKey(OneclawModel):
    """API key metadata. Only ``key_prefix`` of the key is ever returned."""

    id: str
    name: str
    key_prefix: str
    scopes: list[str] = Field(default_factory=list)
    is_active: bool = True
    created_at: datetime
    expires_at: Optional[datetime] = None
    last_used_at: Optional[datetime] = None


class ApiKeyCreated(OneclawModel):
    key: ApiKey
    api_key: str = Field(repr=False)


class ApiKeyList(OneclawModel):
    keys: list[ApiKey] = Field(default_factory=list)
