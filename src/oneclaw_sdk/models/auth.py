"""Credential and token models for 1Claw SDK."""
from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional, Union

from pydantic import Field

from .base import FrozenModel, OneclawModel


class PreAuthenticatedToken(FrozenModel):
    """A bearer token supplied by the caller and refreshed out-of-band."""

    kind: Literal["token"] = "token"
    token: str = Field(min_length=1, repr=False)


class UserApiKey(FrozenModel):
    """A user API key, exchanged for a short-lived token."""

    kind: Literal["user_api_key"] = "user_api_key"
    key: str = Field(min_length=1, repr=False)


class AgentApiKey(FrozenModel):
    """An agent API key paired with the agent it was issued to."""

    kind: Literal["agent_api_key"] = "agent_api_key"
    key: str = Field(min_length=1, repr=False)
    agent_id: str = Field(min_length=1)


Credential = Union[PreAuthenticatedToken, UserApiKey, AgentApiKey]


class TokenResponse(OneclawModel):
    """Response of the token exchange endpoints."""

    access_token: str = Field(min_length=1)
    token_type: str = "Bearer"
    expires_in: Optional[int] = None
    refresh_token: Optional[str] = None


class CachedToken(FrozenModel):
    """A bearer token held by the credential store."""

    value: str = Field(repr=False)
    expires_at: Optional[datetime] = None
    refresh_token: Optional[str] = Field(default=None, repr=False)
