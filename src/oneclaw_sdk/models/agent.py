"""Agent models for 1Claw SDK."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import OneclawModel


class Agent(OneclawModel):
    """An AI agent registered with 1Claw."""

    id: str
    name: str
    description: str = ""
    auth_method: str = "api_key"
    scopes: list[str] = Field(default_factory=list)
    is_active: bool = True
    created_at: datetime
    expires_at: Optional[datetime] = None
    last_active_at: Optional[datetime] = None


class AgentCreated(OneclawModel):
    """A newly registered agent and its one-time API key."""

    agent: Agent
    api_key: str = Field(repr=False)


class AgentList(OneclawModel):
    agents: list[Agent] = Field(default_factory=list)


class AgentKeyRotated(OneclawModel):
    api_key: str = Field(repr=False)
