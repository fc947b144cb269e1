from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from ..models.agent import Agent, AgentCreated, AgentKeyRotated, AgentList
from ..models.envelope import ResponseEnvelope
from .base import Resource, segment

_UNSET: Any = object()


class AgentsResource(Resource):
    """
    Resource for managing agents.

    Agents are non-human principals that authenticate with an API key and
    read secrets under the policies granted to them.
    """

    async def create(
        self,
        name: str,
        description: Optional[str] = None,
        auth_method: Optional[str] = None,
        scopes: Optional[list[str]] = None,
        expires_at: Optional[datetime] = None,
    ) -> ResponseEnvelope[AgentCreated]:
        """
        Register a new agent.

        Returns:
            The agent record and its one-time API key. Store the key
            securely; it cannot be retrieved again.
        """
        payload = {
            "name": name,
            "description": description,
            "auth_method": auth_method,
            "scopes": scopes,
            "expires_at": expires_at.isoformat() if expires_at else None,
        }
        return await self._post("/v1/agents", payload, model=AgentCreated)

    async def get(self, agent_id: str) -> ResponseEnvelope[Agent]:
        return await self._get(f"/v1/agents/{segment(agent_id)}", model=Agent)

    async def list(self) -> ResponseEnvelope[AgentList]:
        return await self._get("/v1/agents", model=AgentList)

    async def update(
        self,
        agent_id: str,
        name: Optional[str] = None,
        scopes: Optional[list[str]] = None,
        is_active: Optional[bool] = None,
        expires_at: Optional[datetime] = _UNSET,
    ) -> ResponseEnvelope[Agent]:
        """Update an agent. Pass ``expires_at=None`` to clear its expiry."""
        payload: dict[str, Any] = {"name": name, "scopes": scopes, "is_active": is_active}
        body = {k: v for k, v in payload.items() if v is not None}
        if expires_at is not _UNSET:
            body["expires_at"] = expires_at.isoformat() if expires_at else None
        return await self._client.execute(
            "PATCH", f"/v1/agents/{segment(agent_id)}", body=body, model=Agent
        )

    async def delete(self, agent_id: str) -> ResponseEnvelope[dict]:
        return await self._delete(f"/v1/agents/{segment(agent_id)}")

    async def rotate_key(self, agent_id: str) -> ResponseEnvelope[AgentKeyRotated]:
        """Rotate the agent's API key. The old key stops working immediately."""
        return await self._post(f"/v1/agents/{segment(agent_id)}/rotate-key", model=AgentKeyRotated)
