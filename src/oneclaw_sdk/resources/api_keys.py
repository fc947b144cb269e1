from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..models.api_key import ApiKeyCreated, ApiKeyList
from ..models.envelope import ResponseEnvelope
from .base import Resource, segment


class ApiKeysResource(Resource):
    """Resource for managing the current user's API keys."""

    async def create(
        self,
        name: str,
        scopes: Optional[list[str]] = None,
        expires_at: Optional[datetime] = None,
    ) -> ResponseEnvelope[ApiKeyCreated]:
        """
        Create an API key.

        Returns:
            The key metadata and the full key. The full key is shown only
            once.
        """
        payload = {
            "name": name,
            "scopes": scopes,
            "expires_at": expires_at.isoformat() if expires_at else None,
        }
        return await self._post("/v1/auth/api-keys", payload, model=ApiKeyCreated)

    async def list(self) -> ResponseEnvelope[ApiKeyList]:
        return await self._get("/v1/auth/api-keys", model=ApiKeyList)

    async def revoke(self, key_id: str) -> ResponseEnvelope[dict]:
        return await self._delete(f"/v1/auth/api-keys/{segment(key_id)}")

