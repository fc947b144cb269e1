from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from ..models.envelope import ResponseEnvelope
from ..models.policy import Policy, PolicyList
from .base import Resource, segment


class PoliciesResource(Resource):
    """Resource for vault access policies."""

    async def create(
        self,
        vault_id: str,
        secret_path_pattern: str,
        principal_type: str,
        principal_id: str,
        permissions: list[str],
        conditions: Optional[dict[str, Any]] = None,
        expires_at: Optional[datetime] = None,
    ) -> ResponseEnvelope[Policy]:
        payload = {
            "secret_path_pattern": secret_path_pattern,
            "principal_type": principal_type,
            "principal_id": principal_id,
            "permissions": permissions,
            "conditions": conditions,
            "expires_at": expires_at.isoformat() if expires_at else None,
        }
        return await self._post(f"/v1/vaults/{segment(vault_id)}/policies", payload, model=Policy)

    async def list(self, vault_id: str) -> ResponseEnvelope[PolicyList]:
        return await self._get(f"/v1/vaults/{segment(vault_id)}/policies", model=PolicyList)

    async def update(
        self,
        vault_id: str,
        policy_id: str,
        permissions: list[str],
        conditions: Optional[dict[str, Any]] = None,
        expires_at: Optional[datetime] = None,
    ) -> ResponseEnvelope[Policy]:
        payload = {
            "permissions": permissions,
            "conditions": conditions,
            "expires_at": expires_at.isoformat() if expires_at else None,
        }
        return await self._put(
            f"/v1/vaults/{segment(vault_id)}/policies/{segment(policy_id)}", payload, model=Policy
        )

    async def delete(self, vault_id: str, policy_id: str) -> ResponseEnvelope[dict]:
        return await self._delete(f"/v1/vaults/{segment(vault_id)}/policies/{segment(policy_id)}")
