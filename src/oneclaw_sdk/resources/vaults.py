from __future__ import annotations

from typing import Optional

from ..models.envelope import ResponseEnvelope
from ..models.vault import Vault, VaultList
from .base import Resource, segment


class VaultsResource(Resource):
    """Resource for managing vaults."""

    async def create(self, name: str, description: Optional[str] = None) -> ResponseEnvelope[Vault]:
        return await self._post("/v1/vaults", {"name": name, "description": description}, model=Vault)

    async def get(self, vault_id: str) -> ResponseEnvelope[Vault]:
        return await self._get(f"/v1/vaults/{segment(vault_id)}", model=Vault)

    async def list(self) -> ResponseEnvelope[VaultList]:
        return await self._get("/v1/vaults", model=VaultList)

    async def delete(self, vault_id: str) -> ResponseEnvelope[dict]:
        """Delete a vault and every secret in it."""
        return await self._delete(f"/v1/vaults/{segment(vault_id)}")
