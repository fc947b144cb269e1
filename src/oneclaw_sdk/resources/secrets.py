from __future__ import annotations

from datetime import datetime
from typing import Any, Optional
from urllib.parse import quote

from ..models.envelope import ResponseEnvelope
from ..models.vault import Secret, SecretList, SecretMetadata
from .base import Resource, segment


def _secret_path(vault_id: str, path: str) -> str:
    # Secret paths are hierarchical; keep their slashes.
    return f"/v1/vaults/{segment(vault_id)}/secrets/{quote(path.strip('/'), safe='/')}"


class SecretsResource(Resource):
    """
    Resource for storing and reading secrets.

    Secrets are addressed by vault and a slash-separated path such as
    ``prod/stripe/api_key``. Values are encrypted at rest server-side.
    """

    async def set(
        self,
        vault_id: str,
        path: str,
        value: str,
        type: str = "generic",
        metadata: Optional[dict[str, Any]] = None,
        expires_at: Optional[datetime] = None,
        max_access_count: Optional[int] = None,
        rotation_policy: Optional[dict[str, Any]] = None,
    ) -> ResponseEnvelope[SecretMetadata]:
        """
        Create or update a secret. Each write creates a new version.

        Args:
            vault_id: Vault to write to
            path: Secret path within the vault
            value: Secret value
            type: Type hint (``api_key``, ``password``, ``token``, ``generic``)
            metadata: Arbitrary key-value metadata
            expires_at: Optional expiry
            max_access_count: Optional read budget
            rotation_policy: Server-side rotation settings for the secret
        """
        payload = {
            "type": type,
            "value": value,
            "metadata": metadata,
            "expires_at": expires_at.isoformat() if expires_at else None,
            "max_access_count": max_access_count,
            "rotation_policy": rotation_policy,
        }
        return await self._put(_secret_path(vault_id, path), payload, model=SecretMetadata)

    async def get(self, vault_id: str, path: str, reason: Optional[str] = None) -> ResponseEnvelope[Secret]:
        """Fetch a decrypted secret. ``reason`` is recorded in the audit log."""
        params = {"reason": reason} if reason else None
        return await self._get(_secret_path(vault_id, path), params=params, model=Secret)

    async def list(self, vault_id: str, prefix: Optional[str] = None) -> ResponseEnvelope[SecretList]:
        """List secret metadata without values."""
        return await self._get(
            f"/v1/vaults/{segment(vault_id)}/secrets",
            params={"prefix": prefix},
            model=SecretList,
        )

    async def delete(self, vault_id: str, path: str) -> ResponseEnvelope[dict]:
        return await self._delete(_secret_path(vault_id, path))
