from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..models.envelope import ResponseEnvelope
from ..models.share import Share
from ..models.vault import Secret
from .base import Resource, segment


class SharingResource(Resource):
    """
    Resource for time-limited share links to individual secrets.

    The sharing endpoints are not fully implemented server-side yet; these
    methods make no assumptions beyond the documented paths.
    """

    async def create(
        self,
        secret_id: str,
        recipient_type: str,
        expires_at: datetime,
        recipient_id: Optional[str] = None,
        permissions: Optional[list[str]] = None,
        max_access_count: Optional[int] = None,
        passphrase: Optional[str] = None,
        ip_allowlist: Optional[list[str]] = None,
    ) -> ResponseEnvelope[Share]:
        payload = {
            "recipient_type": recipient_type,
            "recipient_id": recipient_id,
            "permissions": permissions,
            "max_access_count": max_access_count,
            "expires_at": expires_at.isoformat(),
            "passphrase": passphrase,
            "ip_allowlist": ip_allowlist,
        }
        return await self._post(f"/v1/secrets/{segment(secret_id)}/share", payload, model=Share)

    async def access(self, share_id: str) -> ResponseEnvelope[Secret]:
        return await self._get(f"/v1/share/{segment(share_id)}", model=Secret)

    async def revoke(self, share_id: str) -> ResponseEnvelope[dict]:
        return await self._delete(f"/v1/share/{segment(share_id)}")
