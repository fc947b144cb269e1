from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..models.audit import AuditEvents
from ..models.envelope import ResponseEnvelope
from .base import Resource


class AuditResource(Resource):
    """Resource for querying the audit log."""

    async def query(
        self,
        resource_id: Optional[str] = None,
        actor_id: Optional[str] = None,
        action: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> ResponseEnvelope[AuditEvents]:
        params = {
            "resource_id": resource_id,
            "actor_id": actor_id,
            "action": action,
            "from": start.isoformat() if start else None,
            "to": end.isoformat() if end else None,
            "limit": limit,
            "offset": offset,
        }
        return await self._get("/v1/audit/events", params=params, model=AuditEvents)
