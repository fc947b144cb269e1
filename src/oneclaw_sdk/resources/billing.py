from __future__ import annotations

from typing import Optional

from ..models.billing import UsageHistory, UsageSummary
from ..models.envelope import ResponseEnvelope
from .base import Resource


class BillingResource(Resource):
    """Resource for usage and x402 billing history."""

    async def usage(self) -> ResponseEnvelope[UsageSummary]:
        return await self._get("/v1/billing/usage", model=UsageSummary)

    async def history(self, limit: Optional[int] = None) -> ResponseEnvelope[UsageHistory]:
        return await self._get("/v1/billing/history", params={"limit": limit}, model=UsageHistory)
