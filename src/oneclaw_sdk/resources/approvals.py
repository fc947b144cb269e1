from __future__ import annotations

from typing import Optional

from ..models.approval import Approval, ApprovalList
from ..models.envelope import ResponseEnvelope
from .base import Resource, segment


class ApprovalsResource(Resource):
    """
    Resource for human-in-the-loop approvals.

    When a read fails with ``ApprovalRequiredError``, an agent can request
    approval here and poll its status until a human decides.
    """

    async def request(
        self,
        vault_id: str,
        secret_path: str,
        reason: Optional[str] = None,
    ) -> ResponseEnvelope[Approval]:
        """Ask the vault owner to approve access to ``secret_path``."""
        payload = {"vault_id": vault_id, "secret_path": secret_path, "reason": reason}
        return await self._post("/v1/approvals", payload, model=Approval)

    async def get(self, approval_id: str) -> ResponseEnvelope[Approval]:
        """Fetch an approval request; ``status`` is pending, approved or denied."""
        return await self._get(f"/v1/approvals/{segment(approval_id)}", model=Approval)

    async def list(self, status: Optional[str] = None) -> ResponseEnvelope[ApprovalList]:
        return await self._get("/v1/approvals", params={"status": status}, model=ApprovalList)

    async def approve(self, approval_id: str) -> ResponseEnvelope[Approval]:
        return await self._post(f"/v1/approvals/{segment(approval_id)}/approve", model=Approval)

    async def deny(self, approval_id: str) -> ResponseEnvelope[Approval]:
        return await self._post(f"/v1/approvals/{segment(approval_id)}/deny", model=Approval)
