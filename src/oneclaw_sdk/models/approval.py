"""Human-in-the-loop approval models for 1Claw SDK."""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from .base import OneclawModel


class ApprovalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"


class Approval(OneclawModel):
    """A request for a human to approve access to a gated secret."""

    id: str
    vault_id: str
    secret_path: str
    requester_id: str
    requester_type: str
    reason: Optional[str] = None
    status: ApprovalStatus = ApprovalStatus.PENDING
    decided_by: Optional[str] = None
    decided_at: Optional[datetime] = None
    created_at: datetime


class ApprovalList(OneclawModel):
    approvals: list[Approval] = Field(default_factory=list)
