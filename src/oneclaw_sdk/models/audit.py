"""Audit log models for 1Claw SDK."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import Field

from .base import OneclawModel


class AuditEvent(OneclawModel):
    id: str
    action: str
    actor_id: str
    actor_type: str
    resource_type: str
    resource_id: str
    org_id: str
    details: dict[str, Any] = Field(default_factory=dict)
    ip_address: Optional[str] = None
    created_at: datetime


class AuditEvents(OneclawModel):
    events: list[AuditEvent] = Field(default_factory=list)
    count: int = 0
