"""Access policy models for 1Claw SDK."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import Field

from .base import OneclawModel


class Policy(OneclawModel):
    """Grants a principal permissions on secrets matching a path pattern."""

    id: str
    vault_id: str
    secret_path_pattern: str
    principal_type: str
    principal_id: str
    permissions: list[str] = Field(default_factory=list)
    conditions: dict[str, Any] = Field(default_factory=dict)
    expires_at: Optional[datetime] = None
    created_by: Optional[str] = None
    created_by_type: Optional[str] = None
    created_at: datetime


class PolicyList(OneclawModel):
    policies: list[Policy] = Field(default_factory=list)
