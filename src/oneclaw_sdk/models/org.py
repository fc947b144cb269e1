"""Organization models for 1Claw SDK."""
from __future__ import annotations

from datetime import datetime

from pydantic import Field

from .base import OneclawModel


class OrgMember(OneclawModel):
    id: str
    email: str
    display_name: str = ""
    role: str
    auth_method: str = ""
    created_at: datetime


class OrgMemberList(OneclawModel):
    members: list[OrgMember] = Field(default_factory=list)
