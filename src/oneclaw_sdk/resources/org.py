from __future__ import annotations

from typing import Literal

from ..models.envelope import ResponseEnvelope
from ..models.org import OrgMember, OrgMemberList
from .base import Resource, segment

Role = Literal["owner", "admin", "member"]


class OrgResource(Resource):
    """Resource for organization membership."""

    async def list_members(self) -> ResponseEnvelope[OrgMemberList]:
        return await self._get("/v1/org/members", model=OrgMemberList)

    async def update_member_role(self, user_id: str, role: Role) -> ResponseEnvelope[OrgMember]:
        return await self._patch(f"/v1/org/members/{segment(user_id)}", {"role": role}, model=OrgMember)

    async def remove_member(self, user_id: str) -> ResponseEnvelope[dict]:
        return await self._delete(f"/v1/org/members/{segment(user_id)}")
