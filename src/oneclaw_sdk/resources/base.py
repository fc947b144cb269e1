"""
Base resource class for 1Claw SDK.

Resources only shape paths, bodies and result types. Authentication,
payment and error classification all happen in the request pipeline.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional, Type, TypeVar
from urllib.parse import quote

from pydantic import BaseModel

from ..models.envelope import ResponseEnvelope

if TYPE_CHECKING:
    from ..client import OneclawClient

M = TypeVar("M", bound=BaseModel)


def _compact(data: Dict[str, Any]) -> Dict[str, Any]:
    """Drop ``None`` values from a request body or query."""
    return {k: v for k, v in data.items() if v is not None}


def segment(value: str) -> str:
    """Quote one path segment."""
    return quote(value, safe="")


class AsyncBaseResource:
    """Base class for async API resources.

    Attributes:
        _client: The client instance
    """

    def __init__(self, client: "OneclawClient") -> None:
        self._client = client

    async def _get(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        model: Optional[Type[M]] = None,
    ) -> ResponseEnvelope[Any]:
        return await self._client.execute(
            "GET", path, params=_compact(params) if params else None, model=model
        )

    async def _post(
        self,
        path: str,
        data: Optional[Dict[str, Any]] = None,
        model: Optional[Type[M]] = None,
    ) -> ResponseEnvelope[Any]:
        return await self._client.execute(
            "POST", path, body=_compact(data) if data is not None else None, model=model
        )

    async def _put(
        self,
        path: str,
        data: Optional[Dict[str, Any]] = None,
        model: Optional[Type[M]] = None,
    ) -> ResponseEnvelope[Any]:
        return await self._client.execute(
            "PUT", path, body=_compact(data) if data is not None else None, model=model
        )

    async def _patch(
        self,
        path: str,
        data: Optional[Dict[str, Any]] = None,
        model: Optional[Type[M]] = None,
    ) -> ResponseEnvelope[Any]:
        return await self._client.execute(
            "PATCH", path, body=_compact(data) if data is not None else None, model=model
        )

    async def _delete(self, path: str) -> ResponseEnvelope[Any]:
        return await self._client.execute("DELETE", path)


Resource = AsyncBaseResource


__all__ = ["AsyncBaseResource", "Resource", "segment"]
