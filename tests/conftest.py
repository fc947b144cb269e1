"""
Pytest configuration and fixtures for 1Claw SDK tests.
"""
from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, Union
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import httpx
import pytest

from oneclaw_sdk import OneclawClient
from oneclaw_sdk.models.x402 import PaymentOffer

BASE_URL = "https://api.1claw.test"
USER_TOKEN_URL = f"{BASE_URL}/v1/auth/api-key-token"
AGENT_TOKEN_URL = f"{BASE_URL}/v1/auth/agent-token"

Handler = Callable[[httpx.Request], Union[httpx.Response, Awaitable[httpx.Response]]]


@dataclass
class _MockEntry:
    method: str
    url: str
    response: Optional[httpx.Response] = None
    exception: Optional[Exception] = None
    handler: Optional[Handler] = None
    reusable: bool = False


def _normalize_url(url: str) -> str:
    parts = urlsplit(url)
    normalized_query = urlencode(sorted(parse_qsl(parts.query, keep_blank_values=True)), doseq=True)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, normalized_query, parts.fragment))


class MockAPI:
    """Queue of canned responses served through ``httpx.MockTransport``.

    Entries match on method and URL and are consumed in order unless marked
    reusable. Every request that reaches the transport is recorded.
    """

    def __init__(self) -> None:
        self._entries: list[_MockEntry] = []
        self.requests: list[httpx.Request] = []

    def add_response(
        self,
        *,
        url: str,
        method: str = "GET",
        status_code: int = 200,
        json: Any = None,
        content: Optional[bytes] = None,
        headers: Optional[dict[str, str]] = None,
        reusable: bool = False,
    ) -> None:
        response_headers = dict(headers or {})
        if content is None and json is not None:
            content = json_dumps_bytes(json)
            response_headers.setdefault("content-type", "application/json")
        response = httpx.Response(
            status_code=status_code,
            headers=response_headers,
            content=content or b"",
        )
        self._entries.append(
            _MockEntry(method=method.upper(), url=url, response=response, reusable=reusable)
        )

    def add_exception(self, exception: Exception, *, url: str, method: str = "GET") -> None:
        self._entries.append(_MockEntry(method=method.upper(), url=url, exception=exception))

    def add_callback(
        self,
        handler: Handler,
        *,
        url: str,
        method: str = "GET",
        reusable: bool = False,
    ) -> None:
        self._entries.append(
            _MockEntry(method=method.upper(), url=url, handler=handler, reusable=reusable)
        )

    def get_requests(self, *, url: Optional[str] = None, method: Optional[str] = None) -> list[httpx.Request]:
        return [
            r
            for r in self.requests
            if (url is None or _normalize_url(str(r.url)) == _normalize_url(url))
            and (method is None or r.method == method.upper())
        ]

    def _pop_match(self, request: httpx.Request) -> _MockEntry:
        normalized_url = _normalize_url(str(request.url))
        for idx, entry in enumerate(self._entries):
            if entry.method == request.method and _normalize_url(entry.url) == normalized_url:
                return entry if entry.reusable else self._entries.pop(idx)
        raise AssertionError(
            f"No mocked response for {request.method} {request.url}. "
            f"Available: {[f'{e.method} {e.url}' for e in self._entries]}"
        )

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        entry = self._pop_match(request)
        if entry.exception is not None:
            raise entry.exception
        if entry.handler is not None:
            result = entry.handler(request)
            if asyncio.iscoroutine(result):
                result = await result
            return result
        assert entry.response is not None
        return httpx.Response(
            status_code=entry.response.status_code,
            headers=entry.response.headers,
            content=entry.response.content,
            request=request,
        )

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)


def json_dumps_bytes(payload: Any) -> bytes:
    return json.dumps(payload, default=str).encode("utf-8")


def token_response(token: str = "jwt-1", expires_in: int = 3600) -> dict[str, Any]:
    return {"access_token": token, "token_type": "Bearer", "expires_in": expires_in}


def payment_requirement(price: str = "0.01", network: str = "eip155:8453") -> dict[str, Any]:
    return {
        "x402Version": 1,
        "accepts": [
            {
                "scheme": "exact",
                "network": network,
                "payTo": "0x000000000000000000000000000000000000dEaD",
                "price": price,
                "requiredDeadlineSeconds": 60,
            }
        ],
        "description": "Secret read beyond free tier",
    }


@dataclass
class RecordingSigner:
    """Signer double that records every call."""

    signature: Union[str, bytes] = "0xsigned"
    address: str = "0x1111111111111111111111111111111111111111"
    error: Optional[Exception] = None
    delay: float = 0.0
    calls: list[PaymentOffer] = field(default_factory=list)

    async def get_address(self) -> str:
        return self.address

    async def sign_payment(self, offer: PaymentOffer) -> Union[str, bytes]:
        self.calls.append(offer)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.signature


@pytest.fixture
def base_url() -> str:
    return BASE_URL


@pytest.fixture
def api_key() -> str:
    """Test API key."""
    return "k1"


@pytest.fixture
def mock_api() -> MockAPI:
    return MockAPI()


@pytest.fixture
async def http_client(mock_api: MockAPI):
    async with httpx.AsyncClient(base_url=BASE_URL, transport=mock_api.transport()) as http:
        yield http


@pytest.fixture
def signer() -> RecordingSigner:
    return RecordingSigner()


@pytest.fixture
def make_client(http_client: httpx.AsyncClient):
    """Factory for clients wired to the mock transport."""

    def _make(**kwargs: Any) -> OneclawClient:
        kwargs.setdefault("base_url", BASE_URL)
        if "token" not in kwargs:
            kwargs.setdefault("api_key", "k1")
        return OneclawClient(http_client=http_client, **kwargs)

    return _make


@pytest.fixture
def client(make_client) -> OneclawClient:
    return make_client()
