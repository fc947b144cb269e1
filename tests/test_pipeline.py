"""
Tests for the request pipeline.

Tests cover:
- Token exchange, caching and re-authentication on 401
- x402 payment retry and policy refusal
- Retry bounds (at most one reauth or one payment per call)
- Envelope contents for success, error and transport failure
"""
from __future__ import annotations

import asyncio
import base64
import json
import logging

import httpx
import pytest

from oneclaw_sdk.models.errors import (
    AuthenticationError,
    ErrorType,
    NetworkError,
    NotFoundError,
    PaymentRejection,
    PaymentRequiredError,
    ServerError,
)
from oneclaw_sdk.models.vault import VaultList
from oneclaw_sdk.pipeline import IDEMPOTENCY_HEADER
from oneclaw_sdk.x402 import PAYMENT_HEADER, PAYMENT_RESPONSE_HEADER, decode_payment_header

from .conftest import AGENT_TOKEN_URL, BASE_URL, USER_TOKEN_URL, payment_requirement, token_response

VAULTS_URL = f"{BASE_URL}/v1/vaults"
SECRET_URL = f"{BASE_URL}/v1/vaults/v1/secrets/prod/stripe/key"


def unauthorized() -> dict:
    return {"data": None, "error": {"type": "unauthorized", "message": "Token expired"}}


def bearer(request: httpx.Request) -> str:
    return request.headers["Authorization"]


class TestAuthentication:
    async def test_exchanges_api_key_then_calls(self, client, mock_api):
        mock_api.add_response(url=USER_TOKEN_URL, method="POST", json=token_response("jwt-1"))
        mock_api.add_response(url=VAULTS_URL, json={"data": {"vaults": []}})

        result = await client.execute("GET", "/v1/vaults")

        assert result.ok
        assert result.data == {"vaults": []}
        assert result.meta.status == 200
        exchange = mock_api.get_requests(url=USER_TOKEN_URL)[0]
        assert json.loads(exchange.content) == {"api_key": "k1"}
        assert "Authorization" not in exchange.headers
        assert bearer(mock_api.get_requests(url=VAULTS_URL)[0]) == "Bearer jwt-1"

    async def test_agent_credential_uses_agent_endpoint(self, make_client, mock_api):
        client = make_client(api_key="ocv_agent", agent_id="agent_1")
        mock_api.add_response(url=AGENT_TOKEN_URL, method="POST", json={"data": token_response("jwt-a")})
        mock_api.add_response(url=VAULTS_URL, json={"data": {"vaults": []}})

        result = await client.execute("GET", "/v1/vaults")

        assert result.ok
        body = json.loads(mock_api.get_requests(url=AGENT_TOKEN_URL)[0].content)
        assert body == {"agent_id": "agent_1", "api_key": "ocv_agent"}

    async def test_token_is_cached_across_calls(self, client, mock_api):
        mock_api.add_response(url=USER_TOKEN_URL, method="POST", json=token_response())
        mock_api.add_response(url=VAULTS_URL, json={"data": {"vaults": []}}, reusable=True)

        for _ in range(3):
            assert (await client.execute("GET", "/v1/vaults")).ok

        assert len(mock_api.get_requests(url=USER_TOKEN_URL)) == 1

    async def test_expired_token_reauthenticates_once(self, client, mock_api):
        mock_api.add_response(url=USER_TOKEN_URL, method="POST", json=token_response("jwt-1"))
        mock_api.add_response(url=VAULTS_URL, status_code=401, json=unauthorized())
        mock_api.add_response(url=USER_TOKEN_URL, method="POST", json=token_response("jwt-2"))
        mock_api.add_response(url=VAULTS_URL, json={"data": {"vaults": []}})

        result = await client.vaults.list()

        assert result.ok
        assert isinstance(result.data, VaultList)
        assert result.data.vaults == []
        calls = mock_api.get_requests(url=VAULTS_URL)
        assert [bearer(r) for r in calls] == ["Bearer jwt-1", "Bearer jwt-2"]
        assert len(mock_api.get_requests(url=USER_TOKEN_URL)) == 2

    async def test_second_401_is_terminal(self, client, mock_api):
        mock_api.add_response(url=USER_TOKEN_URL, method="POST", json=token_response("jwt-1"))
        mock_api.add_response(url=VAULTS_URL, status_code=401, json=unauthorized())
        mock_api.add_response(url=USER_TOKEN_URL, method="POST", json=token_response("jwt-2"))
        mock_api.add_response(url=VAULTS_URL, status_code=401, json=unauthorized())

        result = await client.execute("GET", "/v1/vaults")

        assert isinstance(result.error, AuthenticationError)
        assert result.error.message == "Token expired"
        assert result.meta.status == 401
        assert len(mock_api.get_requests(url=VAULTS_URL)) == 2

    async def test_preauthenticated_token_not_retried(self, make_client, mock_api):
        client = make_client(token="user-jwt")
        mock_api.add_response(url=VAULTS_URL, status_code=401, json=unauthorized())

        result = await client.execute("GET", "/v1/vaults")

        assert isinstance(result.error, AuthenticationError)
        assert len(mock_api.requests) == 1
        assert bearer(mock_api.requests[0]) == "Bearer user-jwt"

    async def test_exchange_rejected(self, client, mock_api):
        mock_api.add_response(
            url=USER_TOKEN_URL,
            method="POST",
            status_code=401,
            json={"detail": "Invalid API key"},
            headers={"X-Request-Id": "req_auth"},
        )

        result = await client.execute("GET", "/v1/vaults")

        assert isinstance(result.error, AuthenticationError)
        assert result.error.message == "Invalid API key"
        assert result.meta.status == 401
        assert result.meta.request_id == "req_auth"
        assert result.error.request_id == "req_auth"
        assert mock_api.get_requests(url=VAULTS_URL) == []

    async def test_malformed_exchange_response(self, client, mock_api):
        mock_api.add_response(url=USER_TOKEN_URL, method="POST", json={"token": "nope"})

        result = await client.execute("GET", "/v1/vaults")

        assert isinstance(result.error, AuthenticationError)
        assert result.error.message == "Malformed token exchange response"

    async def test_concurrent_calls_share_one_exchange(self, client, mock_api):
        async def slow_token(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(0.01)
            return httpx.Response(200, json=token_response())

        mock_api.add_callback(slow_token, url=USER_TOKEN_URL, method="POST")
        mock_api.add_response(url=VAULTS_URL, json={"data": {"vaults": []}}, reusable=True)

        results = await asyncio.gather(*(client.execute("GET", "/v1/vaults") for _ in range(8)))

        assert all(r.ok for r in results)
        assert len(mock_api.get_requests(url=USER_TOKEN_URL)) == 1
        assert len(mock_api.get_requests(url=VAULTS_URL)) == 8


    async def test_exchange_timeout_is_network_error(self, client, mock_api):
        mock_api.add_exception(httpx.ReadTimeout("read timed out"), url=USER_TOKEN_URL, method="POST")

        result = await client.execute("GET", "/v1/vaults")

        assert isinstance(result.error, NetworkError)
        assert result.error.message == "Request timed out"
        assert result.meta is None
        assert mock_api.get_requests(url=VAULTS_URL) == []

    async def test_joining_caller_keeps_its_own_timeout(self, client, mock_api):
        release = asyncio.Event()

        async def slow_token(request: httpx.Request) -> httpx.Response:
            await release.wait()
            return httpx.Response(200, json=token_response())

        mock_api.add_callback(slow_token, url=USER_TOKEN_URL, method="POST")
        mock_api.add_response(url=VAULTS_URL, json={"data": {"vaults": []}})

        patient = asyncio.create_task(client.execute("GET", "/v1/vaults", timeout=5))
        await asyncio.sleep(0.01)
        hurried = await client.execute("GET", "/v1/vaults", timeout=0.1)

        assert isinstance(hurried.error, NetworkError)
        assert hurried.error.message == "Token exchange timed out"

        release.set()
        assert (await patient).ok
        assert len(mock_api.get_requests(url=USER_TOKEN_URL)) == 1


class TestPayment:
    async def test_default_limit_returns_payment_required(self, make_client, mock_api, signer):
        client = make_client(signer=signer)
        mock_api.add_response(url=USER_TOKEN_URL, method="POST", json=token_response())
        mock_api.add_response(url=SECRET_URL, status_code=402, json=payment_requirement(price="0.01"))

        result = await client.secrets.get("v1", "prod/stripe/key")

        assert isinstance(result.error, PaymentRequiredError)
        assert result.error.type is ErrorType.PAYMENT_REQUIRED
        assert result.error.reason is PaymentRejection.POLICY_LIMIT
        assert result.error.requirement.accepts[0].price == "0.01"
        assert result.meta.status == 402
        assert signer.calls == []
        assert len(mock_api.get_requests(url=SECRET_URL)) == 1

    async def test_pays_within_limit_and_resends(self, make_client, mock_api, signer):
        client = make_client(signer=signer, max_auto_pay_usd="1.00")
        receipt = {"x402Version": 1, "scheme": "exact", "network": "eip155:8453", "txHash": "0xtx"}
        mock_api.add_response(url=USER_TOKEN_URL, method="POST", json=token_response())
        mock_api.add_response(url=SECRET_URL, status_code=402, json=payment_requirement(price="0.01"))
        mock_api.add_response(
            url=SECRET_URL,
            json={
                "data": {
                    "id": "s1",
                    "path": "prod/stripe/key",
                    "type": "api_key",
                    "value": "sk_live_123",
                    "created_at": "2025-01-20T00:00:00Z",
                }
            },
            headers={PAYMENT_RESPONSE_HEADER: base64.b64encode(json.dumps(receipt).encode()).decode()},
        )

        result = await client.secrets.get("v1", "prod/stripe/key")

        assert result.ok
        assert result.data.value == "sk_live_123"
        assert result.meta.payment.tx_hash == "0xtx"
        assert len(signer.calls) == 1

        first, second = mock_api.get_requests(url=SECRET_URL)
        assert PAYMENT_HEADER not in first.headers
        payload = decode_payment_header(second.headers[PAYMENT_HEADER])
        assert payload.payload == "0xsigned"
        assert payload.network == "eip155:8453"

    async def test_unparseable_receipt_is_ignored(self, make_client, mock_api, signer, caplog):
        client = make_client(signer=signer, max_auto_pay_usd="1")
        mock_api.add_response(url=USER_TOKEN_URL, method="POST", json=token_response())
        mock_api.add_response(url=SECRET_URL, status_code=402, json=payment_requirement())
        mock_api.add_response(
            url=SECRET_URL,
            json={"data": {"ok": True}},
            headers={PAYMENT_RESPONSE_HEADER: "not a receipt!"},
        )

        with caplog.at_level(logging.WARNING, logger="oneclaw_sdk.pipeline"):
            result = await client.execute("GET", "/v1/vaults/v1/secrets/prod/stripe/key")

        assert result.ok
        assert result.data == {"ok": True}
        assert result.meta.payment is None
        assert "unparseable payment receipt" in caplog.text

    async def test_second_402_is_already_paid(self, make_client, mock_api, signer):
        client = make_client(signer=signer, max_auto_pay_usd="1")
        mock_api.add_response(url=USER_TOKEN_URL, method="POST", json=token_response())
        mock_api.add_response(url=SECRET_URL, status_code=402, json=payment_requirement(), reusable=True)

        result = await client.execute("GET", "/v1/vaults/v1/secrets/prod/stripe/key")

        assert isinstance(result.error, PaymentRequiredError)
        assert result.error.reason is PaymentRejection.ALREADY_PAID
        assert len(signer.calls) == 1
        assert len(mock_api.get_requests(url=SECRET_URL)) == 2

    async def test_401_after_payment_is_terminal(self, make_client, mock_api, signer):
        client = make_client(signer=signer, max_auto_pay_usd="1")
        mock_api.add_response(url=USER_TOKEN_URL, method="POST", json=token_response())
        mock_api.add_response(url=SECRET_URL, status_code=402, json=payment_requirement())
        mock_api.add_response(url=SECRET_URL, status_code=401, json=unauthorized())

        result = await client.execute("GET", "/v1/vaults/v1/secrets/prod/stripe/key")

        assert isinstance(result.error, AuthenticationError)
        assert len(mock_api.get_requests(url=USER_TOKEN_URL)) == 1
        assert len(mock_api.requests) == 3

    async def test_402_after_reauth_is_terminal(self, make_client, mock_api, signer):
        client = make_client(signer=signer, max_auto_pay_usd="1")
        mock_api.add_response(url=USER_TOKEN_URL, method="POST", json=token_response("jwt-1"))
        mock_api.add_response(url=SECRET_URL, status_code=401, json=unauthorized())
        mock_api.add_response(url=USER_TOKEN_URL, method="POST", json=token_response("jwt-2"))
        mock_api.add_response(url=SECRET_URL, status_code=402, json=payment_requirement())

        result = await client.execute("GET", "/v1/vaults/v1/secrets/prod/stripe/key")

        assert isinstance(result.error, PaymentRequiredError)
        assert result.error.reason is None
        assert signer.calls == []
        assert len(mock_api.get_requests(url=SECRET_URL)) == 2

    async def test_malformed_402_is_server_error(self, client, mock_api):
        mock_api.add_response(url=USER_TOKEN_URL, method="POST", json=token_response())
        mock_api.add_response(url=SECRET_URL, status_code=402, content=b"<html>402</html>")

        result = await client.execute("GET", "/v1/vaults/v1/secrets/prod/stripe/key")

        assert isinstance(result.error, ServerError)
        assert result.meta.status == 402


class TestResponses:
    async def test_not_found_is_not_retried(self, client, mock_api):
        mock_api.add_response(url=USER_TOKEN_URL, method="POST", json=token_response())
        mock_api.add_response(
            url=f"{VAULTS_URL}/missing",
            status_code=404,
            json={"detail": "Vault not found"},
            headers={"X-Request-Id": "req_42"},
        )

        result = await client.vaults.get("missing")

        assert isinstance(result.error, NotFoundError)
        assert result.error.message == "Vault not found"
        assert result.meta.request_id == "req_42"
        assert result.error.request_id == "req_42"
        assert len(mock_api.get_requests(url=f"{VAULTS_URL}/missing")) == 1

    async def test_network_error_is_not_retried(self, client, mock_api):
        mock_api.add_response(url=USER_TOKEN_URL, method="POST", json=token_response())
        mock_api.add_exception(httpx.ConnectError("connection refused"), url=VAULTS_URL)

        result = await client.execute("GET", "/v1/vaults")

        assert isinstance(result.error, NetworkError)
        assert result.meta is None
        assert len(mock_api.get_requests(url=VAULTS_URL)) == 1

    async def test_undecodable_body_is_network_error(self, client, mock_api):
        def corrupt_gzip(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, headers={"Content-Encoding": "gzip"}, content=b"not-gzip")

        mock_api.add_response(url=USER_TOKEN_URL, method="POST", json=token_response())
        mock_api.add_callback(corrupt_gzip, url=VAULTS_URL)

        result = await client.execute("GET", "/v1/vaults")

        assert isinstance(result.error, NetworkError)
        assert isinstance(result.error.cause, httpx.DecodingError)

    async def test_redirect_loop_is_network_error(self, client, mock_api):
        mock_api.add_response(url=USER_TOKEN_URL, method="POST", json=token_response())
        mock_api.add_exception(httpx.TooManyRedirects("Exceeded maximum allowed redirects."), url=VAULTS_URL)

        result = await client.execute("GET", "/v1/vaults")

        assert isinstance(result.error, NetworkError)
        assert result.error.message == "Too many redirects"

    async def test_empty_success_body(self, client, mock_api):
        mock_api.add_response(url=USER_TOKEN_URL, method="POST", json=token_response())
        mock_api.add_response(url=f"{VAULTS_URL}/v1", method="DELETE", status_code=204)

        result = await client.vaults.delete("v1")

        assert result.ok
        assert result.data == {}

    async def test_non_json_success_body(self, client, mock_api):
        mock_api.add_response(url=USER_TOKEN_URL, method="POST", json=token_response())
        mock_api.add_response(url=VAULTS_URL, content=b"<html>ok</html>")

        result = await client.execute("GET", "/v1/vaults")

        assert isinstance(result.error, ServerError)

    async def test_schema_mismatch_is_server_error(self, client, mock_api):
        mock_api.add_response(url=USER_TOKEN_URL, method="POST", json=token_response())
        mock_api.add_response(url=f"{VAULTS_URL}/v1", json={"data": {"unexpected": True}})

        result = await client.vaults.get("v1")

        assert isinstance(result.error, ServerError)
        assert result.error.message == "Response does not match Vault"

    async def test_request_id_from_body_meta(self, client, mock_api):
        mock_api.add_response(url=USER_TOKEN_URL, method="POST", json=token_response())
        mock_api.add_response(url=VAULTS_URL, json={"data": {"vaults": []}, "meta": {"requestId": "req_7"}})

        result = await client.execute("GET", "/v1/vaults")

        assert result.meta.request_id == "req_7"

    async def test_idempotency_key_reused_on_resend(self, client, mock_api):
        mock_api.add_response(url=USER_TOKEN_URL, method="POST", json=token_response("jwt-1"))
        mock_api.add_response(url=VAULTS_URL, method="POST", status_code=401, json=unauthorized())
        mock_api.add_response(url=USER_TOKEN_URL, method="POST", json=token_response("jwt-2"))
        mock_api.add_response(
            url=VAULTS_URL,
            method="POST",
            status_code=201,
            json={"data": {"id": "v1", "name": "prod", "created_at": "2025-01-20T00:00:00Z"}},
        )

        result = await client.vaults.create("prod")

        assert result.ok
        assert result.data.name == "prod"
        first, second = mock_api.get_requests(url=VAULTS_URL, method="POST")
        assert first.headers[IDEMPOTENCY_HEADER] == second.headers[IDEMPOTENCY_HEADER]
        assert json.loads(second.content) == {"name": "prod"}

    async def test_idempotent_methods_have_no_key(self, client, mock_api):
        mock_api.add_response(url=USER_TOKEN_URL, method="POST", json=token_response())
        mock_api.add_response(url=VAULTS_URL, json={"data": {"vaults": []}})

        await client.execute("GET", "/v1/vaults")

        assert IDEMPOTENCY_HEADER not in mock_api.get_requests(url=VAULTS_URL)[0].headers

    async def test_execute_or_raise(self, client, mock_api):
        mock_api.add_response(url=USER_TOKEN_URL, method="POST", json=token_response())
        mock_api.add_response(url=VAULTS_URL, json={"data": {"vaults": []}})
        mock_api.add_response(url=f"{VAULTS_URL}/gone", status_code=404, json={"detail": "gone"})

        assert await client.execute_or_raise("GET", "/v1/vaults") == {"vaults": []}
        with pytest.raises(NotFoundError):
            await client.execute_or_raise("GET", "/v1/vaults/gone")
