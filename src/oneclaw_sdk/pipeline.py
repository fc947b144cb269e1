"""Request pipeline.

``RequestPipeline.execute`` turns one logical API call into at most two
resource requests (plus token exchanges):

    send -> 2xx                     -> data
         -> 401 (first attempt)     -> invalidate token, resend once
         -> 402 (first attempt)     -> negotiate payment, resend once
         -> anything else / repeat  -> classified error

The reauth and payment retries are mutually exclusive within one call, so
every call terminates.
"""
from __future__ import annotations

import json as jsonlib
import logging
import uuid
from typing import Any, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .classifier import classify_response, classify_transport_error, extract_message
from .credentials import CredentialStore
from .models.auth import Credential, TokenResponse
from .models.envelope import ResponseEnvelope, ResponseMeta
from .models.errors import (
    AuthenticationError,
    OneclawError,
    PaymentRejection,
    PaymentRequiredError,
    ServerError,
)
from .x402 import (
    PAYMENT_HEADER,
    PAYMENT_RESPONSE_HEADER,
    PaymentNegotiator,
    decode_payment_receipt,
    encode_payment_header,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

IDEMPOTENT_METHODS = frozenset({"GET", "HEAD", "OPTIONS", "PUT", "DELETE"})
IDEMPOTENCY_HEADER = "Idempotency-Key"
REQUEST_ID_HEADER = "X-Request-Id"

_NOT_JSON = object()


def _parse_body(response: httpx.Response) -> Any:
    """Return the JSON body, ``None`` for an empty body, or ``_NOT_JSON``."""
    if not response.content:
        return None
    try:
        return response.json()
    except (jsonlib.JSONDecodeError, UnicodeDecodeError):
        return _NOT_JSON


def _meta(response: httpx.Response, body: Any) -> ResponseMeta:
    request_id = response.headers.get(REQUEST_ID_HEADER)
    if isinstance(body, dict) and isinstance(body.get("meta"), dict):
        meta = body["meta"]
        request_id = meta.get("requestId") or meta.get("request_id") or request_id
    return ResponseMeta(status=response.status_code, request_id=request_id)


class RequestPipeline:
    """Authenticated, payment-aware transport for one client.

    Args:
        http: HTTP client with ``base_url`` set; owned by the caller
        credential: The client's long-lived credential
        negotiator: x402 payment negotiator
        timeout: Default per-call timeout in seconds
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        credential: Credential,
        negotiator: PaymentNegotiator,
        timeout: float = 30.0,
        credential_store: Optional[CredentialStore] = None,
    ) -> None:
        self._http = http
        self._negotiator = negotiator
        self._timeout = timeout
        self.credentials = credential_store or CredentialStore(credential, self._exchange_token)

    @property
    def negotiator(self) -> PaymentNegotiator:
        return self._negotiator

    async def _exchange_token(
        self,
        path: str,
        body: dict[str, Any],
        timeout: Optional[float],
    ) -> TokenResponse:
        """POST a token exchange request; used by the credential store."""
        try:
            response = await self._http.request(
                "POST",
                path,
                json=body,
                timeout=timeout if timeout is not None else self._timeout,
            )
        except httpx.RequestError as exc:
            raise classify_transport_error(exc) from exc

        parsed = _parse_body(response)
        meta = _meta(response, parsed)
        if not response.is_success:
            raise AuthenticationError(
                extract_message(parsed if parsed is not _NOT_JSON else response.text, "Token exchange failed"),
                status_code=meta.status,
                request_id=meta.request_id,
            )
        if isinstance(parsed, dict) and isinstance(parsed.get("data"), dict):
            parsed = parsed["data"]
        try:
            return TokenResponse.model_validate(parsed)
        except PydanticValidationError as exc:
            raise AuthenticationError(
                "Malformed token exchange response",
                status_code=meta.status,
                request_id=meta.request_id,
            ) from exc

    async def _send(
        self,
        method: str,
        path: str,
        headers: dict[str, str],
        body: Any,
        params: Optional[dict[str, Any]],
        timeout: float,
    ) -> httpx.Response:
        logger.debug("%s %s", method, path)
        try:
            return await self._http.request(
                method,
                path,
                params=params,
                json=body,
                headers=headers,
                timeout=timeout,
            )
        except httpx.RequestError as exc:
            raise classify_transport_error(exc) from exc

    def _success(
        self,
        response: httpx.Response,
        receipt_expected: bool,
        model: Optional[Type[M]],
    ) -> ResponseEnvelope[Any]:
        body = _parse_body(response)
        if body is _NOT_JSON:
            meta = ResponseMeta(status=response.status_code, request_id=response.headers.get(REQUEST_ID_HEADER))
            return ResponseEnvelope.failure(
                ServerError("Response body is not JSON", detail=response.text), meta
            )
        meta = _meta(response, body)

        if receipt_expected and PAYMENT_RESPONSE_HEADER in response.headers:
            try:
                receipt = decode_payment_receipt(response.headers[PAYMENT_RESPONSE_HEADER])
            except (ValueError, PydanticValidationError):
                logger.warning("Ignoring unparseable payment receipt")
            else:
                meta = ResponseMeta(status=meta.status, request_id=meta.request_id, payment=receipt)

        if isinstance(body, dict) and body.get("error") and body.get("data") is None:
            return ResponseEnvelope.failure(
                ServerError(extract_message(body, "Error in successful response"), detail=body.get("error")),
                meta,
            )
        if isinstance(body, dict) and "data" in body:
            data = body["data"]
        else:
            data = body
        if data is None:
            data = {}

        if model is not None:
            try:
                data = model.model_validate(data)
            except PydanticValidationError as exc:
                return ResponseEnvelope.failure(
                    ServerError(
                        f"Response does not match {model.__name__}",
                        detail=exc.errors(include_url=False),
                    ),
                    meta,
                )
        return ResponseEnvelope.success(data, meta)

    async def execute(
        self,
        method: str,
        path: str,
        *,
        body: Any = None,
        params: Optional[dict[str, Any]] = None,
        idempotent: Optional[bool] = None,
        timeout: Optional[float] = None,
        model: Optional[Type[M]] = None,
    ) -> ResponseEnvelope[Any]:
        """Execute one logical API call.

        Args:
            method: HTTP method
            path: API path, relative to the base URL
            body: JSON request body
            params: Query parameters
            idempotent: Whether resending is harmless. Defaults to the
                method's semantics; non-idempotent calls carry an
                ``Idempotency-Key`` that is reused on the resend.
            timeout: Per-call timeout in seconds for each suspension point
            model: Optional pydantic model to validate ``data`` into

        Returns:
            ResponseEnvelope holding either ``data`` or a classified error.
            Errors are never raised from here; see ``ResponseEnvelope.unwrap``.
        """
        method = method.upper()
        timeout = timeout if timeout is not None else self._timeout
        if idempotent is None:
            idempotent = method in IDEMPOTENT_METHODS

        headers: dict[str, str] = {}
        if not idempotent:
            headers[IDEMPOTENCY_HEADER] = str(uuid.uuid4())

        reauthenticated = False
        paid = False

        while True:
            try:
                token = await self.credentials.acquire_token(timeout=timeout)
            except OneclawError as exc:
                # Exchange errors carry the status of the exchange response, if any.
                exchange_meta = None
                if exc.status_code is not None:
                    exchange_meta = ResponseMeta(status=exc.status_code, request_id=exc.request_id)
                return ResponseEnvelope.failure(exc, exchange_meta)
            headers["Authorization"] = f"Bearer {token}"

            try:
                response = await self._send(method, path, headers, body, params, timeout)
            except OneclawError as exc:
                logger.debug("%s %s failed without response: %s", method, path, exc)
                return ResponseEnvelope.failure(exc)

            if response.is_success:
                return self._success(response, paid, model)

            parsed = _parse_body(response)
            error_body = response.text if parsed is _NOT_JSON else parsed
            meta = _meta(response, parsed)
            error = classify_response(response.status_code, error_body, response.headers)
            retried = reauthenticated or paid

            if response.status_code == 401 and not retried and self.credentials.refreshable:
                logger.info("Token rejected for %s %s; re-authenticating", method, path)
                self.credentials.invalidate(token)
                reauthenticated = True
                continue

            if isinstance(error, PaymentRequiredError) and error.requirement is not None:
                if retried:
                    if paid:
                        error.reason = PaymentRejection.ALREADY_PAID
                    return ResponseEnvelope.failure(error, meta)
                try:
                    payload = await self._negotiator.negotiate(error.requirement, timeout=timeout)
                except PaymentRequiredError as refused:
                    return ResponseEnvelope.failure(refused, meta)
                logger.info("Retrying %s %s with x402 payment", method, path)
                headers[PAYMENT_HEADER] = encode_payment_header(payload)
                paid = True
                continue

            return ResponseEnvelope.failure(error, meta)
