"""Map wire outcomes to classified errors.

``classify_response`` is total: any status and body yields exactly one
``OneclawError`` subclass, falling back to ``ServerError`` with the raw body
when the body does not have the shape its status implies.
"""
from __future__ import annotations

from typing import Any, Mapping, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from .models.errors import (
    ApprovalRequiredError,
    AuthenticationError,
    NetworkError,
    NotFoundError,
    OneclawError,
    PaymentRequiredError,
    RateLimitError,
    ServerError,
    ValidationError,
)
from .models.x402 import PaymentRequirement

_APPROVAL_MARKERS = frozenset({"approval_required", "pending_approval"})


def _error_object(body: Any) -> Optional[dict[str, Any]]:
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        return body["error"]
    return None


def extract_message(body: Any, default: str) -> str:
    """Pull a human-readable message out of an error body."""
    if isinstance(body, str):
        return body.strip() or default
    if not isinstance(body, dict):
        return default
    error = body.get("error")
    if isinstance(error, dict):
        message = error.get("message")
        if isinstance(message, str) and message:
            return message
    if isinstance(error, str) and error:
        return error
    for key in ("message", "detail"):
        value = body.get(key)
        if isinstance(value, str) and value:
            return value
    return default


def extract_detail(body: Any) -> Any:
    """Return the structured ``detail`` of an error body, if any."""
    if not isinstance(body, dict):
        return None
    error = _error_object(body)
    if error is not None and error.get("detail") is not None:
        return error["detail"]
    return body.get("detail")


def _is_approval_required(body: Any) -> bool:
    if not isinstance(body, dict):
        return False
    if body.get("approval_required") is True:
        return True
    if body.get("status") in _APPROVAL_MARKERS:
        return True
    error = _error_object(body)
    if error is not None:
        return error.get("type") in _APPROVAL_MARKERS or error.get("code") in _APPROVAL_MARKERS
    return False


def _approval_id(body: dict[str, Any]) -> Optional[str]:
    candidates = [body, _error_object(body) or {}]
    detail = extract_detail(body)
    if isinstance(detail, dict):
        candidates.append(detail)
    for source in candidates:
        value = source.get("approval_id") or source.get("approvalId")
        if value:
            return str(value)
    return None


def parse_payment_requirement(body: Any) -> PaymentRequirement:
    """Parse the body of a 402 response.

    The requirement is normally the raw body; an enveloped requirement
    under ``data`` or ``error.detail`` is also accepted.

    Raises:
        ValueError: If no candidate parses as a ``PaymentRequirement``.
    """
    candidates = [body]
    if isinstance(body, dict):
        candidates.append(body.get("data"))
        error = _error_object(body)
        if error is not None:
            candidates.append(error.get("detail"))
    for candidate in candidates:
        if not isinstance(candidate, dict):
            continue
        try:
            return PaymentRequirement.model_validate(candidate)
        except PydanticValidationError:
            continue
    raise ValueError("Response body is not a payment requirement")


def classify_response(
    status_code: int,
    body: Any,
    headers: Optional[Mapping[str, str]] = None,
) -> OneclawError:
    """Classify a non-2xx response.

    Args:
        status_code: HTTP status code
        body: Parsed JSON body, or the raw text if it was not JSON
        headers: Response headers

    Returns:
        The classified error (never raised here)
    """
    headers = headers or {}

    if status_code == 401:
        return AuthenticationError(
            extract_message(body, "Unauthorized"),
            detail=extract_detail(body),
            status_code=status_code,
        )

    if status_code == 403:
        if _is_approval_required(body):
            return ApprovalRequiredError(
                extract_message(body, "Human approval required"),
                approval_id=_approval_id(body),
                detail=extract_detail(body),
                status_code=status_code,
            )
        return AuthenticationError(
            extract_message(body, "Forbidden"),
            detail=extract_detail(body),
            status_code=status_code,
        )

    if status_code == 402:
        try:
            requirement = parse_payment_requirement(body)
        except ValueError:
            return ServerError(
                "Malformed payment requirement",
                detail=body,
                status_code=status_code,
            )
        return PaymentRequiredError(
            requirement.description or "Payment required",
            requirement=requirement,
            status_code=status_code,
        )

    if status_code == 404:
        return NotFoundError(
            extract_message(body, "Not found"),
            detail=extract_detail(body),
            status_code=status_code,
        )

    if status_code in (400, 422):
        detail = extract_detail(body)
        message = "Validation error" if isinstance(detail, list) else extract_message(body, "Validation error")
        return ValidationError(message, detail=detail, status_code=status_code)

    if status_code == 429:
        return RateLimitError(
            extract_message(body, "Rate limit exceeded"),
            retry_after=headers.get("Retry-After") or headers.get("retry-after"),
            detail=extract_detail(body),
            status_code=status_code,
        )

    if status_code >= 500:
        return ServerError(
            extract_message(body, "Server error"),
            detail=extract_detail(body) if isinstance(body, dict) else body,
            status_code=status_code,
        )

    return ServerError(
        f"Unexpected status {status_code}",
        detail=body,
        status_code=status_code,
    )


def classify_transport_error(exc: BaseException) -> NetworkError:
    """Classify a request that produced no usable response.

    Covers every ``httpx.RequestError``: transport failures and timeouts, a
    body that cannot be decoded, and redirect loops.
    """
    if isinstance(exc, httpx.TimeoutException):
        message = "Request timed out"
    elif isinstance(exc, httpx.TransportError):
        message = f"Connection failed: {exc}"
    elif isinstance(exc, httpx.DecodingError):
        message = f"Could not decode response: {exc}"
    elif isinstance(exc, httpx.TooManyRedirects):
        message = "Too many redirects"
    else:
        message = f"Transport failure: {exc}"
    error = NetworkError(message, cause=exc)
    error.__cause__ = exc
    return error
