"""Error models for 1Claw SDK.

Every failed call is classified into exactly one of the error types below.
In envelope mode the error instance is returned as a value in
``ResponseEnvelope.error``; in throwing mode the same instance is raised.
"""
from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from .x402 import PaymentRequirement


class ErrorType(str, Enum):
    """Closed set of error kinds a caller can branch on."""

    AUTH = "Auth"
    PAYMENT_REQUIRED = "PaymentRequired"
    APPROVAL_REQUIRED = "ApprovalRequired"
    NOT_FOUND = "NotFound"
    RATE_LIMIT = "RateLimit"
    VALIDATION = "Validation"
    SERVER = "Server"
    NETWORK = "Network"


class PaymentRejection(str, Enum):
    """Why the client refused to pay a 402."""

    UNSUPPORTED_NETWORK = "unsupported_network"
    INVALID_OFFER = "invalid_offer"
    POLICY_LIMIT = "policy_limit"
    NO_SIGNER = "no_signer"
    SIGNER_FAILED = "signer_failed"
    ALREADY_PAID = "already_paid"


class OneclawError(Exception):
    """Base exception for 1Claw SDK."""

    type: ErrorType = ErrorType.SERVER

    def __init__(
        self,
        message: str,
        detail: Any = None,
        status_code: Optional[int] = None,
        request_id: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.detail = detail
        self.status_code = status_code
        self.request_id = request_id

    def __str__(self) -> str:
        return f"[{self.type.value}] {self.message}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, status_code={self.status_code})"

    def to_dict(self) -> dict[str, Any]:
        """Convert error to the envelope ``error`` shape."""
        out: dict[str, Any] = {"type": self.type.value, "message": self.message}
        if self.detail is not None:
            out["detail"] = self.detail
        return out


class AuthenticationError(OneclawError):
    """Credentials were rejected or could not be exchanged."""

    type = ErrorType.AUTH

    def __init__(self, message: str = "Authentication failed", **kwargs: Any):
        super().__init__(message, **kwargs)


class PaymentRequiredError(OneclawError):
    """The request needs an x402 payment the client did not (or could not) make."""

    type = ErrorType.PAYMENT_REQUIRED

    def __init__(
        self,
        message: str = "Payment required",
        requirement: Optional["PaymentRequirement"] = None,
        reason: Optional[PaymentRejection] = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.requirement = requirement
        self.reason = reason

    def to_dict(self) -> dict[str, Any]:
        out = super().to_dict()
        if self.reason is not None:
            out["reason"] = self.reason.value
        if self.requirement is not None:
            out["requirement"] = self.requirement.to_dict()
        return out


class ApprovalRequiredError(OneclawError):
    """A human must approve access before the request can succeed."""

    type = ErrorType.APPROVAL_REQUIRED

    def __init__(
        self,
        message: str = "Human approval required",
        approval_id: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.approval_id = approval_id

    def to_dict(self) -> dict[str, Any]:
        out = super().to_dict()
        if self.approval_id is not None:
            out["approval_id"] = self.approval_id
        return out


class NotFoundError(OneclawError):
    """Resource not found."""

    type = ErrorType.NOT_FOUND


class RateLimitError(OneclawError):
    """Rate limit exceeded."""

    type = ErrorType.RATE_LIMIT

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        retry_after: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.retry_after = retry_after

    def to_dict(self) -> dict[str, Any]:
        out = super().to_dict()
        if self.retry_after is not None:
            out["retry_after"] = self.retry_after
        return out


class ValidationError(OneclawError):
    """The server rejected the request body or parameters."""

    type = ErrorType.VALIDATION


class ServerError(OneclawError):
    """Server failure, or a response the client could not interpret."""

    type = ErrorType.SERVER


class NetworkError(OneclawError):
    """No response was received."""

    type = ErrorType.NETWORK

    def __init__(
        self,
        message: str = "Network error",
        cause: Optional[BaseException] = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.cause = cause


class ConfigurationError(ValueError):
    """The client was constructed with an invalid combination of settings."""


ERROR_MAP: dict[ErrorType, type[OneclawError]] = {
    ErrorType.AUTH: AuthenticationError,
    ErrorType.PAYMENT_REQUIRED: PaymentRequiredError,
    ErrorType.APPROVAL_REQUIRED: ApprovalRequiredError,
    ErrorType.NOT_FOUND: NotFoundError,
    ErrorType.RATE_LIMIT: RateLimitError,
    ErrorType.VALIDATION: ValidationError,
    ErrorType.SERVER: ServerError,
    ErrorType.NETWORK: NetworkError,
}
