"""Response envelope returned by every logical call."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

from .errors import OneclawError
from .x402 import PaymentReceipt

T = TypeVar("T")


@dataclass(frozen=True)
class ResponseMeta:
    """Transport metadata for the final wire response of a call."""

    status: int
    request_id: Optional[str] = None
    payment: Optional[PaymentReceipt] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"status": self.status}
        if self.request_id is not None:
            out["requestId"] = self.request_id
        if self.payment is not None:
            out["payment"] = self.payment.to_dict()
        return out


@dataclass(frozen=True)
class ResponseEnvelope(Generic[T]):
    """Uniform success/error wrapper.

    Exactly one of ``data`` and ``error`` is set. ``meta`` is set whenever a
    response was received, including error responses.
    """

    data: Optional[T] = None
    error: Optional[OneclawError] = None
    meta: Optional[ResponseMeta] = None

    def __post_init__(self) -> None:
        if (self.data is None) == (self.error is None):
            raise ValueError("ResponseEnvelope requires exactly one of data or error")

    @classmethod
    def success(cls, data: T, meta: Optional[ResponseMeta] = None) -> "ResponseEnvelope[T]":
        return cls(data=data, meta=meta)

    @classmethod
    def failure(
        cls, error: OneclawError, meta: Optional[ResponseMeta] = None
    ) -> "ResponseEnvelope[T]":
        if meta is not None:
            if error.status_code is None:
                error.status_code = meta.status
            if error.request_id is None:
                error.request_id = meta.request_id
        return cls(error=error, meta=meta)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return ``data`` or raise the classified error."""
        if self.error is not None:
            raise self.error
        return self.data  # type: ignore[return-value]

    def to_dict(self) -> dict[str, Any]:
        data = self.data
        if hasattr(data, "to_dict"):
            data = data.to_dict()
        return {
            "data": data,
            "error": self.error.to_dict() if self.error is not None else None,
            "meta": self.meta.to_dict() if self.meta is not None else None,
        }
