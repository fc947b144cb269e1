"""x402 payment protocol models for 1Claw SDK."""
from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Optional

from pydantic import AliasChoices, Field

from .base import FrozenModel


class PaymentOffer(FrozenModel):
    """One way of paying for a request, as advertised by the server."""

    scheme: str
    network: str
    pay_to: str = Field(alias="payTo")
    price: str
    deadline_seconds: int = Field(
        default=60,
        alias="requiredDeadlineSeconds",
        validation_alias=AliasChoices("requiredDeadlineSeconds", "deadlineSeconds"),
    )

    def price_usd(self) -> Decimal:
        """Parse the advertised price as a USD amount.

        Raises:
            ValueError: If the price is not a finite, non-negative decimal.
        """
        raw = self.price.strip().lstrip("$").strip()
        try:
            amount = Decimal(raw)
        except InvalidOperation as exc:
            raise ValueError(f"Invalid price: {self.price!r}") from exc
        if not amount.is_finite() or amount < 0:
            raise ValueError(f"Invalid price: {self.price!r}")
        return amount


class PaymentRequirement(FrozenModel):
    """Body of a 402 response describing how the request can be paid for."""

    x402_version: int = Field(alias="x402Version")
    accepts: tuple[PaymentOffer, ...] = Field(min_length=1)
    description: str = ""


class PaymentPayload(FrozenModel):
    """Signed proof of payment attached to the retried request."""

    x402_version: int = Field(alias="x402Version")
    scheme: str
    network: str
    payload: str = Field(repr=False)


class PaymentReceipt(FrozenModel):
    """Settlement receipt returned by the server after a paid request."""

    x402_version: int = Field(alias="x402Version")
    scheme: str
    network: str
    payload: str = Field(default="", repr=False)
    tx_hash: Optional[str] = Field(default=None, alias="txHash")
