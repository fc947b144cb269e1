"""x402 payment negotiation.

When the server answers 402 it describes one or more ways to pay. The
negotiator picks the offer on the client's network, enforces the auto-pay
limit, and asks the configured signer for a signature. The policy check
always runs before the signer is touched, so a payment the policy would
refuse never prompts a wallet.
"""
from __future__ import annotations

import asyncio
import base64
import binascii
import json
import logging
from decimal import Decimal
from typing import Optional, Protocol, Union, runtime_checkable

from .models.errors import PaymentRejection, PaymentRequiredError
from .models.x402 import PaymentOffer, PaymentPayload, PaymentReceipt, PaymentRequirement

logger = logging.getLogger(__name__)

PAYMENT_HEADER = "X-PAYMENT"
PAYMENT_RESPONSE_HEADER = "X-PAYMENT-RESPONSE"


@runtime_checkable
class X402Signer(Protocol):
    """Wallet capability used to pay for requests.

    Implement this with any wallet library. The SDK only ever sees the
    address and the returned signature.
    """

    async def get_address(self) -> str:
        """The address that will be debited."""
        ...

    async def sign_payment(self, offer: PaymentOffer) -> Union[str, bytes]:
        """Sign the terms of ``offer`` and return the signature."""
        ...


class PaymentPolicy:
    """Auto-pay limits configured on the client.

    Args:
        max_auto_pay_usd: Largest price paid without asking; 0 disables auto-pay
        network: Network identifier offers must match (CAIP-2, e.g. ``eip155:8453``)
    """

    def __init__(self, max_auto_pay_usd: Decimal, network: str) -> None:
        if max_auto_pay_usd < 0:
            raise ValueError("max_auto_pay_usd must be non-negative")
        self.max_auto_pay_usd = max_auto_pay_usd
        self.network = network

    def __repr__(self) -> str:
        return f"PaymentPolicy(max_auto_pay_usd={self.max_auto_pay_usd}, network={self.network!r})"


def select_offer(requirement: PaymentRequirement, network: str) -> Optional[PaymentOffer]:
    """Return the first offer on ``network``, in server order."""
    for offer in requirement.accepts:
        if offer.network == network:
            return offer
    return None


def encode_signature(signature: Union[str, bytes]) -> str:
    if isinstance(signature, (bytes, bytearray)):
        return "0x" + bytes(signature).hex()
    return signature


def build_payment_payload(
    requirement: PaymentRequirement,
    offer: PaymentOffer,
    signature: Union[str, bytes],
) -> PaymentPayload:
    return PaymentPayload(
        x402_version=requirement.x402_version,
        scheme=offer.scheme,
        network=offer.network,
        payload=encode_signature(signature),
    )


def encode_payment_header(payload: PaymentPayload) -> str:
    """Encode a payload for the ``X-PAYMENT`` header.

    Compact JSON with sorted keys, then standard base64, so equal payloads
    always encode to equal bytes.
    """
    raw = json.dumps(payload.to_dict(), separators=(",", ":"), sort_keys=True)
    return base64.b64encode(raw.encode("utf-8")).decode("ascii")


def decode_payment_header(value: str) -> PaymentPayload:
    return PaymentPayload.model_validate(json.loads(base64.b64decode(value, validate=True)))


def decode_payment_receipt(value: str) -> PaymentReceipt:
    """Decode an ``X-PAYMENT-RESPONSE`` header.

    Raises:
        ValueError: If the header is not base64-encoded receipt JSON
    """
    try:
        decoded = json.loads(base64.b64decode(value, validate=True))
    except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ValueError("Payment receipt is not base64 JSON") from exc
    return PaymentReceipt.model_validate(decoded)


class PaymentNegotiator:
    """Turns a payment requirement into a signed payment payload.

    Args:
        policy: Auto-pay limit and network
        signer: Wallet signer; without one every 402 is returned to the caller
    """

    def __init__(self, policy: PaymentPolicy, signer: Optional[X402Signer] = None) -> None:
        self.policy = policy
        self.signer = signer

    def _reject(
        self,
        requirement: PaymentRequirement,
        reason: PaymentRejection,
        message: str,
        detail: object = None,
    ) -> PaymentRequiredError:
        logger.warning("Payment not attempted: %s", message)
        return PaymentRequiredError(
            message,
            requirement=requirement,
            reason=reason,
            detail=detail,
        )

    async def negotiate(
        self,
        requirement: PaymentRequirement,
        timeout: Optional[float] = None,
    ) -> PaymentPayload:
        """Produce a payment payload for ``requirement``.

        Args:
            requirement: The 402 requirement received for this call
            timeout: Upper bound for the signer, in seconds

        Returns:
            The payload to attach to the single retried request

        Raises:
            PaymentRequiredError: If the offer is unsupported, over the
                auto-pay limit, or signing fails. ``reason`` says which.
        """
        offer = select_offer(requirement, self.policy.network)
        if offer is None:
            networks = sorted({o.network for o in requirement.accepts})
            raise self._reject(
                requirement,
                PaymentRejection.UNSUPPORTED_NETWORK,
                f"No payment offer for network {self.policy.network}",
                detail={"offered_networks": networks},
            )

        try:
            price = offer.price_usd()
        except ValueError as exc:
            raise self._reject(requirement, PaymentRejection.INVALID_OFFER, str(exc)) from exc

        if price > self.policy.max_auto_pay_usd:
            raise self._reject(
                requirement,
                PaymentRejection.POLICY_LIMIT,
                f"Price {price} USD exceeds auto-pay limit of {self.policy.max_auto_pay_usd} USD",
                detail={"price": str(price), "max_auto_pay_usd": str(self.policy.max_auto_pay_usd)},
            )

        if self.signer is None:
            raise self._reject(requirement, PaymentRejection.NO_SIGNER, "No x402 signer configured")

        logger.info("Signing x402 payment of %s USD on %s", price, offer.network)
        try:
            signature = await asyncio.wait_for(self.signer.sign_payment(offer), timeout)
        except asyncio.TimeoutError as exc:
            raise self._reject(
                requirement, PaymentRejection.SIGNER_FAILED, "Signer timed out"
            ) from exc
        except Exception as exc:
            raise self._reject(
                requirement, PaymentRejection.SIGNER_FAILED, f"Signer failed: {exc}"
            ) from exc

        if not isinstance(signature, (str, bytes, bytearray)):
            raise self._reject(
                requirement,
                PaymentRejection.SIGNER_FAILED,
                f"Signer returned {type(signature).__name__}, expected str or bytes",
            )
        if not signature:
            raise self._reject(
                requirement, PaymentRejection.SIGNER_FAILED, "Signer returned an empty signature"
            )

        return build_payment_payload(requirement, offer, signature)
