"""
1Claw Python SDK

Client for the 1Claw secret-management API: vaults, secrets, agents and
sharing, with transparent bearer-token refresh and x402 micropayments.
"""

from .client import OneclawClient
from .config import ClientSettings
from .credentials import CredentialStore
from .models.auth import AgentApiKey, PreAuthenticatedToken, UserApiKey
from .models.envelope import ResponseEnvelope, ResponseMeta
from .models.errors import (
    ApprovalRequiredError,
    AuthenticationError,
    ConfigurationError,
    ErrorType,
    NetworkError,
    NotFoundError,
    OneclawError,
    PaymentRejection,
    PaymentRequiredError,
    RateLimitError,
    ServerError,
    ValidationError,
)
from .models.x402 import PaymentOffer, PaymentPayload, PaymentReceipt, PaymentRequirement
from .pipeline import RequestPipeline
from .x402 import PaymentNegotiator, PaymentPolicy, X402Signer

__version__ = "0.1.0"

__all__ = [
    # Client
    "OneclawClient",
    "ClientSettings",
    "RequestPipeline",
    "CredentialStore",
    # Credentials
    "PreAuthenticatedToken",
    "UserApiKey",
    "AgentApiKey",
    # Envelope
    "ResponseEnvelope",
    "ResponseMeta",
    # Errors
    "OneclawError",
    "ErrorType",
    "AuthenticationError",
    "PaymentRequiredError",
    "PaymentRejection",
    "ApprovalRequiredError",
    "NotFoundError",
    "RateLimitError",
    "ValidationError",
    "ServerError",
    "NetworkError",
    "ConfigurationError",
    # x402
    "X402Signer",
    "PaymentNegotiator",
    "PaymentPolicy",
    "PaymentOffer",
    "PaymentRequirement",
    "PaymentPayload",
    "PaymentReceipt",
]
