"""1Claw SDK Models."""
from .base import OneclawModel
from .auth import (
    AgentApiKey,
    CachedToken,
    Credential,
    PreAuthenticatedToken,
    TokenResponse,
    UserApiKey,
)
from .x402 import PaymentOffer, PaymentPayload, PaymentReceipt, PaymentRequirement
from .envelope import ResponseEnvelope, ResponseMeta
from .errors import (
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
from .vault import Secret, SecretList, SecretMetadata, Vault, VaultList
from .policy import Policy, PolicyList
from .agent import Agent, AgentCreated, AgentKeyRotated, AgentList
from .share import Share
from .audit import AuditEvent, AuditEvents
from .billing import MonthSummary, UsageEvent, UsageHistory, UsageSummary
from .approval import Approval, ApprovalList, ApprovalStatus
from .api_key import ApiKey, ApiKeyCreated, ApiKeyList
from .org import OrgMember, OrgMemberList

__all__ = [
    "OneclawModel",
    "AgentApiKey",
    "CachedToken",
    "Credential",
    "PreAuthenticatedToken",
    "TokenResponse",
    "UserApiKey",
    "PaymentOffer",
    "PaymentPayload",
    "PaymentReceipt",
    "PaymentRequirement",
    "ResponseEnvelope",
    "ResponseMeta",
    "ApprovalRequiredError",
    "AuthenticationError",
    "ConfigurationError",
    "ErrorType",
    "NetworkError",
    "NotFoundError",
    "OneclawError",
    "PaymentRejection",
    "PaymentRequiredError",
    "RateLimitError",
    "ServerError",
    "ValidationError",
    "Secret",
    "SecretList",
    "SecretMetadata",
    "Vault",
    "VaultList",
    "Policy",
    "PolicyList",
    "Agent",
    "AgentCreated",
    "AgentKeyRotated",
    "AgentList",
    "Share",
    "AuditEvent",
    "AuditEvents",
    "MonthSummary",
    "UsageEvent",
    "UsageHistory",
    "UsageSummary",
    "Approval",
    "ApprovalList",
    "ApprovalStatus",
    "ApiKey",
    "ApiKeyCreated",
    "ApiKeyList",
    "OrgMember",
    "OrgMemberList",
]
