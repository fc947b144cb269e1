"""
1Claw SDK Resources.
"""
from .base import AsyncBaseResource, Resource
from .agents import AgentsResource
from .api_keys import ApiKeysResource
from .approvals import ApprovalsResource
from .audit import AuditResource
from .billing import BillingResource
from .org import OrgResource
from .policies import PoliciesResource
from .secrets import SecretsResource
from .sharing import SharingResource
from .vaults import VaultsResource

__all__ = [
    "AsyncBaseResource",
    "Resource",
    "AgentsResource",
    "ApiKeysResource",
    "ApprovalsResource",
    "AuditResource",
    "BillingResource",
    "OrgResource",
    "PoliciesResource",
    "SecretsResource",
    "SharingResource",
    "VaultsResource",
]
