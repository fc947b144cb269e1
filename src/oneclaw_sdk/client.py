"""
1Claw Python SDK

Client for the 1Claw secret-management API with transparent token refresh
and x402 micropayments.

Example usage:
    ```python
    from oneclaw_sdk import OneclawClient

    async with OneclawClient(api_key="ocv_...", agent_id="agent_123") as client:
        result = await client.secrets.get(vault_id, "prod/stripe/api_key")
        if result.error:
            print(result.error.type, result.error.message)
        else:
            print(result.data.value)

        # or, exception style
        vaults = (await client.vaults.list()).unwrap()
    ```
"""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Optional, Type, TypeVar, Union

import httpx
from pydantic import BaseModel

from .config import DEFAULT_BASE_URL, DEFAULT_NETWORK, DEFAULT_TIMEOUT, ClientSettings
from .models.envelope import ResponseEnvelope
from .pipeline import RequestPipeline
from .resources.agents import AgentsResource
from .resources.api_keys import ApiKeysResource
from .resources.approvals import ApprovalsResource
from .resources.audit import AuditResource
from .resources.billing import BillingResource
from .resources.org import OrgResource
from .resources.policies import PoliciesResource
from .resources.secrets import SecretsResource
from .resources.sharing import SharingResource
from .resources.vaults import VaultsResource
from .x402 import PaymentNegotiator, PaymentPolicy, X402Signer

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class OneclawClient:
    """
    1Claw API client.

    Provides access to all 1Claw API resources:
    - vaults, secrets, policies: secret storage and access control
    - agents: register agents and rotate their keys
    - sharing: share links for individual secrets
    - audit, billing: audit log and usage
    - approvals: human-in-the-loop access requests
    - api_keys, org: user API keys and organization members

    Every call returns a ``ResponseEnvelope``. Exactly one credential is
    used: a pre-authenticated ``token``, or an ``api_key`` (paired with
    ``agent_id`` for agent auth) that is exchanged for a bearer token.

    Args:
        base_url: 1Claw API base URL
        token: Pre-existing bearer token (user or agent JWT)
        api_key: User or agent API key
        agent_id: Agent ID to pair with ``api_key``
        signer: x402 signer used to pay for requests
        max_auto_pay_usd: Largest per-request price paid automatically
            (default: 0, never auto-pay)
        network: x402 network identifier (default: Base mainnet)
        timeout: Per-call timeout in seconds (default: 30)
        http_client: Pre-configured ``httpx.AsyncClient``; the caller keeps
            ownership and must close it
        settings: Complete settings object; overrides the individual arguments
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        token: Optional[str] = None,
        api_key: Optional[str] = None,
        agent_id: Optional[str] = None,
        signer: Optional[X402Signer] = None,
        max_auto_pay_usd: Union[Decimal, float, str] = Decimal("0"),
        network: str = DEFAULT_NETWORK,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: Optional[httpx.AsyncClient] = None,
        settings: Optional[ClientSettings] = None,
    ):
        if settings is None:
            settings = ClientSettings(
                base_url=base_url,
                token=token,
                api_key=api_key,
                agent_id=agent_id,
                max_auto_pay_usd=Decimal(str(max_auto_pay_usd)),
                network=network,
                timeout=timeout,
            )
        self._settings = settings
        credential = settings.credential()

        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(
            base_url=settings.base_url,
            headers={
                "Content-Type": "application/json",
                "User-Agent": settings.user_agent,
            },
            timeout=settings.timeout,
        )

        negotiator = PaymentNegotiator(
            PaymentPolicy(settings.max_auto_pay_usd, settings.network),
            signer=signer,
        )
        self._pipeline = RequestPipeline(
            self._http,
            credential,
            negotiator,
            timeout=settings.timeout,
        )

        self.vaults = VaultsResource(self)
        self.secrets = SecretsResource(self)
        self.policies = PoliciesResource(self)
        self.agents = AgentsResource(self)
        self.sharing = SharingResource(self)
        self.audit = AuditResource(self)
        self.billing = BillingResource(self)
        self.approvals = ApprovalsResource(self)
        self.api_keys = ApiKeysResource(self)
        self.org = OrgResource(self)

    @classmethod
    def from_env(cls, signer: Optional[X402Signer] = None, **overrides: Any) -> "OneclawClient":
        """Build a client from ``ONECLAW_*`` environment variables."""
        return cls(signer=signer, settings=ClientSettings(**overrides))

    @property
    def settings(self) -> ClientSettings:
        return self._settings

    @property
    def pipeline(self) -> RequestPipeline:
        return self._pipeline

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
        """Execute one API call and return its envelope."""
        return await self._pipeline.execute(
            method,
            path,
            body=body,
            params=params,
            idempotent=idempotent,
            timeout=timeout,
            model=model,
        )

    async def execute_or_raise(
        self,
        method: str,
        path: str,
        **kwargs: Any,
    ) -> Any:
        """Execute one API call and return ``data``, raising its error instead."""
        envelope = await self.execute(method, path, **kwargs)
        return envelope.unwrap()

    async def health(self) -> ResponseEnvelope[Any]:
        """Check API health status."""
        return await self.execute("GET", "/v1/health")

    def logout(self) -> None:
        """Forget the cached bearer token; the next call re-authenticates."""
        self._pipeline.credentials.invalidate()

    async def close(self) -> None:
        """Drop the cached token and close the HTTP client if we own it."""
        self._pipeline.credentials.invalidate()
        if self._owns_http and not self._http.is_closed:
            await self._http.aclose()

    async def __aenter__(self) -> "OneclawClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
