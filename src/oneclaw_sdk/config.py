"""Configuration surface for the 1Claw client.

Settings can be passed explicitly or read from ``ONECLAW_*`` environment
variables (and an optional ``.env`` file):

    ONECLAW_BASE_URL, ONECLAW_TOKEN, ONECLAW_API_KEY, ONECLAW_AGENT_ID,
    ONECLAW_MAX_AUTO_PAY_USD, ONECLAW_NETWORK, ONECLAW_TIMEOUT
"""
from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models.auth import AgentApiKey, Credential, PreAuthenticatedToken, UserApiKey
from .models.errors import ConfigurationError

DEFAULT_BASE_URL = "https://api.1claw.xyz"
# Base mainnet
DEFAULT_NETWORK = "eip155:8453"
DEFAULT_TIMEOUT = 30.0


class ClientSettings(BaseSettings):
    """Immutable client configuration."""

    model_config = SettingsConfigDict(
        env_prefix="ONECLAW_",
        env_file=".env",
        extra="ignore",
        frozen=True,
    )

    base_url: str = DEFAULT_BASE_URL
    token: Optional[str] = Field(default=None, repr=False)
    api_key: Optional[str] = Field(default=None, repr=False)
    agent_id: Optional[str] = None
    max_auto_pay_usd: Decimal = Field(default=Decimal("0"), ge=0)
    network: str = DEFAULT_NETWORK
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    user_agent: str = "oneclaw-sdk-python/0.1.0"

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if not v:
            raise ValueError("base_url must not be empty")
        return v

    @field_validator("token", "api_key", "agent_id", mode="before")
    @classmethod
    def blank_as_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def credential(self) -> Credential:
        """Build the single active credential.

        A pre-authenticated ``token`` takes precedence over ``api_key``.

        Raises:
            ConfigurationError: If no credential is configured, or
                ``agent_id`` is set without ``api_key``.
        """
        if self.token:
            return PreAuthenticatedToken(token=self.token)
        if self.agent_id and not self.api_key:
            raise ConfigurationError("agent_id requires api_key")
        if self.api_key and self.agent_id:
            return AgentApiKey(key=self.api_key, agent_id=self.agent_id)
        if self.api_key:
            return UserApiKey(key=self.api_key)
        raise ConfigurationError("One of token or api_key is required")
