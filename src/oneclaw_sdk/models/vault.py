"""Vault and secret models for 1Claw SDK."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import Field

from .base import OneclawModel


class Vault(OneclawModel):
    """A vault holding encrypted secrets."""

    id: str
    name: str
    description: str = ""
    created_by: Optional[str] = None
    created_by_type: Optional[str] = None
    created_at: datetime


class VaultList(OneclawModel):
    vaults: list[Vault] = Field(default_factory=list)


class SecretMetadata(OneclawModel):
    """Secret metadata, without the value."""

    id: str
    path: str
    type: str
    version: int = 1
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    expires_at: Optional[datetime] = None


class Secret(SecretMetadata):
    """A decrypted secret."""

    value: str = Field(repr=False)
    created_by: Optional[str] = None


class SecretList(OneclawModel):
    secrets: list[SecretMetadata] = Field(default_factory=list)
