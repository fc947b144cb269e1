"""Billing and usage models for 1Claw SDK."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import Field

from .base import OneclawModel


class MonthSummary(OneclawModel):
    total_requests: int = 0
    paid_requests: int = 0
    free_requests: int = 0
    total_cost_usd: Decimal = Decimal("0")


class UsageSummary(OneclawModel):
    """Current billing tier and month-to-date usage."""

    billing_tier: str
    free_tier_limit: int
    current_month: MonthSummary


class UsageEvent(OneclawModel):
    id: str
    principal_type: str
    principal_id: str
    method: str
    endpoint: str
    status_code: int
    price_usd: Decimal = Decimal("0")
    is_paid: bool = False
    created_at: datetime


class UsageHistory(OneclawModel):
    events: list[UsageEvent] = Field(default_factory=list)
