"""Share link models for 1Claw SDK."""
from __future__ import annotations

from .base import OneclawModel


class Share(OneclawModel):
    id: str
    share_url: str
