"""Base model for 1Claw SDK."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class OneclawModel(BaseModel):
    """Base model with common configuration."""

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=True,
        extra="ignore",
    )

    def to_dict(self) -> dict[str, Any]:
        """Convert model to its wire dictionary."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OneclawModel":
        """Create model from dictionary."""
        return cls.model_validate(data)


class FrozenModel(OneclawModel):
    """Immutable variant for values that must not change after construction."""

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=True,
        extra="ignore",
        frozen=True,
    )
