# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_fm_router

from enum import Enum
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class Tier(str, Enum):
    BIG = "big"
    MIDDLE = "middle"
    SMALL = "small"

    @property
    def alias(self) -> str:
        """Claude model alias the proxy serves this tier under."""
        return _TIER_ALIASES[self]

    @property
    def env_var(self) -> str:
        """Proxy environment variable holding the model for this tier."""
        return f"{self.value.upper()}_MODEL"

    def lower_tiers(self) -> List["Tier"]:
        """Tiers below this one, in fallback order."""
        order = list(Tier)
        return order[order.index(self) + 1 :]


_TIER_ALIASES = {
    Tier.BIG: "opus",
    Tier.MIDDLE: "sonnet",
    Tier.SMALL: "haiku",
}


class Preset(BaseModel):
    model_config = ConfigDict(frozen=True)

    big: str = Field(..., min_length=1)
    middle: str = Field(..., min_length=1)
    small: str = Field(..., min_length=1)
    label: str
    is_free_tier: bool = False

    def model_for(self, tier: Tier) -> str:
        return str(getattr(self, tier.value))


class TierMapping(BaseModel):
    tier: Tier
    alias: str
    model_id: str
    fallback: Optional[str] = None
    is_free: bool


class HealthVerdict(BaseModel):
    model_config = ConfigDict(frozen=True)

    ok: bool
    latency_ms: float = Field(..., ge=0.0)
    status_code: Optional[int] = None
    error_detail: Optional[str] = None


class DispatchResult(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    tier: Tier
    requested_model: str
    model_id: str
    attempts: Tuple[str, ...]
    tier_fallbacks: int = 0
    response: Any = None

    @property
    def used_substitute(self) -> bool:
        return self.model_id != self.requested_model
