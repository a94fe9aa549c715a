from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, Field, field_validator


class MarketsOutDTO(BaseModel):
    success: bool = True
    markets: List[str]
    periods: List[str]
    periodSeconds: Dict[str, int]


class SubscriptionDTO(BaseModel):
    """
    Request DTO for live candle subscriptions.
    """
    market: str = Field(..., description="e.g. xbtusd")
    period: str = Field(default="1m", description="1m, 5m, 15m, 1h, 4h, 1d, 1w")

    @field_validator("market", "period")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = (v or "").strip().lower()
        if not v:
            raise ValueError("field is required")
        return v
