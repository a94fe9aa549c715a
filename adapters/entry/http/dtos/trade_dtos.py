from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel


class TradeOutDTO(BaseModel):
    id: Optional[int] = None
    timestamp: int
    price: float
    side: str


class TradesOutDTO(BaseModel):
    """
    Response DTO for /api/trades (chronological order).
    """
    success: bool = True
    market: str
    period: str
    count: int
    trades: List[TradeOutDTO]
