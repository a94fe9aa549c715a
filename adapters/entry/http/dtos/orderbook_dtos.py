from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel


class OrderLevelOutDTO(BaseModel):
    price: float
    amount: float


class OrderBookOutDTO(BaseModel):
    """
    Response DTO for /api/orderbook.

    `error` is set (and the book empty) when the row store was unavailable;
    `message` is set when the store answered but the window held no levels.
    """
    success: bool = True
    market: str
    timestamp: int
    bids: List[OrderLevelOutDTO]
    asks: List[OrderLevelOutDTO]
    error: Optional[str] = None
    message: Optional[str] = None
