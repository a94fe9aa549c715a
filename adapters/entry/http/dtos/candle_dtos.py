from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel


class CandleOutDTO(BaseModel):
    time: int
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0


class TimeRangeDTO(BaseModel):
    start: Optional[int] = None
    end: Optional[int] = None


class CandlesOutDTO(BaseModel):
    """
    Response DTO for /api/prices.
    """
    success: bool = True
    market: str
    period: str
    count: int
    candles: List[CandleOutDTO]
    timeRange: TimeRangeDTO


class FormingCandleOutDTO(BaseModel):
    """
    Response DTO for the live forming candle; candle is null until the first trade.
    """
    market: str
    period: str
    candle: Optional[CandleOutDTO] = None
