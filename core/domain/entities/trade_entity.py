from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import field_validator

from core.domain.entities.base_entity import MarketDataEntity

# Anything above this is past year 2286 in seconds, so it must be milliseconds.
MAX_EPOCH_SECONDS = 9_999_999_999


class TradeSide(str, Enum):
    BUY = "buy"
    SELL = "sell"


class PriceObservationEntity(MarketDataEntity):
    """
    A price row used as a trade proxy: the price table has no side or size.
    """

    id: Optional[int] = None
    timestamp: int  # epoch seconds
    price: float


class SyntheticTradeEntity(MarketDataEntity):
    """
    Trade tape entry whose side is inferred from price movement, not reported
    by the exchange.
    """

    id: Optional[int] = None
    timestamp: int
    price: float
    side: TradeSide


class TradeEventEntity(MarketDataEntity):
    """
    Realtime trade delivered by the bot feed.

    Feeds disagree on the timestamp unit, so millisecond values are floored
    to seconds on the way in.
    """

    timestamp: int
    price: float
    amount: float = 0.0

    @field_validator("timestamp", mode="before")
    @classmethod
    def _normalize_timestamp(cls, v):
        ts = int(v)
        if ts > MAX_EPOCH_SECONDS:
            return ts // 1000
        return ts

    @field_validator("amount", mode="before")
    @classmethod
    def _default_amount(cls, v):
        return 0.0 if v is None else v
