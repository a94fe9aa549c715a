from __future__ import annotations

from core.domain.entities.base_entity import MarketDataEntity


class CandleEntity(MarketDataEntity):
    """
    Represents an OHLCV candle for one instrument and period.

    `time` is the bucket start in epoch seconds and is always a multiple of the
    period width. Candles built from the price table carry volume 0 because
    the table has no per-tick size; live candles accumulate trade amounts.
    """

    time: int

    open: float
    high: float
    low: float
    close: float

    volume: float = 0.0

    @classmethod
    def flat(cls, *, time: int, price: float, volume: float = 0.0) -> "CandleEntity":
        """
        Build a candle with open == high == low == close == price.
        """
        return cls(time=int(time), open=price, high=price, low=price, close=price, volume=volume)
