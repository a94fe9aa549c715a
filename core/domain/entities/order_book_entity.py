from __future__ import annotations

from enum import IntEnum
from typing import List

from pydantic import Field

from core.domain.entities.base_entity import MarketDataEntity


class OrderBookAction(IntEnum):
    REMOVE = 0
    UPSERT = 1


class OrderBookEventEntity(MarketDataEntity):
    """
    One incremental row from the order-book delta table.

    The side is not stored: it is inferred from the sign of `amount` during
    reconstruction (positive = bid, otherwise ask).
    """

    timestamp_ms: int = Field(alias="timestamp")
    action: OrderBookAction
    order_id: int
    amount: float

    model_config = MarketDataEntity.model_config | {"populate_by_name": True}


class OrderLevelEntity(MarketDataEntity):
    """
    A price level. `price` is the source order id, which the store uses as
    its price representation.
    """

    price: float
    amount: float


class OrderBookSnapshotEntity(MarketDataEntity):
    """
    Best-effort order book rebuilt from a bounded window of recent deltas.

    bids are sorted by descending price, asks by ascending price.
    """

    timestamp: int = 0
    bids: List[OrderLevelEntity] = Field(default_factory=list)
    asks: List[OrderLevelEntity] = Field(default_factory=list)
