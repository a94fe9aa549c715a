from __future__ import annotations

from pydantic import Field

from core.domain.entities.base_entity import MarketDataEntity


class PriceTickEntity(MarketDataEntity):
    """
    One raw price observation from the price table.

    Ticks are read in ascending timestamp order and grouped into candles by
    the aggregation service. Prices are validated there, not here, so that a
    bad row surfaces as MalformedInput rather than a pydantic error.
    """

    timestamp_ms: int = Field(alias="timestamp")
    price: float

    model_config = MarketDataEntity.model_config | {"populate_by_name": True}
