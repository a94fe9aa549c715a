from __future__ import annotations
from abc import ABC, abstractmethod
from typing import List
from core.domain.entities.price_tick_entity import PriceTickEntity
from core.domain.entities.trade_entity import PriceObservationEntity


class PriceTickRepository(ABC):
    """Read-only access to a market's price table (timestamp ms, price)."""

    @abstractmethod
    async def list_ticks_in_range(
        self, table: str, start_ms: int, end_ms: int, limit: int
    ) -> List[PriceTickEntity]:
        """Ticks with start_ms <= timestamp < end_ms, ascending by timestamp."""
        ...

    @abstractmethod
    async def list_recent_observations(
        self, table: str, start_ms: int, end_ms: int, limit: int
    ) -> List[PriceObservationEntity]:
        """Newest `limit` rows in [start_ms, end_ms), newest first, timestamps in seconds."""
        ...
