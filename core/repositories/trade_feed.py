from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from core.domain.entities.trade_entity import TradeEventEntity


class TradeFeed(ABC):
    """
    Source of realtime trades produced by the bot process.

    Implementations keep their own cursor: each fetch_new() call returns only
    trades not returned before, in any order.
    """

    @abstractmethod
    async def fetch_new(self) -> List[TradeEventEntity]:
        raise NotImplementedError

    async def aclose(self) -> None:
        return None
